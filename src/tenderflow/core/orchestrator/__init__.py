"""Orchestrator - request pipeline and engine operations."""

from .pipeline import Checks, RequestContext
from .service import Orchestrator

__all__ = [
    "Checks",
    "Orchestrator",
    "RequestContext",
]
