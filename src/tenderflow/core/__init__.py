"""Core engine: authorization, versioning and request orchestration."""
