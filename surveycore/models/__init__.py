"""Pydantic models and enumerations shared across the core."""
