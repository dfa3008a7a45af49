"""Adapters – integrations with httpx and FastAPI."""
