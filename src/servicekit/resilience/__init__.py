"""Resilience – backoff runners."""
