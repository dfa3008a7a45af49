"""Kernel – error taxonomy and cancellation context."""
