"""Interfaces implemented by adapters."""
