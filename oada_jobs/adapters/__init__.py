"""Record store and notification adapters."""
