"""Domain models, exceptions and record store shapes."""
