"""Service registry, job logger and finish reporter dispatch."""
