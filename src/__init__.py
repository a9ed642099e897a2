"""prep-forecast source root."""
