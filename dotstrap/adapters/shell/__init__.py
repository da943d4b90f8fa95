"""Shell adapters — subprocess execution and PATH probing."""
