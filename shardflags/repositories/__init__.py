"""Storage for the active configuration snapshot."""
