"""JSON Schema validators for configuration and request payloads."""
