"""Service layer: conversions, documents and request validation."""
