"""HTTP primitives — immutable Request and Response types."""
