"""Small shared helpers (filename slugs)."""
