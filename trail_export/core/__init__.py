"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (MIME types, style ids, layer ids)
- exceptions: Custom exception hierarchy
"""
