"""
Infrastructure layer package.

This package contains modules for interacting with the outside world:
- File content loading
- Project persistence
- Logging configuration
- Path utilities
"""
