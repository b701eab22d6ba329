"""SquashLink Shared Module.

This package contains shared constants, error handling, structured logging
and the SquashTM resource models used across SquashLink.
"""

__all__ = ["constants", "errors", "logging", "models"]
