"""
SquashLink - Resilient SquashTM Access Layer

Connects a test-automation tool to a SquashTM test-management server with
retry, rate-limit, circuit-breaker and token-expiry handling, and exposes the
project / folder / test-case hierarchy as a lazily expandable tree.
"""

__version__ = "0.1.0"
__author__ = "SquashLink Team"

__all__ = ["__version__"]
