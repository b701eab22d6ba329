"""
SquashLink Constants Module

This module provides centralized constants for the SquashLink application.
All magic values and configuration constants are defined here to ensure
consistency across the codebase.
"""

from .api import (
    FallbackPolicy,
    HalKeys,
    QueryParams,
    SquashAPIConfig,
    SquashEndpoints,
    SquashErrorMessages,
    SquashOperationNames,
)
from .cli import CLICommands, CLIDefaults, CLIHelp
from .http_codes import ContentTypes, HTTPHeaders, HTTPStatusCodes
from .network import CircuitBreakerConfig, NetworkConfig

__all__ = [
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CircuitBreakerConfig",
    "ContentTypes",
    "FallbackPolicy",
    "HTTPHeaders",
    "HTTPStatusCodes",
    "HalKeys",
    "NetworkConfig",
    "QueryParams",
    "SquashAPIConfig",
    "SquashEndpoints",
    "SquashErrorMessages",
    "SquashOperationNames",
]
