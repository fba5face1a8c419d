"""
GridGov Unified Configuration

Loads all sections of gridgov.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    GovernanceConfig,
    GridGovConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "GovernanceConfig",
    "GridGovConfig",
    "LoggingConfig",
    "load_config",
]
