"""
GridGov Unified TOML Configuration Loader

Loads all sections of gridgov.toml at startup with environment variable overrides.
Every section is a dataclass with from_dict / apply_env / validate.

Environment variable mapping:
    [governance] voting_period → GRIDGOV_VOTING_PERIOD
    [governance] min_quorum    → GRIDGOV_MIN_QUORUM
    [governance] admin         → GRIDGOV_ADMIN
    [governance] paused        → GRIDGOV_PAUSED
    [logging] level            → GRIDGOV_LOG_LEVEL
    [logging] file             → GRIDGOV_LOG_FILE
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    GOVERNANCE_ADMIN,
    GOVERNANCE_MIN_QUORUM,
    GOVERNANCE_VOTING_PERIOD,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
    LOG_LEVEL,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes")


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GovernanceConfig:
    """
    [governance] section.

    Fields:
        voting_period:  Clock ticks a proposal stays open after creation
        min_quorum:     Minimum accumulated vote weight for execution
        admin:          Identity allowed to toggle the pause flag
        paused:         Initial state of the pause flag (mutated only by
                        GovernanceEngine.set_paused afterwards)
    """
    voting_period: int = GOVERNANCE_VOTING_PERIOD
    min_quorum: int = GOVERNANCE_MIN_QUORUM
    admin: str = str(GOVERNANCE_ADMIN)
    paused: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        return cls(
            voting_period=int(data.get("voting_period", GOVERNANCE_VOTING_PERIOD)),
            min_quorum=int(data.get("min_quorum", GOVERNANCE_MIN_QUORUM)),
            admin=str(data.get("admin", GOVERNANCE_ADMIN)),
            paused=bool(data.get("paused", False)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("GRIDGOV_VOTING_PERIOD"):
            self.voting_period = int(v)
        if v := os.environ.get("GRIDGOV_MIN_QUORUM"):
            self.min_quorum = int(v)
        if v := os.environ.get("GRIDGOV_ADMIN"):
            self.admin = v
        if v := os.environ.get("GRIDGOV_PAUSED"):
            self.paused = _env_flag(v)

    def validate(self) -> None:
        if self.voting_period < 1:
            raise ConfigurationError("voting_period must be >= 1")
        if self.min_quorum < 0:
            raise ConfigurationError("min_quorum must be >= 0")
        if not self.admin:
            raise ConfigurationError("admin identity is required")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voting_period": self.voting_period,
            "min_quorum": self.min_quorum,
            "admin": self.admin,
            "paused": self.paused,
        }


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = str(LOG_LEVEL)
    console: bool = True
    highlighting: bool = bool(LOG_CONSOLE_HIGHLIGHTING)
    file_output: bool = bool(LOG_FILE_OUTPUT)
    file: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", LOG_LEVEL)).upper(),
            console=data.get("console", True),
            highlighting=data.get("highlighting", bool(LOG_CONSOLE_HIGHLIGHTING)),
            file_output=data.get("file_output", bool(LOG_FILE_OUTPUT)),
            file=data.get("file", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("GRIDGOV_LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("GRIDGOV_LOG_FILE"):
            self.file = v
            self.file_output = True

    def validate(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")


# -----------------------------------------------------------------------
# Top-level unified config
# -----------------------------------------------------------------------

@dataclass
class GridGovConfig:
    """
    Unified configuration.

    Loads every section of gridgov.toml and applies environment variable
    overrides. This is the single source of truth a host hands to
    GovernanceEngine and configure_logging.
    """
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GridGovConfig":
        """Create GridGovConfig from a parsed TOML dict."""
        return cls(
            governance=GovernanceConfig.from_dict(data.get("governance", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "GridGovConfig":
        """
        Load configuration from a TOML file.

        A missing file is not an error: defaults are used and environment
        overrides still apply.

        Raises:
            ConfigurationError: if the file is not valid TOML
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.governance.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Returns:
            True if all valid

        Raises:
            ConfigurationError: on invalid config
        """
        self.governance.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "governance": self.governance.to_dict(),
            "logging": {
                "level": self.logging.level,
                "console": self.logging.console,
                "highlighting": self.logging.highlighting,
                "file_output": self.logging.file_output,
                "file": self.logging.file,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> GridGovConfig:
    """
    Load and validate configuration.

    Resolution order:
        1. Explicit *path* argument
        2. GRIDGOV_CONFIG env var
        3. ./gridgov.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("GRIDGOV_CONFIG", "gridgov.toml")

    cfg = GridGovConfig.from_file(path)
    cfg.validate()
    return cfg
