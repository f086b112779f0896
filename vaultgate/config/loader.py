"""
VaultGate TOML Configuration Loader

Loads vaultgate.toml with environment variable overrides
(dataclass + from_dict + from_file).

Environment variable mapping:
    [gateway] custody_wallet → VAULTGATE_CUSTODY_WALLET
    [gateway] exchange       → VAULTGATE_EXCHANGE
    [logging] level          → VAULTGATE_LOG_LEVEL
    [logging] file           → VAULTGATE_LOG_FILE
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

from ..crypto.address import require_identity
from ..exceptions import ConfigurationError, InvalidIdentity

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "vaultgate.toml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GatewaySectionConfig:
    """[gateway] section."""
    custody_wallet: str = ""
    exchange: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewaySectionConfig":
        return cls(
            custody_wallet=data.get("custody_wallet", ""),
            exchange=data.get("exchange", ""),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("VAULTGATE_CUSTODY_WALLET"):
            self.custody_wallet = v
        if v := os.environ.get("VAULTGATE_EXCHANGE"):
            self.exchange = v

    def validate(self) -> None:
        for name in ("custody_wallet", "exchange"):
            value = getattr(self, name)
            if not value:
                raise ConfigurationError(f"[gateway] {name} is not set")
            try:
                setattr(self, name, require_identity(value))
            except InvalidIdentity as e:
                raise ConfigurationError(f"[gateway] {name}: {e}") from e
        if self.custody_wallet == self.exchange:
            raise ConfigurationError("[gateway] custody_wallet and exchange must differ")


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    file: str = ""
    console_output: bool = True
    file_output: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=data.get("level", "INFO"),
            file=data.get("file", ""),
            console_output=data.get("console_output", True),
            file_output=data.get("file_output", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("VAULTGATE_LOG_LEVEL"):
            self.level = v
        if v := os.environ.get("VAULTGATE_LOG_FILE"):
            self.file = v
            self.file_output = True

    def validate(self) -> None:
        if not isinstance(self.level, str) or self.level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")

    def apply(self) -> None:
        """Reconfigure the logging system from this section."""
        from ..logger import configure_logging

        configure_logging(
            log_level=self.level,
            log_file=Path(self.file) if self.file else None,
            console_output=self.console_output,
            file_output=self.file_output,
        )


@dataclass
class GatewayConfig:
    """
    Unified gateway configuration.

    Loads every section of vaultgate.toml and applies environment variable
    overrides.
    """
    gateway: GatewaySectionConfig = field(default_factory=GatewaySectionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayConfig":
        """Create GatewayConfig from a parsed TOML dict."""
        return cls(
            gateway=GatewaySectionConfig.from_dict(data.get("gateway", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "GatewayConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides); a file that
        cannot be parsed raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.gateway.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.gateway.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "gateway": {
                "custody_wallet": self.gateway.custody_wallet,
                "exchange": self.gateway.exchange,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "console_output": self.logging.console_output,
                "file_output": self.logging.file_output,
            },
        }


def load_config(path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration.

    Resolution order:
        1. Explicit *path* argument
        2. VAULTGATE_CONFIG env var
        3. ./vaultgate.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("VAULTGATE_CONFIG", DEFAULT_CONFIG_FILE)

    return GatewayConfig.from_file(path)
