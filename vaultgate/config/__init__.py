"""
VaultGate Configuration

Loads vaultgate.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    GatewayConfig,
    GatewaySectionConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "GatewayConfig",
    "GatewaySectionConfig",
    "LoggingConfig",
    "load_config",
]
