"""
VaultGate Registry Package

Provides:
  - AccessRegistry : operator and destination allowlists (custody wallet only)
  - RegistryEvent  : notification emitted for every accepted command
"""

from .access import (
    AccessRegistry,
    RegistryAction,
    RegistryEvent,
)

__all__ = [
    "AccessRegistry",
    "RegistryAction",
    "RegistryEvent",
]
