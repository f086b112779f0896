"""
VaultGate Package

Authorization gateway between a custody wallet and a single exchange.

Core imports are lazily loaded. For direct module access, import from
submodules:

    from vaultgate.gateway import ExchangeGateway
    from vaultgate.registry import AccessRegistry
    from vaultgate.exceptions import NotAuthorizedOperator
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading."""
    if name == 'ExchangeGateway':
        from .gateway import ExchangeGateway
        return ExchangeGateway
    elif name == 'AccessRegistry':
        from .registry import AccessRegistry
        return AccessRegistry
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'vaultgate' has no attribute {name!r}")

__all__ = ['ExchangeGateway', 'AccessRegistry', 'load_config']
