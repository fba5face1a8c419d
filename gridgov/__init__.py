"""
GridGov Package

Core imports are lazily loaded so that importing a submodule does not pull
in (and auto-configure) the logging stack. For direct module access, import
from submodules:

    from gridgov.governance import GovernanceEngine, ManualClock
    from gridgov.config import load_config
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading."""
    if name in ("GovernanceEngine", "GovernanceResult"):
        from .governance import engine
        return getattr(engine, name)
    elif name == "load_config":
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'gridgov' has no attribute {name!r}")

__all__ = ['GovernanceEngine', 'GovernanceResult', 'load_config']
