# Core package initialization
# Configuration, logging, error taxonomy and security helpers

from . import config, exceptions, security, validation

__all__ = [
    "config",
    "exceptions",
    "security",
    "validation",
]
