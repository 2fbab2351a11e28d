# Core package initialization
# Shared configuration, errors, logging and validation helpers

from . import config, exceptions, validation

__all__ = [
    "config",
    "exceptions",
    "validation",
]
