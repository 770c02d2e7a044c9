"""Core layer — logging and local document persistence.

This package is framework-agnostic. It must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.logger import WrapperLogger
from core.store import COLLECTIONS, DocumentStore, Storage

__all__ = [
    "WrapperLogger",
    "COLLECTIONS",
    "DocumentStore",
    "Storage",
]
