"""Core: config, constants, and store selection.

Single place for settings, shared constants, and the named store registry.
"""

from memocache.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
