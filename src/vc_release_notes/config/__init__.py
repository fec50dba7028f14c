"""
Configuration loading for vc_release_notes.

Provides a loader for the optional user configuration file. See
:mod:`vc_release_notes.config.loader` for implementation details.
"""

from .loader import ConfigError, load_config  # noqa: F401
