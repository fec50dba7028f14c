"""
Top-level package for vc_release_notes.

This package exposes the main CLI entry point via the
``vc_release_notes.cli`` module.
"""

__all__ = ["__version__", "__base_version__"]

# Version used when the package does not run from a tagged checkout
__base_version__ = "0.1.0"

try:
    from vc_release_notes._version import generate_version
    __version__ = generate_version(__base_version__)
except Exception:
    # Fallback if version generation fails (e.g., git is not installed)
    __version__ = __base_version__
