#!/usr/bin/env python
"""
Thin wrapper script to invoke the vc_release_notes CLI.

Running ``python git_release.py`` is equivalent to running the
``git-release`` console script installed via ``pyproject.toml``.
"""

from vc_release_notes.cli import main


if __name__ == "__main__":
    main(prog_name="git-release")
