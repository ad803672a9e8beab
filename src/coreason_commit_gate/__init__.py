"""
Coreason Commit Gate: fail-fast git pre-commit and commit-msg checks.
"""

__version__ = "0.1.0"
