"""
Commit Generator - generate commit messages from staged git changes.
"""

__version__ = "0.1.0"
