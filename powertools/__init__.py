"""Refactoring helpers: import analysis, batch replacement, previews, renaming and transactional edits."""

__version__ = "0.3.1"