"""
Top-level package for the Cinema database explorer.

This package exposes the core architecture (data model, selection engine,
views). Most code should import from submodules such as:
    cinema_explorer.core
    cinema_explorer.views
    cinema_explorer.config
"""

__all__: list[str] = []
