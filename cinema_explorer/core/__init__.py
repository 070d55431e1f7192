"""
Core domain layer: tabular parsing, the Dataset, axis ordering, scales and
layout, the selection engine, pick-index codec, draw scheduling, the
similarity query panel, and the view capability + registry.

Import from the submodules, e.g. ``cinema_explorer.core.dataset``.
"""

__all__: list[str] = []
