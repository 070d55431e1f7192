from typing import Dict, Iterable, Optional

from cinema_explorer.config.model import GlobalConfig
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.draw_scheduler import DrawScheduler
from cinema_explorer.core.view_base import BaseView
from cinema_explorer.core.view_registry import ViewRegistry

from .pcoord_view import ParallelCoordinatesView
from .scatter_view import ScatterPlotView


def default_registry() -> ViewRegistry:
    """Registry holding every built-in view."""
    registry = ViewRegistry()
    registry.register(ParallelCoordinatesView)
    registry.register(ScatterPlotView)
    return registry


def create_views(
    dataset: Dataset,
    global_config: GlobalConfig,
    registry: Optional[ViewRegistry] = None,
    view_ids: Optional[Iterable[str]] = None,
) -> Dict[str, BaseView]:
    """
    Build the views for a loaded dataset from configuration.

    - size comes from global.json (default_width / default_height)
    - filter_regex comes from the dataset's database entry, when it has one
    - all views share one DrawScheduler

    :return: views keyed by view id, in registration order
    """
    registry = registry or default_registry()
    db_config = global_config.database(dataset.name)
    filter_regex = db_config.filter_regex if db_config is not None else None
    wanted = set(view_ids) if view_ids is not None else None
    scheduler = DrawScheduler()

    views: Dict[str, BaseView] = {}
    for view_cls in registry.all_classes():
        if wanted is not None and view_cls.id not in wanted:
            continue
        views[view_cls.id] = registry.create(
            view_cls.id,
            dataset,
            width=global_config.default_width,
            height=global_config.default_height,
            filter_regex=filter_regex,
            scheduler=scheduler,
        )
    return views


__all__ = ["ParallelCoordinatesView", "ScatterPlotView", "create_views", "default_registry"]
