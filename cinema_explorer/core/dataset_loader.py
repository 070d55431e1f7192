from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from cinema_explorer.core.axis_order import AxisOrderStore
from cinema_explorer.core.csv_parser import Grid, parse_csv
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.exceptions import DatasetLoadError
from cinema_explorer.validation.errors import FormatError

if TYPE_CHECKING:
    from cinema_explorer.config.model import DatabaseConfig

logger = logging.getLogger(__name__)

DATA_FILE = "data.csv"
AXIS_ORDER_FILE = "axis_order.csv"


def _read_table(path: Path) -> Grid:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetLoadError(f"Error loading {path.name}: {e}") from e
    return parse_csv(text)


def _load_axis_order(directory: Path, dataset: Dataset) -> Optional[AxisOrderStore]:
    """
    Load axis_order.csv if present. Problems here never abort the load:
    they are logged and the dataset proceeds without axis ordering.
    """
    path = directory / AXIS_ORDER_FILE
    if not path.is_file():
        return None

    try:
        grid = _read_table(path)
        return AxisOrderStore.from_table(grid, dataset.dimension_names)
    except (DatasetLoadError, FormatError) as e:
        logger.warning(
            "ERROR in axis_order.csv, continuing without axis ordering",
            extra={"dataset": dataset.name, "path": str(path), "error": str(e)},
        )
        return None


def load_database(
    directory: Path,
    name: Optional[str] = None,
    file_prefix: str = Dataset.DEFAULT_FILE_PREFIX,
) -> Dataset:
    """
    Materialise a Dataset from a Cinema '.cdb' directory.

    :raises DatasetLoadError: if data.csv cannot be read
    :raises FormatError: if data.csv is malformed
    """
    directory = Path(directory)
    name = name or directory.name
    data_path = directory / DATA_FILE

    if not data_path.is_file():
        raise DatasetLoadError(f"Error loading {DATA_FILE}: not found at {data_path}.")

    grid = _read_table(data_path)
    try:
        dataset = Dataset.from_table(grid, name=name, file_prefix=file_prefix, directory=directory)
    except FormatError as e:
        logger.error(
            "Invalid data.csv",
            extra={"dataset": name, "path": str(data_path), "issues": [i.code for i in e.issues]},
        )
        raise

    dataset.attach_axis_order(_load_axis_order(directory, dataset))

    logger.info(
        "Loaded database",
        extra={
            "dataset": name,
            "rows": dataset.row_count,
            "dimensions": len(dataset.dimension_names),
            "axis_ordering": dataset.has_axis_ordering,
        },
    )
    return dataset


def resolve_database_path(path: Path, data_root: Optional[Path] = None) -> Path:
    """
    Resolve a configured database path.

    Relative paths are joined onto CINEMA_EXPLORER_DATA_ROOT when set,
    otherwise onto data_root.
    """
    if path.is_absolute():
        return path

    env_root = os.environ.get("CINEMA_EXPLORER_DATA_ROOT")
    root = Path(env_root) if env_root else data_root
    if root is None:
        return path

    resolved = root / path
    # Fallback for redundant 'data/' prefix
    if not resolved.is_dir() and path.parts and path.parts[0] == "data":
        alt = root / Path(*path.parts[1:])
        if alt.is_dir():
            resolved = alt
    return resolved


def from_config(cfg: "DatabaseConfig", data_root: Optional[Path] = None) -> Dataset:
    """
    Materialise a Dataset from a DatabaseConfig.
    """
    path = resolve_database_path(cfg.path, data_root)
    return load_database(path, name=cfg.name, file_prefix=cfg.file_prefix)
