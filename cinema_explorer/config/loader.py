from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Tuple

from cinema_explorer.config.model import DatabaseConfig, GlobalConfig
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.dataset_loader import from_config
from cinema_explorer.core.exceptions import ConfigError, DatasetLoadError
from cinema_explorer.validation.errors import FormatError

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            databases/
                sphere.json
                ...

    - ui_title: title for UI, defaults to 'Cinema Explorer'
    - data_root: root directory for relative database paths
    - default_width / default_height: size of views in pixels

    :param root: Directory containing 'global.json' and optionally 'databases/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if a config file is not valid JSON.
    """
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    databases_dir = root / "databases"
    databases: List[DatabaseConfig] = []

    if databases_dir.is_dir():
        for idx, config_file in enumerate(sorted(databases_dir.glob("*.json"))):
            raw = _read_json(config_file)
            databases.append(DatabaseConfig.from_raw(raw, source_path=config_file, index=idx))

    # Absolute data_root is used as-is, relative is resolved against root
    data_root_raw = raw_global.get("data_root")
    if data_root_raw is None:
        data_root = None
    else:
        data_root_path = Path(data_root_raw)
        data_root = data_root_path if data_root_path.is_absolute() else (root / data_root_path).resolve()

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Cinema Explorer"),
        databases=databases,
        data_root=data_root,
        default_width=int(raw_global.get("default_width", 800)),
        default_height=int(raw_global.get("default_height", 400)),
    )


def _read_json(path: Path) -> dict:
    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return raw


def load_databases(path: Path) -> Tuple[GlobalConfig, List[Dataset]]:
    """
    Load the global configuration and instantiate all Dataset objects.

    Databases that fail to load (missing/unreadable data.csv, malformed table,
    incomplete config) are skipped and logged.

    :raises RuntimeError: if no valid databases could be loaded.
    """
    global_config = load_global_config(path)

    datasets: List[Dataset] = []
    failed = 0

    for db_cfg in global_config.databases:
        try:
            ds = from_config(db_cfg, data_root=global_config.data_root)
        except (DatasetLoadError, FormatError, KeyError) as e:
            failed += 1
            logger.error(
                "Skipping database due to load error",
                extra={"dataset": db_cfg.name, "source": str(db_cfg.source_path), "error": str(e)},
            )
            continue
        datasets.append(ds)

    logger.info(
        "Loaded databases",
        extra={"loaded": len(datasets), "failed": failed, "config_root": str(path)},
    )

    if not datasets:
        raise RuntimeError(f"No valid databases could be loaded from {path}")

    return global_config, datasets
