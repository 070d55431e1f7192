from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class DatabaseConfig:
    """
    Parsed config entry for a single Cinema database (.cdb directory).
    """

    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Database {self.index}")

    @property
    def path(self) -> Path:
        """
        Return the .cdb directory for this database.

        Supports both:
        - "path": "data/sphere.cdb"
        - legacy: "directory": "data/sphere.cdb"
        """
        raw_path = self.raw.get("path") or self.raw.get("directory")
        if raw_path is None:
            raise KeyError(f"No 'path' or 'directory' in database config: {self.raw}")
        return Path(raw_path)

    @property
    def file_prefix(self) -> str:
        return self.raw.get("file_prefix", "FILE")

    @property
    def filter_regex(self) -> Optional[str]:
        """Regex for dimensions the views should NOT show."""
        return self.raw.get("filter_regex")

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> DatabaseConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str
    databases: List[DatabaseConfig]
    data_root: Optional[Path] = None
    default_width: int = 800
    default_height: int = 400

    def database(self, name: str) -> Optional[DatabaseConfig]:
        """The config entry a dataset was loaded from, matched by name."""
        for db in self.databases:
            if db.name == name:
                return db
        return None
