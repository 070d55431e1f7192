"""
Config package for cinema_explorer.

Responsible for:
- config models (GlobalConfig, DatabaseConfig)
- config I/O helpers (load_global_config / load_databases)
"""

from .model import GlobalConfig, DatabaseConfig
from .loader import load_global_config, load_databases

__all__ = ["GlobalConfig", "DatabaseConfig", "load_global_config", "load_databases"]
