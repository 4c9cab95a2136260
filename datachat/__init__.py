"""datachat: load tabular data into an in-memory store and explore dataset lineage."""

from .config import AppConfig, Config, LayoutConfig, LineageSchemaConfig
from .session import DataChatSession

__version__ = Config.VERSION

__all__ = [
    "AppConfig",
    "Config",
    "LayoutConfig",
    "LineageSchemaConfig",
    "DataChatSession",
]
