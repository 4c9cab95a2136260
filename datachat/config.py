"""
Configuration for datachat.

Class-level constants live on ``Config``; the tunable parts (lineage relation
names, layout physics) are dataclasses so a session can be built with
overrides, e.g. from a JSON file passed to the CLI.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Tuple


class Config:
    VERSION = "1.0.0"

    # Extensions are matched case-insensitively
    SQLITE_EXTENSIONS = (".sqlite3", ".sqlite", ".db", ".s3db", ".sl3")
    DSV_SEPARATORS = {
        ".csv": ",",
        ".tsv": "\t",
    }

    # Rows shown when previewing a query result
    PREVIEW_ROWS = 100

    # Node count kept by the "Top 10 only" toggle
    TOP_N = 10


@dataclass
class LineageSchemaConfig:
    """Names of the three relations the lineage graph is built from."""
    dataset_table: str = "bank_datasets"
    dataset_id: str = "dataset_id"
    dataset_name: str = "dataset_name"
    dataset_category: str = "category"

    edge_table: str = "bank_lineage"
    edge_id: str = "lineage_id"
    edge_source: str = "source_dataset"
    edge_target: str = "target_dataset"
    edge_job: str = "job_id"

    job_table: str = "bank_jobs"
    job_id: str = "job_id"
    job_name: str = "job_name"

    def required_columns(self) -> Dict[str, Tuple[str, ...]]:
        """Table -> columns the graph builder reads."""
        return {
            self.dataset_table: (self.dataset_id, self.dataset_name, self.dataset_category),
            self.edge_table: (self.edge_id, self.edge_source, self.edge_target, self.edge_job),
            self.job_table: (self.job_id, self.job_name),
        }


@dataclass
class LayoutConfig:
    """Force simulation and node geometry settings."""
    width: float = 1100
    height: float = 1200

    link_distance: float = 150
    charge_strength: float = -100
    charge_distance_min: float = 1
    collision_padding: float = 20

    node_height: float = 30
    min_node_width: float = 80
    label_padding: float = 20
    font_size: float = 12

    alpha_min: float = 0.001
    alpha_decay: Optional[float] = None   # None: reach alpha_min in ~300 ticks
    velocity_decay: float = 0.4
    drag_alpha_target: float = 0.3
    max_iterations: int = 1000

    seed: int = 42

    def __post_init__(self):
        if self.alpha_decay is None:
            self.alpha_decay = 1 - self.alpha_min ** (1 / 300)

    @property
    def canvas_size(self) -> Tuple[float, float]:
        return self.width, self.height


@dataclass
class AppConfig:
    """Top-level session configuration."""
    lineage: LineageSchemaConfig = field(default_factory=LineageSchemaConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    top_n: int = Config.TOP_N

    @classmethod
    def from_dict(cls, data: Dict) -> "AppConfig":
        """
        Build a config from a nested dict.

        Unknown keys are ignored so a shared config.json can carry other
        sections (e.g. demo definitions).
        """
        lineage = _pick(LineageSchemaConfig, data.get("lineage", {}))
        layout = _pick(LayoutConfig, data.get("layout", {}))
        return cls(
            lineage=lineage,
            layout=layout,
            top_n=int(data.get("top_n", Config.TOP_N)),
        )

    @classmethod
    def from_json(cls, path: Path) -> "AppConfig":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def _pick(config_cls, values: Dict):
    known = {f.name for f in fields(config_cls)}
    return config_cls(**{k: v for k, v in values.items() if k in known})
