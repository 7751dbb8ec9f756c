"""Storage configuration models."""

from pathlib import Path

from pydantic import BaseModel

DEFAULT_RESULTS_DIR = Path(".s_eval/runs")


class StorageConfig(BaseModel, frozen=True):
    results_dir: Path = DEFAULT_RESULTS_DIR
    save: bool = True
