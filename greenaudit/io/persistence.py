"""File persistence utilities for greenaudit.

Atomic JSON writes (write-to-temp-then-rename), tolerant JSON/YAML loading,
and per-job output directories. No business logic; file I/O only.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import yaml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class _ReportEncoder(json.JSONEncoder):
    """JSON encoder that handles dataclasses, datetimes, and Path objects."""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(data: Any, path: PathLike, indent: int = 2) -> None:
    """Atomically write data to a JSON file.

    Creates parent directories if they do not exist. A reader never observes a
    partially written file.

    Args:
        data: Dicts, lists, dataclasses (e.g. AggregatedReport), datetimes, paths.
        path: Output file path.
        indent: JSON indentation level.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        serialized = json.dumps(data, indent=indent, ensure_ascii=False, cls=_ReportEncoder)
    except (TypeError, ValueError) as exc:
        logger.error("JSON serialization failed for %s: %s", path, exc)
        raise

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp.write(serialized)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        os.unlink(tmp_path)
        logger.error("Atomic rename failed for %s: %s", path, exc)
        raise

    logger.debug("Saved JSON to %s (%d bytes)", path, len(serialized))


def load_json(path: PathLike) -> Optional[Any]:
    """Load a JSON file; None if it is missing or unparseable."""
    path = Path(path)
    if not path.exists():
        logger.debug("JSON file not found: %s", path)
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to load JSON from %s: %s", path, exc)
        return None


def load_structured(path: PathLike) -> Optional[Any]:
    """Load a .json, .yaml or .yml file; None if it is missing or unparseable."""
    path = Path(path)
    if path.suffix.lower() not in (".yaml", ".yml"):
        return load_json(path)
    if not path.exists():
        logger.debug("YAML file not found: %s", path)
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as exc:
        logger.warning("Failed to load YAML from %s: %s", path, exc)
        return None


def ensure_output_dir(base_dir: PathLike, job_id: str) -> Path:
    """Create and return the output directory for one assessment job."""
    job_dir = Path(base_dir) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)
    return job_dir
