import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

import yaml


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r", encoding="utf-8") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r", encoding="utf-8") as file:
        return json.load(file)


def _write_json(data: Any, filepath: Path, json_format: Dict[str, Any]) -> Path:
    """
    Writes JSON data to a file in a single step: the data is dumped to a temporary
    file in the same directory which then replaces the target.
    No file is left behind at `filepath` if serialization fails.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent
    )
    temp_filepath = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as file:
            json.dump(data, file, **json_format)
            file.write("\n")
        # mkstemp creates 0600 files
        temp_filepath.chmod(0o666 & ~_current_umask())
        temp_filepath.replace(filepath)
    except BaseException:
        temp_filepath.unlink(missing_ok=True)
        raise
    return filepath


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask
