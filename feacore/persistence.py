"""JSON save/load for structures."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from config import config
from .structure import Structure

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def structure_document(structure: Structure) -> Dict[str, Any]:
    return {
        "format_version": FORMAT_VERSION,
        "config_version": config.version,
        "structure": structure.to_dict(),
    }


def save_structure(structure: Structure, path: Union[Path, str]) -> Path:
    """Write the structure definition (not its generated surfaces) as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(structure_document(structure), indent=config.export.json_indent))
    logger.info("Saved %s to %s", structure.name, path)
    return path


def load_structure(path: Union[Path, str]) -> Structure:
    """Read a structure written by save_structure(). Surfaces need an update()."""
    data = json.loads(Path(path).read_text())
    version = data.get("format_version", FORMAT_VERSION)
    if version > FORMAT_VERSION:
        raise ValueError(f"Unsupported structure format version {version}")
    return Structure.from_dict(data["structure"])
