"""Loading of the augmentation YAML tables."""

import logging
from pathlib import Path
from typing import Optional, TypeVar

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"

T = TypeVar("T", bound=BaseModel)


def load_table(filename: str, model: type[T], definitions_dir: Optional[Path] = None) -> T:
    """Parse definitions/<filename> into ``model``.

    A missing or malformed table is a packaging error, so failures propagate.
    """
    path = (definitions_dir or DEFINITIONS_DIR) / filename
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    table = model(**data)
    logger.debug(f"Loaded {model.__name__} from {path.name}")
    return table
