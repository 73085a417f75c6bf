"""
Dataset Loading
Reads the border pair list from JSON.
"""
import json
import logging
import os
from importlib.resources import files
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DATASET = "borders.json"


class DatasetError(ValueError):
    """Raised when a dataset file cannot be read or has the wrong shape."""


def _read_text(path: Optional[str]) -> Tuple[str, str]:
    if path is None:
        origin = f"<bundled {DEFAULT_DATASET}>"
        try:
            resource = files("bordergraph.resources").joinpath(DEFAULT_DATASET)
            return resource.read_text(encoding="utf-8"), origin
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetError(f"Cannot read dataset {origin}: {e}") from e

    if not os.path.exists(path):
        raise DatasetError(f"Dataset not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read(), path
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetError(f"Cannot read dataset {path}: {e}") from e


def parse_border_pairs(data: object) -> List[Tuple[str, str]]:
    """
    Validate decoded JSON as a list of [source, target] string pairs.

    Raises:
        DatasetError: With the index of the first offending entry.
    """
    if not isinstance(data, list):
        raise DatasetError(f"Expected a list of pairs, got {type(data).__name__}.")

    pairs: List[Tuple[str, str]] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise DatasetError(f"Entry {i} is not a [source, target] pair: {entry!r}")
        source, target = entry
        if not isinstance(source, str) or not isinstance(target, str) or not source or not target:
            raise DatasetError(f"Entry {i} must hold two non-empty strings: {entry!r}")
        pairs.append((source, target))
    return pairs


def load_border_pairs(path: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Load border pairs from `path`, or the bundled dataset when `path` is None.
    """
    text, origin = _read_text(path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON in {origin}: {e}") from e

    pairs = parse_border_pairs(data)
    logger.info(f"Loaded {len(pairs)} border pairs from {origin}")
    return pairs
