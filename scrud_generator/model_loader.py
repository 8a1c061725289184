"""
Model metadata discovery.

Reads metadata bags from YAML files. Every file holds a top-level
``models`` list; directories are scanned for ``.yaml``/``.yml`` files in
sorted order. Bags are returned raw, in discovery order, and validated later
by the resolver so that one malformed model does not hide the others.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from scrud_generator.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

METADATA_SUFFIXES = (".yaml", ".yml")


def _expand(paths: Iterable[str]) -> List[Path]:
    files: List[Path] = []
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in METADATA_SUFFIXES)
            )
        elif path.is_file():
            files.append(path)
        else:
            raise ConfigurationError(
                f"Model metadata path not found: {entry}",
                suggestions=["Check the 'models' entries of the configuration"],
            )
    return files


def load_metadata_file(path: Path) -> List[Dict[str, Any]]:
    """Read the ``models`` list of one metadata file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing model metadata file {path}: {e}") from e

    if content is None:
        logger.warning(f"Model metadata file {path} is empty")
        return []
    if not isinstance(content, dict) or not isinstance(content.get("models"), list):
        raise ConfigurationError(f"Model metadata file {path} must contain a top-level 'models' list")

    bags = []
    for index, bag in enumerate(content["models"]):
        if not isinstance(bag, dict):
            raise ConfigurationError(f"Entry {index} of {path} is not a mapping")
        bags.append(bag)
    return bags


def _matches(bag: Dict[str, Any], names: Iterable[str]) -> bool:
    name = bag.get("name")
    qualified_name = f"{bag.get('package')}.{name}"
    return any(candidate in (name, qualified_name) for candidate in names)


def discover_models(
    paths: Iterable[str],
    include: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Load metadata bags from files and directories.

    Args:
        paths: Metadata files or directories
        include: Only keep models matching these names (simple or package.Name)
        exclude: Drop models matching these names

    Raises:
        ConfigurationError: If a path is missing or a file is malformed
    """
    bags: List[Dict[str, Any]] = []
    for path in _expand(paths):
        loaded = load_metadata_file(path)
        logger.debug(f"Loaded {len(loaded)} model(s) from {path}")
        bags.extend(loaded)

    if include:
        bags = [bag for bag in bags if _matches(bag, include)]
    if exclude:
        excluded = [bag.get("name") for bag in bags if _matches(bag, exclude)]
        if excluded:
            logger.info(f"Excluded models: {excluded}")
        bags = [bag for bag in bags if not _matches(bag, exclude)]

    logger.info(f"Found {len(bags)} model(s) to process")
    return bags
