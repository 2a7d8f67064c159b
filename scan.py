import logging
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

suffixes = (".jpeg", ".jpg", ".png")


class PathNotFound(FileNotFoundError):
    pass


class OutputIsSource(ValueError):
    pass


class Found(NamedTuple):
    path: Path
    relative: Path


def find_images(source, exclude=None):
    """Recursively list images under ``source``, skipping anything in ``exclude``."""
    source = Path(source)

    if not source.is_dir():
        raise PathNotFound(f'Source directory not found: "{source}"')

    root = source.resolve()
    exclude = Path(exclude).resolve() if exclude else None

    if exclude == root:
        raise OutputIsSource(f'Output directory is the source directory: "{source}"')

    if exclude and not exclude.is_relative_to(root):
        exclude = None

    files = []

    for file in source.rglob("*"):
        if file.suffix.lower() not in suffixes or not file.is_file():
            continue

        if exclude and file.resolve().is_relative_to(exclude):
            logger.debug(f'Skipping "{file}" inside the output directory')
            continue

        files.append(Found(file, file.relative_to(source)))

    return sorted(files, key=lambda f: f.relative)
