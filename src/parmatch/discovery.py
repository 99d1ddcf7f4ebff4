"""
Source file discovery.

Expands the command-line roots into the ordered list of files both passes
scan. The order is deterministic: roots as given, directory contents sorted.
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Set, Union

from parmatch.config import ParmatchConfig
from parmatch.errors import SourceReadError

logger = logging.getLogger(__name__)


def is_hdl_file(config: ParmatchConfig, path: Path) -> bool:
    return path.suffix.lower() in config.extensions


def is_excluded(config: ParmatchConfig, path: Path) -> bool:
    """Match exclude globs against the whole path and each part, regexes against the path."""
    path_str = path.as_posix()
    for pattern in config.exclude_globs:
        if fnmatch.fnmatch(path_str, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in path.parts):
            return True
    return any(regex.search(path_str) for regex in config.exclude_regexes)


def _walk(directory: Path) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise SourceReadError(directory, e.strerror or str(e)) from e
    for entry in entries:
        if entry.is_dir():
            yield from _walk(entry)
        elif entry.is_file():
            yield entry


def iter_source_files(roots: Iterable[Union[str, Path]], config: ParmatchConfig) -> Iterator[Path]:
    """
    Yield the HDL files under roots, each once.

    Files named directly are taken whatever their extension; files found in
    directories must carry one of the configured extensions. Exclusions
    apply to both.
    """
    seen: Set[Path] = set()
    for root in roots:
        root = Path(root)
        if root.is_file():
            candidates: Iterable[Path] = [root]
        elif root.is_dir():
            candidates = (p for p in _walk(root) if is_hdl_file(config, p))
        else:
            raise SourceReadError(root, "no such file or directory")
        for path in candidates:
            if path in seen:
                continue
            seen.add(path)
            if is_excluded(config, path):
                logger.debug("Excluding %s", path)
                continue
            yield path


def collect_source_files(roots: Iterable[Union[str, Path]], config: ParmatchConfig) -> List[Path]:
    return list(iter_source_files(roots, config))
