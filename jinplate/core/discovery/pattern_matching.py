# jinplate/core/discovery/pattern_matching.py
from pathlib import Path
from typing import Optional, List, Sequence
import pathspec
import structlog

from jinplate.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

IGNORE_FILENAME = ".jinplateignore"
EXCLUDE_EVERYTHING = "*"


def process_includes(includes: Sequence[str], excludes: Sequence[str]) -> List[str]:
    # includes are expressed as excludes: everything is excluded first, the user's
    # excludes follow, and each include is re-admitted last so it wins over both.
    if not includes:
        return list(excludes)
    patterns = [EXCLUDE_EVERYTHING]
    patterns.extend(excludes)
    patterns.extend(f"!{include}" for include in includes)
    return patterns


def compile_glob_patterns_to_spec(glob_patterns: Sequence[str]) -> Optional[pathspec.PathSpec]:
    # compiles a list of glob patterns into a pathspec object for matching.
    if not glob_patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, glob_patterns)
    except Exception as e:
        raise DiscoveryError(f"error compiling glob patterns {list(glob_patterns)}: {e}") from e


def load_ignore_spec(directory: Path) -> Optional[pathspec.PathSpec]:
    # loads and compiles the ignore file of a directory, if there is one.
    ignore_file = directory / IGNORE_FILENAME
    if not ignore_file.is_file():
        return None
    try:
        with ignore_file.open("r", encoding="utf-8") as f_obj:
            spec = pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, f_obj)
    except OSError as e:
        raise DiscoveryError(f"failed to read ignore file '{ignore_file}': {e}") from e
    log.debug("loaded_ignore_file", path=str(ignore_file))
    return spec


class IgnoreRules:
    """Ignore files found while walking, each applied relative to its own directory."""

    def __init__(self):
        self._specs: List[tuple] = []

    def add_directory(self, directory: Path) -> None:
        spec = load_ignore_spec(directory)
        if spec is not None:
            self._specs.append((directory, spec))

    def is_ignored(self, path: Path, is_dir: bool = False) -> bool:
        for directory, spec in self._specs:
            try:
                rel = path.relative_to(directory).as_posix()
            except ValueError:
                continue
            if is_dir:
                rel += "/"
            if spec.match_file(rel):
                return True
        return False


def is_excluded(rel_path: str, exclude_spec: Optional[pathspec.PathSpec]) -> bool:
    return exclude_spec is not None and exclude_spec.match_file(rel_path)
