# jinplate/core/discovery/walker.py
import os
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple
import structlog

from jinplate.core.discovery.pattern_matching import (
    IGNORE_FILENAME,
    IgnoreRules,
    compile_glob_patterns_to_spec,
    is_excluded,
    process_includes,
)
from jinplate.exceptions import DiscoveryError

log = structlog.get_logger(__name__)


def _raise_walk_error(error: OSError) -> None:
    raise DiscoveryError(f"failed to list directory '{error.filename}': {error.strerror or error}") from error


def discover_templates(input_dir: Path, excludes: Sequence[str] = (),
                       includes: Sequence[str] = ()) -> Iterator[Tuple[Path, str]]:
    """Yields `(path, relative posix path)` for each template under `input_dir`.

    Traversal is depth-first with directories and files visited in name order,
    so the result is stable for a given directory state.
    """
    if not input_dir.is_dir():
        raise DiscoveryError(f"input directory '{input_dir}' does not exist or is not a directory")

    exclude_spec = compile_glob_patterns_to_spec(process_includes(includes, excludes))
    ignore_rules = IgnoreRules()
    log.info("template_discovery_started", input_dir=str(input_dir), excludes=list(excludes), includes=list(includes))

    for root, dirs, files in os.walk(str(input_dir), topdown=True, onerror=_raise_walk_error):
        root_path = Path(root)
        ignore_rules.add_directory(root_path)

        # prune ignored directories and keep the walk order deterministic.
        dirs[:] = sorted(d for d in dirs if not ignore_rules.is_ignored(root_path / d, is_dir=True))

        for file_name in sorted(files):
            if file_name == IGNORE_FILENAME:
                continue
            file_path = root_path / file_name
            if ignore_rules.is_ignored(file_path):
                log.debug("template_ignored_by_ignore_file", path=str(file_path))
                continue
            rel_path = file_path.relative_to(input_dir).as_posix()
            if is_excluded(rel_path, exclude_spec):
                log.debug("template_excluded", path=rel_path)
                continue
            yield file_path, rel_path


def list_templates(input_dir: Path, excludes: Sequence[str] = (), includes: Sequence[str] = ()) -> List[Tuple[Path, str]]:
    return list(discover_templates(input_dir, excludes, includes))
