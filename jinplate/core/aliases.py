# jinplate/core/aliases.py
"""Resolves `--template` arguments into a mapping of alias to template source path."""
import os
import posixpath
from pathlib import Path
from typing import Dict, Iterable
import structlog

from jinplate.exceptions import SourceNotFoundError, DiscoveryError

log = structlog.get_logger(__name__)

TemplateAliases = Dict[str, str]


def _join(prefix: str, name: str) -> str:
    return posixpath.normpath(posixpath.join(prefix, name))


def parse_template_arg(template_arg: str, aliases: TemplateAliases) -> None:
    """Adds one `path` or `alias=path` argument to `aliases`.

    Directories contribute their immediate files only, keyed by
    `<alias or dir>/<file name>`. Later registrations of a key overwrite earlier ones.
    """
    alias, sep, path_str = template_arg.partition("=")
    if not sep:
        alias, path_str = "", template_arg

    path = Path(path_str)
    # Path("") would silently mean the working directory.
    if not path_str or not path.exists():
        raise SourceNotFoundError(f"template source not found for '{template_arg}': {path_str}")

    if path.is_dir():
        prefix = alias or path_str
        try:
            entries = sorted(os.scandir(path), key=lambda entry: entry.name)
        except OSError as e:
            raise DiscoveryError(f"failed to list template directory '{path_str}': {e}") from e
        for entry in entries:
            if entry.is_dir():  # one level only
                continue
            aliases[_join(prefix, entry.name)] = _join(path_str, entry.name)
        log.debug("template_directory_aliased", directory=path_str, prefix=prefix, entries=len(entries))
        return

    aliases[alias or path_str] = path_str


def parse_template_args(template_args: Iterable[str]) -> TemplateAliases:
    aliases: TemplateAliases = {}
    for template_arg in template_args:
        parse_template_arg(template_arg, aliases)
    log.info("template_aliases_resolved", count=len(aliases))
    return aliases
