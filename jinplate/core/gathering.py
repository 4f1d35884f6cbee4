# jinplate/core/gathering.py
"""
Turns the configured input mode (inline string, file list or input directory)
into an ordered list of template descriptors with resolved destinations.
"""
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import structlog

from jinplate.config.settings import RenderConfig, STDIO_PATH
from jinplate.core.discovery import discover_templates
from jinplate.core.naming import OutputNamer
from jinplate.core.output import OutputTarget
from jinplate.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

ARG_TEMPLATE_NAME = "<arg>"
STDIN_TEMPLATE_NAME = "<stdin>"


@dataclass
class TemplateDescriptor:
    name: str
    contents: str
    target: OutputTarget
    source: Optional[Path] = None


def read_template_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DiscoveryError(f"failed to read template '{path}': {e}") from e


def file_to_template(in_file: str, out_file: str) -> TemplateDescriptor:
    if in_file == STDIO_PATH:
        log.debug("reading_template_from_stdin")
        return TemplateDescriptor(STDIN_TEMPLATE_NAME, sys.stdin.read(), OutputTarget.for_path(out_file))
    path = Path(in_file)
    return TemplateDescriptor(in_file, read_template_source(path), OutputTarget.for_path(out_file), source=path)


def walk_dir(input_dir: str, namer: OutputNamer, excludes=(), includes=()) -> List[TemplateDescriptor]:
    root = Path(input_dir)
    templates: List[TemplateDescriptor] = []
    for file_path, rel_path in discover_templates(root, excludes, includes):
        out_path = namer(rel_path)
        try:
            Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DiscoveryError(f"failed to create output directory for '{out_path}': {e}") from e
        templates.append(TemplateDescriptor(
            name=str(file_path),
            contents=read_template_source(file_path),
            target=OutputTarget.for_path(out_path),
            source=file_path,
        ))
    return templates


def gather_templates(config: RenderConfig, namer: OutputNamer) -> List[TemplateDescriptor]:
    """Collects every template for the run. Either all of them are returned or an error is raised."""
    config.apply_defaults()
    if config.input is not None:
        templates = [TemplateDescriptor(ARG_TEMPLATE_NAME, config.input, OutputTarget.for_path(config.output_files[0]))]
    elif config.input_dir is not None:
        templates = walk_dir(config.input_dir, namer, config.exclude_globs, config.include_globs)
    else:
        templates = [
            file_to_template(in_file, out_file)
            for in_file, out_file in zip(config.input_files, config.output_files)
        ]
    log.info("templates_gathered", count=len(templates))
    return templates
