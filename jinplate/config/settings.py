import os
from dataclasses import dataclass, field
from typing import List, Optional
import structlog

from jinplate.exceptions import ConfigError

log = structlog.get_logger(__name__)

STDIO_PATH = "-"
DEFAULT_LEFT_DELIM = "{{"
DEFAULT_RIGHT_DELIM = "}}"
LEFT_DELIM_ENV_VAR = "JINPLATE_LEFT_DELIM"
RIGHT_DELIM_ENV_VAR = "JINPLATE_RIGHT_DELIM"
DEFAULT_OUTPUT_DIR = "."


def default_left_delim() -> str:
    return os.environ.get(LEFT_DELIM_ENV_VAR) or DEFAULT_LEFT_DELIM


def default_right_delim() -> str:
    return os.environ.get(RIGHT_DELIM_ENV_VAR) or DEFAULT_RIGHT_DELIM


@dataclass
class RenderConfig:
    # holds all configuration parameters for a single run.
    input: Optional[str] = None
    input_files: List[str] = field(default_factory=list)
    input_dir: Optional[str] = None
    exclude_globs: List[str] = field(default_factory=list)
    include_globs: List[str] = field(default_factory=list)
    output_files: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None
    output_map: Optional[str] = None
    templates: List[str] = field(default_factory=list)
    datasources: List[str] = field(default_factory=list)
    datasource_headers: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    left_delim: Optional[str] = None
    right_delim: Optional[str] = None

    def validate(self) -> None:
        """Rejects mutually exclusive option combinations before anything is rendered."""
        if self.input is not None and self.input_files:
            raise ConfigError("--in and --file may not be used together")

        effective_inputs = self.input_files or [STDIO_PATH]
        effective_outputs = self.output_files or [STDIO_PATH]
        if len(effective_inputs) != len(effective_outputs):
            raise ConfigError(
                f"must provide same number of --out ({len(effective_outputs)}) "
                f"as --file ({len(effective_inputs)}) options"
            )

        if self.input_dir is not None and (self.input is not None or self.input_files):
            raise ConfigError("--input-dir can not be used together with --in or --file")

        if self.output_dir is not None:
            if self.output_files:
                raise ConfigError("--output-dir can not be used together with --out")
            if self.input_dir is None:
                raise ConfigError("--input-dir must be set when --output-dir is set")

        if self.output_map is not None:
            if self.output_files or self.output_dir is not None:
                raise ConfigError("--output-map can not be used together with --out or --output-dir")
            if self.input_dir is None:
                raise ConfigError("--input-dir must be set when --output-map is set")

    def apply_defaults(self) -> "RenderConfig":
        """Fills unset options with their run-time defaults. Idempotent."""
        if self.input_dir is not None and self.output_dir is None and self.output_map is None:
            self.output_dir = DEFAULT_OUTPUT_DIR
        if self.input is None and self.input_dir is None and not self.input_files:
            self.input_files = [STDIO_PATH]
        if not self.output_files:
            self.output_files = [STDIO_PATH]
        if not self.left_delim:
            self.left_delim = default_left_delim()
        if not self.right_delim:
            self.right_delim = default_right_delim()
        return self

    def describe(self) -> str:
        # short human-readable summary used by verbose cli output.
        lines = []
        if self.input is not None:
            lines.append("input: <arg>")
        elif self.input_dir is not None:
            lines.append(f"input: {self.input_dir}")
        else:
            lines.append(f"input: {', '.join(self.input_files) or STDIO_PATH}")
        if self.output_map is not None:
            lines.append(f"output: {self.output_map!r} (mapped)")
        elif self.input_dir is not None:
            lines.append(f"output: {self.output_dir or DEFAULT_OUTPUT_DIR}")
        else:
            lines.append(f"output: {', '.join(self.output_files) or STDIO_PATH}")
        if self.datasources:
            lines.append(f"datasources: {', '.join(self.datasources)}")
        if self.contexts:
            lines.append(f"contexts: {', '.join(self.contexts)}")
        if self.templates:
            lines.append(f"templates: {', '.join(self.templates)}")
        if self.exclude_globs or self.include_globs:
            lines.append(f"excludes: {self.exclude_globs} includes: {self.include_globs}")
        lines.append(f"delimiters: {self.left_delim or default_left_delim()} {self.right_delim or default_right_delim()}")
        return "\n".join(lines)
