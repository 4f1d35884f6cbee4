# jinplate/core/datasources.py
"""
Named data sources: parses `alias=URL` declarations and fetches, parses and
caches their contents on first use.

Supported URL schemes are `file` (the default for plain paths), `env`,
`stdin`, `http` and `https`.
"""
import csv
import io
import json
import os
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import SplitResult, parse_qs, urlsplit, urlunsplit

import structlog
import toml
import yaml

from jinplate.exceptions import ConfigError, DataSourceError

log = structlog.get_logger(__name__)

JSON_MIMETYPE = "application/json"
YAML_MIMETYPE = "application/yaml"
TOML_MIMETYPE = "application/toml"
CSV_MIMETYPE = "text/csv"
TEXT_MIMETYPE = "text/plain"

EXTENSION_MIMETYPES = {
    ".json": JSON_MIMETYPE,
    ".yaml": YAML_MIMETYPE,
    ".yml": YAML_MIMETYPE,
    ".toml": TOML_MIMETYPE,
    ".csv": CSV_MIMETYPE,
    ".txt": TEXT_MIMETYPE,
}
MIMETYPE_ALIASES = {
    "text/json": JSON_MIMETYPE,
    "application/x-yaml": YAML_MIMETYPE,
    "text/yaml": YAML_MIMETYPE,
    "application/x-toml": TOML_MIMETYPE,
}

HTTP_TIMEOUT_SECONDS = 30


@dataclass
class DataSource:
    alias: str
    url: SplitResult
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def scheme(self) -> str:
        return self.url.scheme

    def query_type(self) -> Optional[str]:
        values = parse_qs(self.url.query).get("type")
        return values[0] if values else None


def _parse_source_url(raw: str) -> SplitResult:
    url = urlsplit(raw)
    # no scheme means a local file path, relative to the working directory.
    if not url.scheme:
        path = Path(url.path).absolute()
        return SplitResult("file", "", path.as_posix(), url.query, "")
    return url


def parse_source(declaration: str) -> DataSource:
    """Parses an `alias=URL` declaration; a bare URL takes its alias from the file name."""
    alias, sep, raw_url = declaration.partition("=")
    if not sep:
        alias, raw_url = "", declaration
    alias = alias.strip()
    if not raw_url:
        raise ConfigError(f"invalid datasource declaration '{declaration}': missing URL")
    url = _parse_source_url(raw_url)
    if not alias:
        alias = PurePosixPath(url.path).stem
    if not alias:
        raise ConfigError(f"invalid datasource declaration '{declaration}': no alias could be derived")
    return DataSource(alias=alias, url=url)


def parse_header(declaration: str) -> Tuple[str, str, str]:
    """Parses an `alias=Name: value` header declaration."""
    alias, sep, header = declaration.partition("=")
    name, colon, value = header.partition(":")
    if not sep or not colon or not alias.strip() or not name.strip():
        raise ConfigError(f"invalid datasource header '{declaration}': expected alias=Name: value")
    return alias.strip(), name.strip(), value.strip()


def _normalize_mimetype(mimetype: str) -> str:
    base = mimetype.split(";", 1)[0].strip().lower()
    if base.endswith("+json"):
        return JSON_MIMETYPE
    return MIMETYPE_ALIASES.get(base, base)


def parse_content(text: str, mimetype: str) -> Any:
    mimetype = _normalize_mimetype(mimetype)
    if mimetype == JSON_MIMETYPE:
        return json.loads(text)
    if mimetype == YAML_MIMETYPE:
        return yaml.safe_load(text)
    if mimetype == TOML_MIMETYPE:
        return toml.loads(text)
    if mimetype == CSV_MIMETYPE:
        return [row for row in csv.reader(io.StringIO(text))]
    return text


class Data:
    """The set of declared data sources for one run, with a per-alias value cache."""

    def __init__(self, sources: Optional[Dict[str, DataSource]] = None):
        self.sources: Dict[str, DataSource] = dict(sources or {})
        self._raw_cache: Dict[str, Tuple[str, str]] = {}
        self._value_cache: Dict[str, Any] = {}

    @classmethod
    def from_declarations(cls, declarations: Iterable[str], header_declarations: Iterable[str] = ()) -> "Data":
        sources: Dict[str, DataSource] = {}
        for declaration in declarations:
            source = parse_source(declaration)
            sources[source.alias] = source  # later declarations win
        for header_declaration in header_declarations:
            alias, name, value = parse_header(header_declaration)
            if alias not in sources:
                log.warning("datasource_header_for_unknown_alias", alias=alias, header=name)
                continue
            sources[alias].headers[name] = value
        log.info("datasources_declared", aliases=list(sources))
        return cls(sources)

    def exists(self, alias: str) -> bool:
        return alias in self.sources

    def _source(self, alias: str) -> DataSource:
        try:
            return self.sources[alias]
        except KeyError:
            raise DataSourceError(f"undefined datasource '{alias}'") from None

    def read(self, alias: str) -> Tuple[str, str]:
        """Returns `(mimetype, text)` for the alias, reading it at most once per run."""
        if alias in self._raw_cache:
            return self._raw_cache[alias]
        source = self._source(alias)
        reader = _READERS.get(source.scheme)
        if reader is None:
            raise DataSourceError(f"datasource '{alias}' uses unsupported scheme '{source.scheme}'")
        log.debug("reading_datasource", alias=alias, scheme=source.scheme)
        try:
            mimetype, text = reader(source)
        except DataSourceError:
            raise
        except (OSError, urllib.error.URLError, UnicodeDecodeError) as e:
            raise DataSourceError(f"couldn't read datasource '{alias}': {e}") from e
        self._raw_cache[alias] = (mimetype, text)
        return mimetype, text

    def fetch(self, alias: str) -> Any:
        """Returns the parsed value of the alias, fetching it on first use."""
        if alias in self._value_cache:
            return self._value_cache[alias]
        mimetype, text = self.read(alias)
        try:
            value = parse_content(text, mimetype)
        except (ValueError, yaml.YAMLError, csv.Error) as e:
            raise DataSourceError(f"couldn't parse datasource '{alias}' as {mimetype}: {e}") from e
        self._value_cache[alias] = value
        log.debug("datasource_fetched", alias=alias, mimetype=mimetype)
        return value

    def cleanup(self) -> None:
        log.debug("datasources_cleanup", cached=len(self._value_cache))
        self._raw_cache.clear()
        self._value_cache.clear()


def _mimetype_for(source: DataSource, default: str = TEXT_MIMETYPE) -> str:
    explicit = source.query_type()
    if explicit:
        return explicit
    return EXTENSION_MIMETYPES.get(PurePosixPath(source.url.path).suffix.lower(), default)


def _read_file(source: DataSource) -> Tuple[str, str]:
    path = Path(source.url.path)
    if path.is_dir():
        return JSON_MIMETYPE, json.dumps(sorted(entry.name for entry in path.iterdir()))
    return _mimetype_for(source), path.read_text(encoding="utf-8")


def _read_env(source: DataSource) -> Tuple[str, str]:
    name = (source.url.path or source.url.netloc).lstrip("/")
    return _mimetype_for(source), os.environ.get(name, "")


def _read_stdin(source: DataSource) -> Tuple[str, str]:
    return _mimetype_for(source), sys.stdin.read()


def _read_http(source: DataSource) -> Tuple[str, str]:
    url = urlunsplit(source.url)
    request = urllib.request.Request(url, headers=source.headers)
    with urllib.request.urlopen(request, timeout=HTTP_TIMEOUT_SECONDS) as response:
        body = response.read()
        charset = response.headers.get_content_charset() or "utf-8"
        header_type = response.headers.get("Content-Type")
    mimetype = source.query_type() or header_type or _mimetype_for(source)
    return mimetype, body.decode(charset)


_READERS = {
    "file": _read_file,
    "env": _read_env,
    "stdin": _read_stdin,
    "http": _read_http,
    "https": _read_http,
}


def source_aliases(declarations: Iterable[str]) -> List[str]:
    # aliases in declaration order, without duplicates.
    seen: Dict[str, None] = {}
    for declaration in declarations:
        seen.setdefault(parse_source(declaration).alias, None)
    return list(seen)
