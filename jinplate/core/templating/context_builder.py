# jinplate/core/templating/context_builder.py
"""
Builds the rendering context shared by every template in a run.

The context is either `NamedSources`, a read-only mapping of context aliases to
data source values fetched on first access, or `RootValue`, a single data
source designated with the reserved alias `.` that replaces the mapping.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional, Union
import structlog

from jinplate.core.datasources import Data, source_aliases

log = structlog.get_logger(__name__)

ROOT_ALIAS = "."
ROOT_KEY = "ctx"
INPUT_KEY = "in"
RESERVED_KEYS = frozenset({ROOT_KEY, INPUT_KEY})


class NamedSources(Mapping):
    """Lazy alias -> value mapping. Extra static values shadow aliases of the same name."""

    def __init__(self, data: Data, aliases: Iterable[str] = (), extras: Optional[Dict[str, Any]] = None):
        self._data = data
        self._aliases = list(dict.fromkeys(aliases))
        self._extras = dict(extras or {})

    def __getitem__(self, key: str) -> Any:
        if key in self._extras:
            return self._extras[key]
        if key in self._aliases:
            return self._data.fetch(key)
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        # membership must not trigger a fetch.
        return key in self._extras or key in self._aliases

    def __iter__(self) -> Iterator[str]:
        yield from self._extras
        for alias in self._aliases:
            if alias not in self._extras:
                yield alias

    def __len__(self) -> int:
        return len(self._extras) + sum(1 for a in self._aliases if a not in self._extras)

    def derive(self, exclude: Iterable[str] = (), **extras: Any) -> "NamedSources":
        excluded = set(exclude)
        aliases = [a for a in self._aliases if a not in excluded]
        kept_extras = {k: v for k, v in self._extras.items() if k not in excluded}
        kept_extras.update(extras)
        return NamedSources(self._data, aliases, kept_extras)

    def copy(self) -> "NamedSources":
        # shallow and unfetched, like dict.copy for the ChainMaps jinja builds over it.
        return self.derive()

    def __repr__(self) -> str:
        return f"NamedSources({list(self)!r})"


class RootValue:
    """A single data source used as the whole context; fetched on first resolve()."""

    def __init__(self, data: Data, alias: str = ROOT_ALIAS):
        self._data = data
        self.alias = alias

    def resolve(self) -> Any:
        return self._data.fetch(self.alias)

    def __repr__(self) -> str:
        return f"RootValue({self.alias!r})"


RenderingContext = Union[NamedSources, RootValue]


def build_rendering_context(data: Data, context_declarations: Iterable[str]) -> RenderingContext:
    """Creates the context from `--context` declarations; nothing is fetched here."""
    aliases = source_aliases(context_declarations)
    if ROOT_ALIAS in aliases:
        log.info("root_context_datasource_selected", alias=ROOT_ALIAS)
        return RootValue(data, ROOT_ALIAS)
    log.info("rendering_context_built", aliases=aliases)
    return NamedSources(data, aliases)


def template_variables(context: Optional[RenderingContext]) -> Mapping:
    """The top-level variables a template sees for the given context."""
    if context is None:
        return {}
    if isinstance(context, RootValue):
        value = context.resolve()
        if isinstance(value, Mapping):
            return value
        # non-mapping roots (lists, scalars) are only reachable through the root key.
        return {ROOT_KEY: value}
    return context


def mapping_context(context: Optional[RenderingContext], in_path: str) -> NamedSources:
    """The derived context an output-map template is rendered with."""
    if isinstance(context, NamedSources):
        return context.derive(exclude=RESERVED_KEYS, **{INPUT_KEY: in_path, ROOT_KEY: context})
    root = context.resolve() if isinstance(context, RootValue) else None
    return NamedSources(Data(), extras={INPUT_KEY: in_path, ROOT_KEY: root})
