# jinplate/core/templating/helpers.py
"""
Functions and filters made available to every template.
"""
import datetime
import json
import os
from typing import Any, Callable, Dict, Optional

import toml
import yaml

from jinplate.core.datasources import Data


def now_helper() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def getenv_helper(name: str, default: str = "") -> str:
    return os.environ.get(name) or default


def to_json_filter(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, sort_keys=indent is not None, default=str)


def to_yaml_filter(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False)


def to_toml_filter(value: Dict[str, Any]) -> str:
    return toml.dumps(value)


def from_json_filter(text: str) -> Any:
    return json.loads(text)


def from_yaml_filter(text: str) -> Any:
    return yaml.safe_load(text)


BUILTIN_FILTERS: Dict[str, Callable[..., Any]] = {
    "to_json": to_json_filter,
    "to_yaml": to_yaml_filter,
    "to_toml": to_toml_filter,
    "from_json": from_json_filter,
    "from_yaml": from_yaml_filter,
}


def build_function_table(data: Data) -> Dict[str, Any]:
    """Template globals bound to the run's data sources."""

    def datasource(alias: str) -> Any:
        return data.fetch(alias)

    def include(alias: str) -> str:
        # raw, unparsed contents
        return data.read(alias)[1]

    return {
        "datasource": datasource,
        "ds": datasource,
        "datasource_exists": data.exists,
        "include": include,
        "getenv": getenv_helper,
        "env": dict(os.environ),
        "now": now_helper,
    }
