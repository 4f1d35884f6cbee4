import json
import os
import pytest
from pathlib import Path

from jinplate.config.settings import RenderConfig
from jinplate.core.datasources import Data
from jinplate.core.naming import MappingNamer, StaticNamer, choose_namer
from jinplate.core.templating import NamedSources, TemplateRenderer, build_rendering_context
from jinplate.exceptions import NamingError


@pytest.fixture
def app_json(tmp_path: Path) -> Path:
    path = tmp_path / "app.json"
    path.write_text(json.dumps({"name": "web", "env": "prod"}))
    return path


class TestStaticNamer:
    """The static strategy is a cleaned join onto the output directory."""

    @pytest.mark.parametrize("in_path, expected", [
        ("a/b.t", "out/a/b.t"),
        (".", "out"),
        ("a/../b.t", "out/b.t"),
        ("./a//b.t", "out/a/b.t"),
        ("../escape.t", "escape.t"),
    ])
    def test_cleaned_join(self, in_path, expected):
        assert StaticNamer("out")(in_path) == os.path.normpath(expected)

    def test_nested_output_dir(self):
        assert StaticNamer("build/site/")("index.html") == os.path.normpath("build/site/index.html")


class TestMappingNamer:
    """The dynamic strategy renders the output map once per input path."""

    def test_input_path_suffix(self):
        namer = MappingNamer("{{ in }}.out", TemplateRenderer(), NamedSources(Data()))
        assert namer("a/b") == os.path.normpath("a/b.out")

    def test_output_is_trimmed_and_cleaned(self):
        namer = MappingNamer("  out/./{{ in }}\n", TemplateRenderer(), NamedSources(Data()))
        assert namer("x/../y.t") == os.path.normpath("out/y.t")

    def test_context_entries_visible_directly_and_through_ctx(self, app_json: Path):
        data = Data.from_declarations([f"app={app_json}"])
        context = build_rendering_context(data, [f"app={app_json}"])
        namer = MappingNamer("{{ ctx.app.env }}/{{ app.name }}/{{ in }}", TemplateRenderer(), context)

        assert namer("index.html") == os.path.normpath("prod/web/index.html")

    def test_reserved_aliases_are_shadowed(self, app_json: Path):
        data = Data.from_declarations([f"in={app_json}"])
        context = build_rendering_context(data, [f"in={app_json}"])
        namer = MappingNamer("{{ in }}", TemplateRenderer(), context)

        assert namer("file.t") == "file.t"

    def test_root_value_exposes_only_reserved_keys(self, app_json: Path):
        data = Data.from_declarations([f".={app_json}"])
        context = build_rendering_context(data, [f".={app_json}"])

        namer = MappingNamer("{{ ctx.env }}/{{ in }}", TemplateRenderer(), context)
        assert namer("a.t") == os.path.normpath("prod/a.t")

        no_copy = MappingNamer("{{ name }}/{{ in }}", TemplateRenderer(), context)
        with pytest.raises(NamingError):
            no_copy("a.t")

    def test_custom_delimiters(self):
        namer = MappingNamer("[[ in ]].bak", TemplateRenderer("[[", "]]"), NamedSources(Data()))
        assert namer("conf") == "conf.bak"

    def test_render_failure_wraps_input_path(self):
        namer = MappingNamer("{{ missing }}/{{ in }}", TemplateRenderer(), NamedSources(Data()))
        with pytest.raises(NamingError, match="in path a/b.t") as exc_info:
            namer("a/b.t")
        assert exc_info.value.in_path == "a/b.t"
        assert exc_info.value.context_keys == ["ctx", "in"]

    def test_compile_failure(self):
        namer = MappingNamer("{{ in ", TemplateRenderer(), NamedSources(Data()))
        with pytest.raises(NamingError, match="failed to compile output map"):
            namer("a.t")

    def test_compiled_once(self, monkeypatch):
        renderer = TemplateRenderer()
        calls = []
        original = renderer.compile
        monkeypatch.setattr(renderer, "compile", lambda *a: calls.append(a) or original(*a))
        namer = MappingNamer("{{ in }}", renderer, NamedSources(Data()))

        namer("a")
        namer("b")
        assert len(calls) == 1


def test_choose_namer():
    renderer = TemplateRenderer()
    assert isinstance(choose_namer(RenderConfig(input_dir="in", output_map="{{ in }}"), renderer, None), MappingNamer)
    static = choose_namer(RenderConfig(input_dir="in", output_dir="dist"), renderer, None)
    assert isinstance(static, StaticNamer)
    assert static.output_dir == "dist"
