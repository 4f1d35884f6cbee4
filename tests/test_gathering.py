import io
import os
import pytest
from pathlib import Path

from jinplate.config.settings import RenderConfig
from jinplate.core.gathering import ARG_TEMPLATE_NAME, STDIN_TEMPLATE_NAME, gather_templates
from jinplate.core.naming import MappingNamer, StaticNamer
from jinplate.core.templating import NamedSources, TemplateRenderer
from jinplate.core.datasources import Data
from jinplate.exceptions import DiscoveryError, NamingError


@pytest.fixture
def input_tree(tmp_path: Path) -> Path:
    root = tmp_path / "in"
    (root / "sub").mkdir(parents=True)
    (root / "a.t").write_text("A")
    (root / "sub" / "b.t").write_text("B")
    return root


def test_inline_string_targets_stdout():
    config = RenderConfig(input="hello {{ 1 }}")

    templates = gather_templates(config, StaticNamer("."))

    assert len(templates) == 1
    assert templates[0].name == ARG_TEMPLATE_NAME
    assert templates[0].contents == "hello {{ 1 }}"
    assert templates[0].target.is_stdout


def test_file_list_paired_with_outputs(input_tree: Path, tmp_path: Path):
    out_a, out_b = str(tmp_path / "a.out"), str(tmp_path / "b.out")
    config = RenderConfig(
        input_files=[str(input_tree / "a.t"), str(input_tree / "sub" / "b.t")],
        output_files=[out_a, out_b],
    )

    templates = gather_templates(config, StaticNamer("."))

    assert [t.contents for t in templates] == ["A", "B"]
    assert [t.target.name for t in templates] == [out_a, out_b]
    assert all(t.target.closeable for t in templates)
    # targets are opened lazily, at render time
    assert not Path(out_a).exists()


def test_stdin_input(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))

    templates = gather_templates(RenderConfig(), StaticNamer("."))

    assert templates[0].name == STDIN_TEMPLATE_NAME
    assert templates[0].contents == "from stdin"
    assert templates[0].target.is_stdout


def test_directory_with_static_namer(input_tree: Path, tmp_path: Path):
    out_dir = tmp_path / "out"
    config = RenderConfig(input_dir=str(input_tree), output_dir=str(out_dir))

    templates = gather_templates(config, StaticNamer(str(out_dir)))

    assert [t.name for t in templates] == [str(input_tree / "a.t"), str(input_tree / "sub" / "b.t")]
    assert [t.target.name for t in templates] == [
        os.path.normpath(str(out_dir / "a.t")),
        os.path.normpath(str(out_dir / "sub" / "b.t")),
    ]
    assert (out_dir / "sub").is_dir()


def test_directory_with_mapping_namer(input_tree: Path, tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = RenderConfig(input_dir=str(input_tree), output_map="mapped/{{ in }}.out")
    namer = MappingNamer(config.output_map, TemplateRenderer(), NamedSources(Data()))

    templates = gather_templates(config, namer)

    assert [t.target.name for t in templates] == [
        os.path.normpath("mapped/a.t.out"),
        os.path.normpath("mapped/sub/b.t.out"),
    ]
    assert (tmp_path / "mapped" / "sub").is_dir()


def test_naming_error_aborts_gathering(input_tree: Path):
    config = RenderConfig(input_dir=str(input_tree), output_map="{{ undefined_value }}")
    namer = MappingNamer(config.output_map, TemplateRenderer(), NamedSources(Data()))

    with pytest.raises(NamingError):
        gather_templates(config, namer)


def test_missing_input_file(tmp_path: Path):
    config = RenderConfig(input_files=[str(tmp_path / "missing.t")], output_files=["-"])
    with pytest.raises(DiscoveryError, match="missing.t"):
        gather_templates(config, StaticNamer("."))


def test_missing_input_dir(tmp_path: Path):
    config = RenderConfig(input_dir=str(tmp_path / "missing"))
    with pytest.raises(DiscoveryError):
        gather_templates(config, StaticNamer("."))
