import pytest
from pathlib import Path

from jinplate.core.aliases import parse_template_arg, parse_template_args
from jinplate.exceptions import SourceNotFoundError


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A directory of auxiliary templates with one nested directory that must be skipped."""
    tpl_dir = tmp_path / "partials"
    tpl_dir.mkdir()
    (tpl_dir / "header.t").write_text("HEADER")
    (tpl_dir / "footer.t").write_text("FOOTER")
    (tpl_dir / "nested").mkdir()
    (tpl_dir / "nested" / "deep.t").write_text("DEEP")
    return tpl_dir


def test_directory_entries_keyed_by_alias_prefix(template_dir: Path):
    aliases = parse_template_args([f"p={template_dir}"])

    assert aliases == {
        "p/footer.t": str(template_dir / "footer.t"),
        "p/header.t": str(template_dir / "header.t"),
    }


def test_directory_without_alias_uses_directory_path_as_prefix(template_dir: Path):
    aliases = parse_template_args([str(template_dir)])

    assert set(aliases) == {
        (template_dir / "footer.t").as_posix(),
        (template_dir / "header.t").as_posix(),
    }
    # sub-directories are one level too deep
    assert not any("deep.t" in key for key in aliases)


def test_file_without_alias_is_its_own_key(template_dir: Path):
    path = str(template_dir / "header.t")
    assert parse_template_args([path]) == {path: path}


def test_file_with_alias(template_dir: Path):
    path = str(template_dir / "header.t")
    assert parse_template_args([f"hdr={path}"]) == {"hdr": path}


def test_last_declaration_wins(template_dir: Path):
    header = str(template_dir / "header.t")
    footer = str(template_dir / "footer.t")

    aliases = parse_template_args([f"part={header}", f"part={footer}"])

    assert aliases == {"part": footer}


def test_directory_entry_overwritten_by_later_file(template_dir: Path):
    footer = str(template_dir / "footer.t")

    aliases = parse_template_args([f"p={template_dir}", f"p/header.t={footer}"])

    assert aliases["p/header.t"] == footer


def test_missing_source_aborts(tmp_path: Path, template_dir: Path):
    aliases = {}
    with pytest.raises(SourceNotFoundError, match="missing.t"):
        parse_template_arg(f"x={tmp_path / 'missing.t'}", aliases)
    assert aliases == {}

    with pytest.raises(SourceNotFoundError):
        parse_template_args([str(template_dir), str(tmp_path / "missing.t")])


def test_empty_path_is_not_the_working_directory(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "stray.t").write_text("x")

    with pytest.raises(SourceNotFoundError, match="foo="):
        parse_template_args(["foo="])
