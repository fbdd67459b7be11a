"""Tests for filesystem source enumeration."""

import logging
from pathlib import Path

import pytest

from stencil.container import FileSystemSources


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    for relative in (
        "src/Foo.cs",
        "src/Models/Bar.cs",
        "src/readme.md",
        "lib/Baz.cs",
        "node_modules/pkg/Ignored.cs",
        "src/.git/Hidden.cs",
    ):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return tmp_path


class TestListSourceUnits:

    def test_whole_root(self, tree: Path) -> None:
        """No scopes means everything under the root, minus excluded directories."""
        units = FileSystemSources(tree).list_source_units((), "*.cs")

        assert units == {
            str(tree / "src" / "Foo.cs"),
            str(tree / "src" / "Models" / "Bar.cs"),
            str(tree / "lib" / "Baz.cs"),
        }

    def test_scopes(self, tree: Path) -> None:
        units = FileSystemSources(tree).list_source_units(("lib",), "*.cs")

        assert units == {str(tree / "lib" / "Baz.cs")}

    def test_pattern(self, tree: Path) -> None:
        units = FileSystemSources(tree).list_source_units(("src",), "*.md")

        assert units == {str(tree / "src" / "readme.md")}

    def test_missing_scope_warns(self, tree: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="stencil.container.sources"):
            units = FileSystemSources(tree).list_source_units(("missing",), "*.cs")

        assert units == set()
        assert "not a directory" in caplog.text


class TestContainsUnit:

    def test_in_scope(self, tree: Path) -> None:
        sources = FileSystemSources(tree)

        assert sources.contains_unit(str(tree / "src" / "Foo.cs"), ("src",))
        assert not sources.contains_unit(str(tree / "lib" / "Baz.cs"), ("src",))

    def test_case_insensitive(self, tree: Path) -> None:
        assert FileSystemSources(tree).contains_unit(str(tree / "SRC" / "foo.cs"), ("src",))

    def test_deleted_file(self, tree: Path) -> None:
        """Files that no longer exist still belong to their scope."""
        assert FileSystemSources(tree).contains_unit(str(tree / "src" / "Gone.cs"), ())

    def test_prefix_is_directory_boundary(self, tree: Path) -> None:
        assert not FileSystemSources(tree).contains_unit(str(tree / "srcfoo" / "Foo.cs"), ("src",))

    def test_excluded_directory(self, tree: Path) -> None:
        assert not FileSystemSources(tree).contains_unit(str(tree / "node_modules" / "pkg" / "Ignored.cs"), ())
