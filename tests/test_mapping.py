"""Tests for the mapped_source back-reference."""

import os
from pathlib import Path

import pytest

from stencil.foundation.errors import ErrorCode, IntegrityError, ItemUnavailableError
from stencil.generation import MAPPED_SOURCE_ATTRIBUTE, MappingStore


@pytest.fixture
def store(container) -> MappingStore:
    return MappingStore(container)


class TestGetMappedSource:

    def test_none_item(self, store: MappingStore) -> None:
        assert store.get_mapped_source(None) is None

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_is_unmapped(self, store: MappingStore, scope, value) -> None:
        """Blank or absent values mean 'not mapped'."""
        item = scope.add_child("Foo.ts", attributes={MAPPED_SOURCE_ATTRIBUTE: value} if value is not None else {})

        assert store.get_mapped_source(item) is None

    def test_resolves_against_root(self, store: MappingStore, scope, tmp_path: Path) -> None:
        item = scope.add_child("Foo.ts", mapped="src/Foo.cs")

        assert store.get_mapped_source(item) == tmp_path / "src" / "Foo.cs"

    def test_accepts_either_separator(self, store: MappingStore, scope, tmp_path: Path) -> None:
        """Values written on another platform still resolve."""
        item = scope.add_child("Foo.ts", mapped="src\\Models\\Foo.cs")

        assert store.get_mapped_source(item) == tmp_path / "src" / "Models" / "Foo.cs"

    def test_unavailable_item_raises(self, store: MappingStore, scope) -> None:
        item = scope.add_child("Foo.ts", mapped="src/Foo.cs", unavailable=True)

        with pytest.raises(ItemUnavailableError):
            store.get_mapped_source(item)


class TestSetMappedSource:

    def test_round_trip(self, store: MappingStore, scope, tmp_path: Path) -> None:
        """Setting then getting returns the same absolute path."""
        item = scope.add_child("Foo.ts")
        source = tmp_path / "src" / "Foo.cs"

        store.set_mapped_source(item, source)

        assert item.attributes[MAPPED_SOURCE_ATTRIBUTE] == os.path.join("src", "Foo.cs")
        assert store.get_mapped_source(item) == source

    def test_outside_root_uses_parent_segments(self, store: MappingStore, scope, tmp_path: Path) -> None:
        item = scope.add_child("Foo.ts")
        source = tmp_path.parent / "elsewhere" / "Foo.cs"

        store.set_mapped_source(item, source)

        assert item.attributes[MAPPED_SOURCE_ATTRIBUTE].startswith("..")
        assert store.get_mapped_source(item) == source

    def test_unchanged_value_not_rewritten(self, store: MappingStore, scope, tmp_path: Path) -> None:
        """Equal values (ignoring case) leave the attribute untouched."""
        item = scope.add_child("Foo.ts", mapped="SRC/foo.cs")

        store.set_mapped_source(item, tmp_path / "src" / "Foo.cs")

        assert item.set_calls == 0
        assert item.attributes[MAPPED_SOURCE_ATTRIBUTE] == "SRC/foo.cs"

    def test_changed_value_rewritten(self, store: MappingStore, scope, tmp_path: Path) -> None:
        item = scope.add_child("Foo.ts", mapped="src/Foo.cs")

        store.set_mapped_source(item, tmp_path / "lib" / "Foo.cs")

        assert item.set_calls == 1
        assert store.get_mapped_source(item) == tmp_path / "lib" / "Foo.cs"

    def test_missing_slot(self, store: MappingStore, scope, tmp_path: Path) -> None:
        """An artifact without the attribute slot is an integrity violation."""
        item = scope.add_child("Foo.ts", mapped=None)

        with pytest.raises(IntegrityError) as exc_info:
            store.set_mapped_source(item, tmp_path / "src" / "Foo.cs")

        assert exc_info.value.code == ErrorCode.MAPPING_SLOT_MISSING
        assert "mapped_source" in str(exc_info.value)
        assert item.set_calls == 0

    def test_missing_item(self, store: MappingStore, tmp_path: Path) -> None:
        with pytest.raises(IntegrityError) as exc_info:
            store.set_mapped_source(None, tmp_path / "src" / "Foo.cs")

        assert exc_info.value.code == ErrorCode.ARGUMENT_MISSING
        assert exc_info.value.context["argument"] == "item"

    def test_missing_source(self, store: MappingStore, scope) -> None:
        item = scope.add_child("Foo.ts")

        with pytest.raises(IntegrityError) as exc_info:
            store.set_mapped_source(item, None)

        assert exc_info.value.context["argument"] == "source_path"


class TestRequireSlot:

    def test_present(self, store: MappingStore, scope) -> None:
        store.require_slot(scope.add_child("Foo.ts"))

    def test_absent(self, store: MappingStore, scope) -> None:
        with pytest.raises(IntegrityError):
            store.require_slot(scope.add_child("Foo.ts", mapped=None))
