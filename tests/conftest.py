"""Pytest fixtures for Stencil tests."""

import logging
import os
from pathlib import Path

import pytest

from stencil.container import FileSystemSources, Project
from stencil.foundation.config import reset_config
from stencil.foundation.errors import item_unavailable
from stencil.generation import RenderResult, Template

TEMPLATE_MODULE = '''\
from pathlib import Path


def render(source):
    text = Path(source.full_name).read_text()
    if "// skip" in text:
        return None
    return "// generated from " + Path(source.full_name).name + "\\n"
'''


# ─────────────────────────────────────────────────────────────────
# Environment isolation
# ─────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user config, STENCIL_* variables and the global config out of tests."""
    for key in list(os.environ):
        if key.startswith("STENCIL_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def restore_logging():
    """Undo configure_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ─────────────────────────────────────────────────────────────────
# In-memory collaborators
# ─────────────────────────────────────────────────────────────────


class FakeContainer:
    """Container that counts saves."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.saves = 0

    def save(self) -> None:
        self.saves += 1


class FakeItem:
    """Tracked item backed by a dict; `unavailable=True` makes every read fail."""

    def __init__(self, path: Path, attributes: dict | None = None, unavailable: bool = False) -> None:
        self._path = path
        self.attributes = {"mapped_source": ""} if attributes is None else attributes
        self.unavailable = unavailable
        self.set_calls = 0
        self.deleted = False

    def _check(self) -> None:
        if self.unavailable:
            raise item_unavailable(str(self._path))

    @property
    def path(self) -> str:
        self._check()
        return str(self._path)

    @property
    def name(self) -> str:
        self._check()
        return self._path.name

    def rename(self, new_name: str) -> None:
        self._path = self._path.with_name(new_name)

    def delete(self) -> None:
        self.deleted = True

    def has_attribute(self, name: str) -> bool:
        self._check()
        return name in self.attributes

    def get_attribute(self, name: str) -> str | None:
        self._check()
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self._check()
        self.attributes[name] = value
        self.set_calls += 1


class FakeScope(FakeItem):
    """A template entry whose children are FakeItems."""

    def __init__(self, container: FakeContainer, path: Path) -> None:
        super().__init__(path, attributes={})
        self.container = container
        self.items: list[FakeItem] = []

    def children(self) -> list[FakeItem]:
        return list(self.items)

    def add_from_file(self, path: str) -> FakeItem:
        item = FakeItem(Path(path))
        self.items.append(item)
        return item

    def add_child(self, filename: str, mapped: str | None = "", **kwargs) -> FakeItem:
        """Track `filename` next to the template, mapped to a root-relative source."""
        attributes = kwargs.pop("attributes", None)
        if attributes is None:
            attributes = {"mapped_source": mapped} if mapped is not None else {}
        item = FakeItem(self._path.parent / filename, attributes=attributes, **kwargs)
        self.items.append(item)
        return item


class FakeRenderer:
    """Renders `// generated from <name>`; per-file text overrides and failures."""

    def __init__(self) -> None:
        self.texts: dict[str, str | None] = {}
        self.failing: set[str] = set()
        self.calls: list[str] = []

    def render(self, source) -> RenderResult:
        name = Path(source.full_name).name
        self.calls.append(name)
        if name in self.failing:
            return RenderResult(text=None, success=False)
        if name in self.texts:
            return RenderResult(text=self.texts[name], success=True)
        return RenderResult(text=f"// generated from {name}\n", success=True)


class FakeVcs:
    """Version control where every existing file is tracked and read-only."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.checked_out: list[str] = []

    def is_tracked(self, path: str) -> bool:
        if self.fail:
            raise RuntimeError("vcs offline")
        return True

    def is_checked_out(self, path: str) -> bool:
        return path in self.checked_out

    def check_out(self, path: str) -> None:
        self.checked_out.append(path)


@pytest.fixture
def container(tmp_path: Path) -> FakeContainer:
    return FakeContainer(tmp_path)


@pytest.fixture
def scope(container: FakeContainer, tmp_path: Path) -> FakeScope:
    """Fake template entry at <root>/templates/models.tpl.py."""
    return FakeScope(container, tmp_path / "templates" / "models.tpl.py")


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def failing_vcs() -> FakeVcs:
    return FakeVcs(fail=True)


# ─────────────────────────────────────────────────────────────────
# Real project on disk
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project with two C# sources and a template module.

    Layout:
        src/Foo.cs
        src/Bar.cs
        templates/models.tpl.py
    """
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "Foo.cs").write_text("class Foo {}\n")
    (root / "src" / "Bar.cs").write_text("class Bar {}\n")
    (root / "templates").mkdir()
    (root / "templates" / "models.tpl.py").write_text(TEMPLATE_MODULE)
    return root


@pytest.fixture
def project(project_root: Path) -> Project:
    return Project(project_root)


@pytest.fixture
def make_template(project: Project, project_root: Path, renderer: FakeRenderer):
    """Build Templates over the real project with the fake renderer."""
    item = project.add_item(project_root / "templates" / "models.tpl.py")

    def _make(settings=None, vcs=None) -> Template:
        return Template(item, renderer, FileSystemSources(project_root), settings, vcs=vcs)

    return _make


@pytest.fixture
def template(make_template) -> Template:
    return make_template()
