"""Tests for write-on-change comparison and best-effort checkout."""

from pathlib import Path

from stencil.generation import has_changed


class TestHasChanged:

    def test_missing_file(self, tmp_path: Path) -> None:
        assert has_changed(tmp_path / "Foo.ts", "")

    def test_identical(self, tmp_path: Path) -> None:
        path = tmp_path / "Foo.ts"
        path.write_bytes("export {}\n".encode())

        assert not has_changed(path, "export {}\n")

    def test_line_endings_matter(self, tmp_path: Path) -> None:
        """Comparison is byte-for-byte, so CRLF differs from LF."""
        path = tmp_path / "Foo.ts"
        path.write_bytes(b"export {}\r\n")

        assert has_changed(path, "export {}\n")

    def test_compared_as_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "Foo.ts"
        path.write_bytes("// Größe\n".encode("utf-8"))

        assert not has_changed(path, "// Größe\n")
        path.write_bytes("// Größe\n".encode("latin-1"))
        assert has_changed(path, "// Größe\n")


class TestCheckOut:

    def test_no_vcs(self, template, project_root: Path) -> None:
        output = project_root / "templates" / "Foo.ts"
        output.write_text("x")

        template.reconciler.check_out(output)

    def test_missing_file_not_checked_out(self, make_template, fake_vcs, project_root: Path) -> None:
        template = make_template(vcs=fake_vcs)

        template.reconciler.check_out(project_root / "templates" / "Foo.ts")

        assert fake_vcs.checked_out == []

    def test_already_checked_out(self, make_template, fake_vcs, project_root: Path) -> None:
        output = project_root / "templates" / "Foo.ts"
        output.write_text("x")
        fake_vcs.checked_out.append(str(output))
        template = make_template(vcs=fake_vcs)

        template.reconciler.check_out(output)

        assert fake_vcs.checked_out == [str(output)]

    def test_failure_swallowed(self, make_template, failing_vcs, project_root: Path) -> None:
        output = project_root / "templates" / "Foo.ts"
        output.write_text("x")
        template = make_template(vcs=failing_vcs)

        template.reconciler.check_out(output)

        assert failing_vcs.checked_out == []
