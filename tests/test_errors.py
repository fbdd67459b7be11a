"""Tests for the structured error system."""

from stencil.foundation.errors import (
    CollisionExhaustedError,
    ErrorCode,
    IntegrityError,
    ItemUnavailableError,
    StencilError,
    argument_missing,
    config_error,
    item_unavailable,
    mapping_slot_missing,
    template_error,
)


class TestErrorCode:

    def test_categories(self) -> None:
        assert ErrorCode.MAPPING_SLOT_MISSING.category == "integrity"
        assert ErrorCode.COLLISION_EXHAUSTED.category == "allocation"
        assert ErrorCode.ITEM_UNAVAILABLE.category == "container"
        assert ErrorCode.CONFIG_INVALID.category == "config"
        assert ErrorCode.TEMPLATE_INVALID.category == "template"

    def test_recoverable(self) -> None:
        assert ErrorCode.ITEM_UNAVAILABLE.is_recoverable
        assert not ErrorCode.COLLISION_EXHAUSTED.is_recoverable


class TestStencilError:

    def test_str(self) -> None:
        err = StencilError(code=ErrorCode.FILE_NOT_FOUND, context={"path": "Foo.ts"})

        assert str(err) == "[ST-3003] File not found: Foo.ts"
        assert err.error_id == "ST-3003"

    def test_missing_context_keeps_template(self) -> None:
        err = StencilError(code=ErrorCode.FILE_NOT_FOUND)

        assert err.message == "File not found: {path}"

    def test_recovery_hints_formatted(self) -> None:
        err = template_error(ErrorCode.TEMPLATE_NOT_FOUND, "templates/models.tpl.py")

        assert err.recovery_hints == ["Register the template with 'stencil add-template templates/models.tpl.py'"]

    def test_to_dict(self) -> None:
        err = mapping_slot_missing("mapped_source", "/project/templates/Foo.ts")

        data = err.to_dict()

        assert data["error_id"] == "ST-1001"
        assert data["category"] == "integrity"
        assert data["recoverable"] is False
        assert data["context"] == {"attribute": "mapped_source", "path": "/project/templates/Foo.ts"}
        assert "mapped_source" in data["message"]


class TestFactories:

    def test_types(self) -> None:
        assert isinstance(mapping_slot_missing("a", "p"), IntegrityError)
        assert isinstance(argument_missing("item"), IntegrityError)
        assert isinstance(item_unavailable("p"), ItemUnavailableError)
        assert issubclass(CollisionExhaustedError, StencilError)

    def test_item_unavailable_cause(self) -> None:
        cause = OSError("gone")

        err = item_unavailable("Foo.ts", cause)

        assert err.cause is cause

    def test_config_error(self) -> None:
        err = config_error("vcs.backend", "expected one of git, none")

        assert str(err) == "[ST-5001] Invalid configuration for 'vcs.backend': expected one of git, none"
