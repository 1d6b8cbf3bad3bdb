"""Tests for structured error payloads and exit codes."""

from __future__ import annotations

from schemacraft.errors import (
    DescribeError,
    DuplicateSchemaNameError,
    ErrorCategory,
    InheritanceConflictError,
    SchemaDepthError,
)
from schemacraft.exit_codes import ExitCode


def test_configuration_error_payload() -> None:
    error = DuplicateSchemaNameError("Shared", "shop.First", "shop.Second")

    payload = error.to_dict()
    assert payload["code"] == "E1004"
    assert payload["category"] == "configuration"
    assert payload["details"] == {"subject": "shop.Second", "name": "Shared", "types": ["shop.First", "shop.Second"]}
    assert payload["suggestion"]["example"] == '@schema_component(name="BillingAddress")'
    assert error.exit_code == ExitCode.CONFIGURATION_ERROR


def test_errors_without_suggestion() -> None:
    error = InheritanceConflictError("conflict", subject="Batch")

    assert error.to_dict()["suggestion"] is None
    assert error.category is ErrorCategory.CONFIGURATION
    assert str(error) == "conflict"


def test_depth_error_names_the_limit() -> None:
    error = SchemaDepthError("Customer", 3)

    assert error.details == {"subject": "Customer", "max_depth": 3}
    assert "3" in error.message


def test_describe_errors_are_input_errors() -> None:
    error = DescribeError("cannot read", details={"type": "Thing"})

    assert error.code == "E2000"
    assert error.exit_code == ExitCode.INVALID_INPUT
    assert error.to_dict()["category"] == "input"
