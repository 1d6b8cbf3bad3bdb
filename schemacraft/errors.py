"""schemacraft error hierarchy and structured error models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from schemacraft.exit_codes import ExitCode


def _default_exit_code(category: ErrorCategory) -> ExitCode:
    mapping = {
        ErrorCategory.INPUT: ExitCode.INVALID_INPUT,
        ErrorCategory.CONFIGURATION: ExitCode.CONFIGURATION_ERROR,
        ErrorCategory.INTERNAL: ExitCode.INTERNAL_ERROR,
    }
    return mapping[category]


class ErrorCategory(str, Enum):
    INPUT = "input"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class Suggestion(BaseModel):
    action: str
    fix: str
    example: str | None = None


class SchemaError(Exception):
    """Base error raised while compiling schemas."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
        exit_code: ExitCode | int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.suggestion = suggestion
        self.details = details or {}
        resolved_exit_code = exit_code if exit_code is not None else _default_exit_code(category)
        self.exit_code = int(resolved_exit_code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "suggestion": self.suggestion.model_dump() if self.suggestion else None,
            "details": self.details,
        }


class SchemaConfigurationError(SchemaError):
    """E1xxx: declarations that cannot be compiled into a consistent schema.

    ``subject`` is the identity of the offending type or property, for example
    ``"Order"`` or ``"Order.items"``.
    """

    def __init__(
        self,
        message: str,
        code: str = "E1000",
        subject: str | None = None,
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged_details = dict(details or {})
        if subject is not None:
            merged_details.setdefault("subject", subject)
        super().__init__(
            message,
            code,
            category=ErrorCategory.CONFIGURATION,
            suggestion=suggestion,
            details=merged_details,
        )
        self.subject = subject


class MissingSchemaError(SchemaConfigurationError):
    """E1001: a by-reference schema was requested for an unregistered name."""

    def __init__(self, name: str, requester: str | None = None) -> None:
        where = f" (requested by {requester})" if requester else ""
        super().__init__(
            f"No schema named '{name}' is registered{where}.",
            code="E1001",
            subject=requester or name,
            suggestion=Suggestion(
                action="register the schema",
                fix=f"Call ensure_schema() for the type behind '{name}' before referencing it.",
            ),
            details={"name": name},
        )
        self.name = name


class InheritanceConflictError(SchemaConfigurationError):
    """E1002: an array-flagged derived type also declares object-only composition."""

    def __init__(self, message: str, subject: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="E1002", subject=subject, details=details)


class UnknownRequiredPropertyError(SchemaConfigurationError):
    """E1003: a required name does not match any declared property."""

    def __init__(self, type_name: str, missing: list[str]) -> None:
        names = ", ".join(missing)
        super().__init__(
            f"Type '{type_name}' marks unknown properties as required: {names}.",
            code="E1003",
            subject=type_name,
            suggestion=Suggestion(
                action="fix the required list",
                fix="Only name properties declared on the type or one of its bases.",
            ),
            details={"missing": list(missing)},
        )


class DuplicateSchemaNameError(SchemaConfigurationError):
    """E1004: two distinct types claim the same schema name."""

    def __init__(self, name: str, first: str, second: str) -> None:
        super().__init__(
            f"Schema name '{name}' is claimed by both {first} and {second}.",
            code="E1004",
            subject=second,
            suggestion=Suggestion(
                action="rename one schema",
                fix="Give one of the types an explicit schema name.",
                example='@schema_component(name="BillingAddress")',
            ),
            details={"name": name, "types": [first, second]},
        )


class SchemaDepthError(SchemaConfigurationError):
    """E1005: the type graph nests deeper than the configured limit."""

    def __init__(self, subject: str, max_depth: int) -> None:
        super().__init__(
            f"Type graph below '{subject}' exceeds the maximum depth of {max_depth}.",
            code="E1005",
            subject=subject,
            suggestion=Suggestion(
                action="raise max_depth",
                fix="Set [tool.schemacraft] max_depth or SCHEMACRAFT_MAX_DEPTH.",
            ),
            details={"max_depth": max_depth},
        )


class DescribeError(SchemaError):
    """E2xxx: a declaration could not be read into a type descriptor."""

    def __init__(
        self,
        message: str,
        code: str = "E2000",
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            category=ErrorCategory.INPUT,
            suggestion=suggestion,
            details=details,
        )
