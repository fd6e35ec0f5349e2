"""Exception hierarchy for spectools.

All exceptions inherit from :class:`SpectoolsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spectools.exit_codes`.
The CLI catches ``SpectoolsError`` and exits with the appropriate code.

Every problem found *inside* a document derives from :class:`SpecError`.
Errors raised while an operation is being visited are annotated with that
operation (see :meth:`SpecError.set_operation`) so the message alone is
enough to locate the fault.

Subclass hierarchy::

    SpectoolsError (exit 1)
    +-- InvalidUsageError                        (exit 2)
    +-- ConfigError                              (exit 1)
    +-- SpecLoadError                            (exit 6)
    +-- SpecError                                (exit 7)
        +-- UnsupportedVersionError              (exit 8)
        +-- SpecParsingError
        +-- InvalidReferenceError
        +-- SchemaParsingError
        +-- UnsupportedParameterTypeError
        +-- UnsupportedDefaultValueError
        +-- ParameterStyleMismatchError
        |   +-- UnsupportedParameterStyleError
        |   +-- UnsupportedParameterExplodeError
        +-- UnsupportedContentTypeError
        +-- MissingMandatoryFieldError
        |   +-- MissingOperationIdError
        |   +-- MissingDescriptionError
        +-- CyclicReferenceOrExcessiveSizeError  (exit 9)
"""

from __future__ import annotations

from typing import Any, Optional

from spectools.exit_codes import (
    EXIT_CYCLIC_REFERENCE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_ERROR,
    EXIT_SPEC_LOAD_ERROR,
    EXIT_UNSUPPORTED_VERSION,
)


class SpectoolsError(Exception):
    """Base exception for all spectools errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`spectools.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpectoolsError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpectoolsError):
    """Raised for configuration problems (invalid JSON, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecLoadError(SpectoolsError):
    """Raised when a document cannot be fetched, read or decoded."""

    exit_code = EXIT_SPEC_LOAD_ERROR


class SpecError(SpectoolsError):
    """Base class for problems found inside an OpenAPI document.

    Attributes:
        operation: ``"METHOD /path"`` of the operation being visited when
            the error was raised, or ``None`` outside the operation walk.
    """

    exit_code = EXIT_SPEC_ERROR

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message, exit_code)
        self.message = message
        self.operation: Optional[str] = None

    def set_operation(self, method: str, path: str) -> None:
        """Record the operation being visited, keeping the innermost one."""
        if self.operation is None:
            self.operation = f"{method.upper()} {path}"

    def __str__(self) -> str:
        if self.operation is not None:
            return f"{self.message} (in {self.operation})"
        return self.message


class UnsupportedVersionError(SpecError):
    """Raised when the ``openapi`` field is missing, not a string, or not 3.0.x."""

    exit_code = EXIT_UNSUPPORTED_VERSION


class SpecParsingError(SpecError):
    """Raised when the document does not match the expected OpenAPI structure."""


class InvalidReferenceError(SpecError):
    """Raised when a ``$ref`` points to a component absent from the document."""

    def __init__(self, ref: str):
        super().__init__(f"Cannot resolve $ref '{ref}': no such component")
        self.ref = ref


class SchemaParsingError(SpecError):
    """Raised when a schema node matches none of the recognised shapes."""


class UnsupportedParameterTypeError(SpecError):
    """Raised when a parameter schema is neither a primitive nor an array of primitives."""

    def __init__(self, parameter: str, kind: str):
        super().__init__(
            f"Parameter '{parameter}' has unsupported schema type '{kind}'; "
            "only primitives and arrays of primitives are allowed"
        )
        self.parameter = parameter
        self.kind = kind


class UnsupportedDefaultValueError(SpecError):
    """Raised when an array parameter declares a non-primitive default value."""

    def __init__(self, parameter: str, default: Any):
        super().__init__(
            f"Parameter '{parameter}' has unsupported default value {default!r}; "
            "array defaults must contain primitive values only"
        )
        self.parameter = parameter
        self.default = default


class ParameterStyleMismatchError(SpecError):
    """Base class for unsupported ``style``/``explode`` combinations."""

    def __init__(self, message: str, parameter: str, location: str):
        super().__init__(message)
        self.parameter = parameter
        self.location = location


class UnsupportedParameterStyleError(ParameterStyleMismatchError):
    """Raised when a parameter declares a serialisation style other than the supported one."""

    def __init__(self, parameter: str, location: str, style: Any, expected: str):
        super().__init__(
            f"{location.capitalize()} parameter '{parameter}' has unsupported style "
            f"{style!r}; only '{expected}' is supported",
            parameter,
            location,
        )
        self.style = style


class UnsupportedParameterExplodeError(ParameterStyleMismatchError):
    """Raised when a parameter declares an unsupported ``explode`` flag."""

    def __init__(self, parameter: str, location: str, explode: Any, expected: bool):
        super().__init__(
            f"{location.capitalize()} parameter '{parameter}' has unsupported explode "
            f"{explode!r}; only explode={str(expected).lower()} is supported",
            parameter,
            location,
        )
        self.explode = explode


class UnsupportedContentTypeError(SpecError):
    """Raised when no JSON-compatible media type is declared in a content map."""

    def __init__(self, available_types: list[str]):
        listed = ", ".join(available_types) if available_types else "none"
        super().__init__(
            f"No supported content type found (available: {listed}); "
            "expected application/*json, text/*plain or */*"
        )
        self.available_types = available_types


class MissingMandatoryFieldError(SpecError):
    """Raised when an operation lacks a field every tool descriptor needs."""

    def __init__(self, field: str, method: str, path: str):
        super().__init__(f"Missing mandatory field '{field}'")
        self.set_operation(method, path)
        self.field = field
        self.method = method
        self.path = path


class MissingOperationIdError(MissingMandatoryFieldError):
    """Raised when an operation has no ``operationId``."""

    def __init__(self, method: str, path: str):
        super().__init__("operationId", method, path)


class MissingDescriptionError(MissingMandatoryFieldError):
    """Raised when an operation has neither ``description`` nor ``summary``."""

    def __init__(self, method: str, path: str):
        super().__init__("description", method, path)


class CyclicReferenceOrExcessiveSizeError(SpecError):
    """Raised when a ``$ref`` cycle or excessive nesting exhausts the visitor.

    Kept distinct from the other document errors so that callers can report
    a document-quality problem rather than a structural one.
    """

    exit_code = EXIT_CYCLIC_REFERENCE

    def __init__(self, message: str, ref: Optional[str] = None):
        super().__init__(message)
        self.ref = ref
