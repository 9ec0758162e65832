"""
Typed results for domain operations.

Domain operations never raise for caller-correctable input. They return a
Result holding either the updated value or one of the errors below, and the
caller decides how to surface it.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class DomainError(Exception):
    """Base class for caller-correctable validation failures."""

    code = "domain_error"


@dataclass
class InvalidTransition(DomainError):
    """Target stage is not a legal move from the current stage."""
    from_stage: str
    to_stage: str

    code = "invalid_transition"

    def __str__(self):
        return f"Invalid transition: {self.from_stage} -> {self.to_stage}"


@dataclass
class MissingPrecondition(DomainError):
    """A field required by the transition is not set."""
    field: str

    code = "missing_precondition"

    def __str__(self):
        return f"Missing precondition: {self.field} is required"


@dataclass
class EmptyValue(DomainError):
    """A value was blank after trimming."""
    field: str

    code = "empty_value"

    def __str__(self):
        return f"{self.field} must not be blank"


@dataclass
class InvalidValue(DomainError):
    """A value is out of range or not a number."""
    field: str
    reason: str

    code = "invalid_value"

    def __str__(self):
        return f"Invalid {self.field}: {self.reason}"


@dataclass
class UnknownLineItem(DomainError):
    item_id: str

    code = "unknown_line_item"

    def __str__(self):
        return f"No cost line item with id '{self.item_id}'"


@dataclass
class CannotRemoveDefault(DomainError):
    """The project's default colour cannot be removed while others exist."""
    color_id: str

    code = "cannot_remove_default"

    def __str__(self):
        return f"Cannot remove default color variant '{self.color_id}'"


@dataclass
class LastVariant(DomainError):
    """A project must always keep at least one colour variant."""
    color_id: str

    code = "last_variant"

    def __str__(self):
        return f"Cannot remove '{self.color_id}': it is the only color variant"


@dataclass
class UnknownVariant(DomainError):
    color_id: str

    code = "unknown_variant"

    def __str__(self):
        return f"No color variant '{self.color_id}'"


@dataclass
class StaleVersion(DomainError):
    """Someone else saved the record since it was loaded."""
    project_id: str
    expected: int
    actual: int

    code = "stale_version"

    def __str__(self):
        return (
            f"Project {self.project_id} was modified concurrently "
            f"(expected version {self.expected}, found {self.actual})"
        )


@dataclass
class Result(Generic[T]):
    """Outcome of a domain operation."""
    value: T | None = None
    error: DomainError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: DomainError) -> "Result[T]":
        return cls(error=error)
