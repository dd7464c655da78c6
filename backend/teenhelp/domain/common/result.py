"""Result<T> pattern — domain functions return this instead of raising exceptions for normal flow."""
from __future__ import annotations
from enum import Enum
from typing import TypeVar, Generic, Optional

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    AUTHORIZATION = "authorization"


class Result(Generic[T]):
    def __init__(
        self,
        is_success: bool,
        value: Optional[T] = None,
        error: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
    ):
        self.is_success = is_success
        self.value = value
        self.error = error
        self.kind = kind

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> "Result[T]":
        return cls(is_success=False, error=error, kind=kind)

    @classmethod
    def not_found(cls, error: str) -> "Result[T]":
        return cls.fail(error, ErrorKind.NOT_FOUND)

    @classmethod
    def invalid_state(cls, error: str) -> "Result[T]":
        return cls.fail(error, ErrorKind.INVALID_STATE)

    @classmethod
    def forbidden(cls, error: str) -> "Result[T]":
        return cls.fail(error, ErrorKind.AUTHORIZATION)

    def propagate(self) -> "Result":
        """Re-wrap a failure so it can be returned from a function with a different value type."""
        return Result(is_success=False, error=self.error, kind=self.kind)

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        kind = self.kind.value if self.kind else None
        return f"Result.fail({self.error!r}, kind={kind!r})"
