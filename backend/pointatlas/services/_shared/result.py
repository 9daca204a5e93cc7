"""
Success/failure envelope returned by every core operation.

Expected failures (bad input, wrong credentials, missing or foreign
resources) travel as :class:`Result` values carrying an HTTP-style status
code. Only unexpected faults are raised as exceptions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

T = TypeVar("T")
U = TypeVar("U")

OK = 200
BAD_REQUEST = 400
UNAUTHORIZED = 401
FORBIDDEN = 403
NOT_FOUND = 404
CONFLICT = 409
INTERNAL_ERROR = 500

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """
    Outcome of an operation: a value on success, a message and status on failure.

    :param is_success: Whether the operation succeeded.
    :param value: Payload on success (may be ``None`` for unit results).
    :param error: Client-safe message; required and non-empty on failure.
    :param status_code: ``200`` on success, ``>= 400`` on failure.
    """

    is_success: bool
    value: T | None = None
    error: str | None = None
    status_code: int = OK

    def __post_init__(self) -> None:
        if self.is_success:
            if self.error is not None:
                raise ValueError("A successful Result cannot carry an error.")
            if self.status_code >= 400:
                raise ValueError("A successful Result needs a non-error status code.")
        else:
            if not self.error:
                raise ValueError("A failed Result needs a non-empty error message.")
            if self.value is not None:
                raise ValueError("A failed Result cannot carry a value.")
            if self.status_code < 400:
                raise ValueError("A failed Result needs an error status code (>= 400).")

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    # ------------------------------ Factories --------------------------------

    @classmethod
    def success(cls, value: T | None = None, status_code: int = OK) -> Result[T]:
        return cls(is_success=True, value=value, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: int = BAD_REQUEST) -> Result[T]:
        return cls(is_success=False, error=error, status_code=status_code)

    @classmethod
    def not_found(cls, error: str = "Resource not found") -> Result[T]:
        return cls.failure(error, NOT_FOUND)

    @classmethod
    def unauthorized(cls, error: str = "Unauthorized") -> Result[T]:
        return cls.failure(error, UNAUTHORIZED)

    @classmethod
    def forbidden(cls, error: str = "Forbidden") -> Result[T]:
        return cls.failure(error, FORBIDDEN)

    @classmethod
    def conflict(cls, error: str) -> Result[T]:
        return cls.failure(error, CONFLICT)

    @classmethod
    def unexpected(cls, error: str = UNEXPECTED_ERROR_MESSAGE) -> Result[T]:
        return cls.failure(error, INTERNAL_ERROR)

    # ------------------------------ Combinators ------------------------------

    def unwrap(self) -> T:
        """
        Return the value of a successful result.

        :raises ValueError: If the result is a failure.
        """
        if self.is_failure:
            raise ValueError(f"Cannot unwrap a failed Result ({self.status_code}: {self.error})")
        return cast(T, self.value)

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Transform the value of a success; failures pass through unchanged."""
        if self.is_failure:
            return self.cast_failure()
        return Result.success(fn(cast(T, self.value)), self.status_code)

    def cast_failure(self) -> Result[Any]:
        """Re-type a failure so it can be returned from an operation of another type."""
        if self.is_success:
            raise ValueError("Only failed Results can be re-typed.")
        return Result.failure(cast(str, self.error), self.status_code)
