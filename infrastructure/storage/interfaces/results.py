"""
Operation Result Types

Storage operations return these values instead of raising. A result is either
successful (``error_kind`` is ``StorageErrorKind.NONE``) or carries an error
kind plus a human-readable message. The message is diagnostic text only;
branch on ``error_kind``.

Example:
    result = await remove_object(client, "bucket", "object")
    result.match(
        on_success=lambda: print("removed"),
        on_failure=lambda kind, message: print(f"failed: {kind.value}"),
    )
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .storage_interface import StorageErrorKind

T = TypeVar("T")
R = TypeVar("R")

UNKNOWN_ERROR_MESSAGE = "Unknown error"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a storage operation that produces no value."""

    error_kind: StorageErrorKind = StorageErrorKind.NONE
    error_message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error_kind is StorageErrorKind.NONE

    @classmethod
    def success(cls) -> "OperationResult":
        return cls()

    @classmethod
    def failure(cls, error_kind: StorageErrorKind, message: str) -> "OperationResult":
        _check_failure(error_kind, message)
        return cls(error_kind=error_kind, error_message=message)

    def match(
        self,
        on_success: Callable[[], R],
        on_failure: Callable[[StorageErrorKind, str], R],
    ) -> R:
        """
        Dispatch to exactly one callback and return what it returns.

        Args:
            on_success: Called with no arguments when the operation succeeded
            on_failure: Called with the error kind and message otherwise

        Returns:
            The chosen callback's return value (None for side-effect callbacks)
        """
        if self.is_success:
            return on_success()
        return on_failure(self.error_kind, self.error_message or UNKNOWN_ERROR_MESSAGE)


@dataclass(frozen=True)
class ValueResult(OperationResult, Generic[T]):
    """Outcome of a storage operation that produces a value on success."""

    value: Optional[T] = None

    @classmethod
    def success(cls, value: T) -> "ValueResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error_kind: StorageErrorKind, message: str) -> "ValueResult[T]":
        _check_failure(error_kind, message)
        return cls(error_kind=error_kind, error_message=message)

    def match(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[StorageErrorKind, str], R],
    ) -> R:
        """
        Dispatch to exactly one callback and return what it returns.

        Args:
            on_success: Called with the operation's value when it succeeded
            on_failure: Called with the error kind and message otherwise

        Returns:
            The chosen callback's return value (None for side-effect callbacks)
        """
        if self.is_success:
            return on_success(self.value)
        return on_failure(self.error_kind, self.error_message or UNKNOWN_ERROR_MESSAGE)


def _check_failure(error_kind: StorageErrorKind, message: str) -> None:
    if error_kind is StorageErrorKind.NONE:
        raise ValueError("a failed result needs an error kind other than NONE")
    if message is None:
        raise ValueError("a failed result needs an error message")
