"""
Explicit outcome values returned by the service layer.

Expected outcomes (bad input, missing fund, duplicate code, rejected
movement) are returned as :class:`Err` values instead of being raised, so a
caller can see every possible outcome in the method signature.  Exceptions are
reserved for unexpected failures such as lost database connectivity.

Usage::

    result = await service.delete_fund(code)
    if isinstance(result, Err):
        ...  # result.kind, result.message
    else:
        ...  # result.value
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Categories of expected failure."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_OPERATION = "invalid_operation"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value (which may itself be ``None``)."""

    value: T


@dataclass(frozen=True)
class Err:
    """Expected failure: an error kind plus a human-readable message."""

    kind: ErrorKind
    message: str


Result = Union[Ok[T], Err]
