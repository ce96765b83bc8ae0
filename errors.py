"""
Engine errors, message constants and the Ok/Err result type
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class errmsg:
    """Error message constants"""

    QUANTITY_POSITIVE = "Quantity must be greater than zero"
    TENDER_POSITIVE = "Tender amount must be greater than zero"
    TENDER_EXCEEDS_BALANCE = "Tender exceeds the remaining balance"
    SNAP_EXCEEDS_ELIGIBLE = "SNAP tender exceeds the unpaid SNAP-eligible total"
    RETURN_QUANTITY_POSITIVE = "Return quantity must be greater than zero"
    RETURN_EXCEEDS_PURCHASED = "Cannot return more than purchased"
    RETURN_UNKNOWN_LINE = "Line is not part of the original transaction"
    RETURN_OF_REFUND = "Cannot return against a refund"
    INVALID_TRANSITION = "Transaction cannot move between these states"


class ErrorKind(str, Enum):
    INVALID_QUANTITY = "invalid_quantity"
    OVER_ALLOCATED_TENDER = "over_allocated_tender"
    INVALID_TENDER = "invalid_tender"
    INVALID_RETURN_QUANTITY = "invalid_return_quantity"
    INVALID_TRANSITION = "invalid_transition"


class EngineError(Exception):
    """Input rejected by the engine; recoverable by correcting the input"""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        line_index: Optional[int] = None,
        tender_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line_index = line_index
        self.tender_index = tender_index


class InvalidQuantityError(EngineError):
    kind = ErrorKind.INVALID_QUANTITY


class OverAllocatedTenderError(EngineError):
    kind = ErrorKind.OVER_ALLOCATED_TENDER


class InvalidTenderError(EngineError):
    kind = ErrorKind.INVALID_TENDER


class InvalidReturnQuantityError(EngineError):
    kind = ErrorKind.INVALID_RETURN_QUANTITY


class InvalidTransitionError(EngineError):
    kind = ErrorKind.INVALID_TRANSITION


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: EngineError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Result = Union[Ok, Err]
