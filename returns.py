"""
Return adjuster: proportional refunds against an original Totals
"""
from __future__ import annotations
from dataclasses import replace
from typing import Dict, Sequence

import structlog

from computations import summarize
from errors import EngineError, Err, InvalidReturnQuantityError, Ok, Result, errmsg
from models import LineTotals, ReturnRequest, Totals, TransactionState
from money import Fixed, ZERO
from payments import transition

logger = structlog.get_logger()


def returnable_quantity(line: LineTotals, already_returned: Fixed = ZERO) -> Fixed:
    """Quantity of a sold line that can still come back"""
    return max(ZERO, line.quantity - already_returned)


def _lines_by_index(original: Totals) -> Dict[int, LineTotals]:
    return {line.index: line for line in original.lines}


def validate_return(original: Totals, request: ReturnRequest) -> LineTotals:
    """Return the original line the request refers to, or raise"""
    if original.is_refund:
        raise InvalidReturnQuantityError(errmsg.RETURN_OF_REFUND, line_index=request.line_index)
    line = _lines_by_index(original).get(request.line_index)
    if line is None:
        raise InvalidReturnQuantityError(
            f"{errmsg.RETURN_UNKNOWN_LINE}: {request.line_index}", line_index=request.line_index
        )
    if request.quantity <= 0:
        raise InvalidReturnQuantityError(errmsg.RETURN_QUANTITY_POSITIVE, line_index=request.line_index)
    remaining = returnable_quantity(line, request.already_returned)
    if request.quantity > remaining:
        raise InvalidReturnQuantityError(
            f"{errmsg.RETURN_EXCEEDS_PURCHASED} ({remaining} remaining)", line_index=request.line_index
        )
    return line


def refund_totals(original: Totals, requests: Sequence[ReturnRequest]) -> Totals:
    """
    Refund Totals (negative amounts) for the requested quantities.

    Each returned line refunds returned/purchased of its final price,
    container value and each authority's tax. Returning everything yields
    the exact negation of the original.
    """
    refunded = []
    claimed: Dict[int, Fixed] = {}
    for request in requests:
        earlier = claimed.get(request.line_index, ZERO)
        line = validate_return(original, replace(request, already_returned=request.already_returned + earlier))
        claimed[request.line_index] = earlier + request.quantity
        fraction = request.quantity.exact() / line.quantity.exact()
        refunded.append(line.scaled(fraction))
    return summarize(refunded, refund=True)


def negated(original: Totals) -> Totals:
    """Full refund of every line"""
    return summarize([line.scaled(1) for line in original.lines], refund=True)


def calculate_refund(original: Totals, requests: Sequence[ReturnRequest]) -> Result:
    try:
        refund = refund_totals(original, requests)
    except EngineError as e:
        logger.warning("calculation_rejected", kind=e.kind.value, message=e.message)
        return Err(e)
    logger.debug("refund_calculated", grand_total=str(refund.grand_total), lines=len(refund.lines))
    return Ok(refund)


def state_after_return(
    current: TransactionState,
    original: Totals,
    requests: Sequence[ReturnRequest],
) -> TransactionState:
    """RETURNED once every sold unit has come back, PARTIALLY_RETURNED before that"""
    returned: Dict[int, Fixed] = {}
    for r in requests:
        returned[r.line_index] = returned.get(r.line_index, r.already_returned) + r.quantity
    complete = all(returned.get(line.index, ZERO) >= line.quantity for line in original.lines)
    target = TransactionState.RETURNED if complete else TransactionState.PARTIALLY_RETURNED
    return transition(current, target)
