"""
Line Item Pricer: effective unit price, line discount and floor price enforcement
"""
from __future__ import annotations
from typing import Optional, Tuple

import structlog

from errors import InvalidQuantityError, errmsg
from models import DiscountKind, LineDiscount, LineItem, PriceSource, PricedLine
from money import Fixed, MONEY_PLACES, WORK_PLACES, ZERO

logger = structlog.get_logger()


def effective_unit_price(item: LineItem) -> Tuple[Fixed, PriceSource]:
    """Prompted price, then sale price, then regular price. Only positive overrides count."""
    if item.prompted_price is not None and item.prompted_price > 0:
        return item.prompted_price, PriceSource.PROMPTED
    if item.sale_price is not None and item.sale_price > 0:
        return item.sale_price, PriceSource.SALE
    return item.regular_price, PriceSource.REGULAR


def extend(unit_price: Fixed, quantity: Fixed) -> Fixed:
    """Unit price x quantity (count or weight), rounded half up to cents"""
    return unit_price.times(quantity, MONEY_PLACES)


def container_total(item: LineItem) -> Fixed:
    if item.container_value <= 0:
        return ZERO
    return extend(item.container_value, item.quantity)


def apply_line_discount(subtotal: Fixed, quantity: Fixed, discount: Optional[LineDiscount]) -> Fixed:
    """Subtotal after the requested discount, never below zero"""
    if discount is None:
        return subtotal
    if discount.kind == DiscountKind.PERCENT:
        result = subtotal.times(1 - discount.amount.exact() / 100, MONEY_PLACES)
    elif discount.kind == DiscountKind.FIXED_PER_UNIT:
        result = subtotal - discount.amount.times(quantity, MONEY_PLACES)
    elif discount.kind == DiscountKind.FIXED_TOTAL:
        result = subtotal - discount.amount.rescaled(MONEY_PLACES)
    else:
        raise ValueError(f"Unknown discount kind: {discount.kind}")
    return max(ZERO, result)


def validate_quantity(item: LineItem, index: int = 0) -> None:
    if item.quantity <= 0:
        raise InvalidQuantityError(
            f"{errmsg.QUANTITY_POSITIVE}: line {item.line_id!r} has {item.quantity}",
            line_index=index,
        )


def price_line(item: LineItem, index: int = 0) -> PricedLine:
    """
    Price one line.

    The requested discount is applied to the extended price; without a manager
    override the line may not come to less than floor price x quantity, in
    which case it is re-extended at the floor and the realized discount
    shrinks accordingly. Any effective price under the floor is lifted to it,
    except a sale price, which acts as its own floor.
    """
    validate_quantity(item, index)
    qty = item.quantity
    unit, source = effective_unit_price(item)
    gross = extend(unit, qty)
    discounted = apply_line_discount(gross, qty, item.discount)
    final = discounted
    final_unit = Fixed.from_fraction(discounted.exact() / qty.exact(), WORK_PLACES)
    clamped = False

    if item.floor_price is not None and not item.floor_override:
        floor = min(item.floor_price, unit) if source == PriceSource.SALE else item.floor_price
        # exact comparison; the 3-place unit price is for reporting only
        if discounted.exact() < floor.exact() * qty.exact():
            final = extend(floor, qty)
            final_unit = floor.rescaled(WORK_PLACES)
            clamped = final != discounted
            if clamped:
                logger.info(
                    "floor_price_clamped",
                    line_id=item.line_id,
                    price_source=source.value,
                    requested_discount=str(gross - discounted),
                    realized_discount=str(gross - final),
                )

    return PricedLine(
        item=item,
        index=index,
        effective_price=unit,
        price_source=source,
        regular_subtotal=extend(item.regular_price, qty),
        gross_subtotal=gross,
        requested_discount=gross - discounted,
        line_discount=max(ZERO, gross - final),
        line_subtotal=final,
        final_unit_price=final_unit,
        floor_clamped=clamped,
        container_total=container_total(item),
    )
