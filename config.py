"""
Configuration loading and dict/JSON mapping for snapshots and totals
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from models import (
    DiscountKind,
    LineDiscount,
    LineItem,
    LineTotals,
    Snapshot,
    TaxRate,
    Tender,
    TenderMethod,
    Totals,
    TransactionDiscount,
)
from money import Fixed, WORK_PLACES
from utils import configure_logging, parse_amount


@dataclass(frozen=True)
class EngineConfig:
    """Engine options"""
    change_methods: FrozenSet[TenderMethod] = frozenset({TenderMethod.CASH})
    log_level: str = "INFO"
    log_format: str = "json"  # json | console


def config_from_dict(d: dict) -> EngineConfig:
    defaults = EngineConfig()
    methods = d.get("change_methods")
    return EngineConfig(
        change_methods=frozenset(TenderMethod(m) for m in methods) if methods is not None else defaults.change_methods,
        log_level=str(d.get("log_level", defaults.log_level)).upper(),
        log_format=str(d.get("log_format", defaults.log_format)),
    )


def config_to_dict(config: EngineConfig) -> dict:
    return {
        "change_methods": sorted(m.value for m in config.change_methods),
        "log_level": config.log_level,
        "log_format": config.log_format,
    }


def load_config(path: str) -> EngineConfig:
    """Load engine config from a JSON file; defaults when the file is missing"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return EngineConfig()
    return config_from_dict(data)


def apply_logging(config: EngineConfig) -> None:
    configure_logging(config.log_level, config.log_format)


def _opt(value: Optional[Fixed]) -> Optional[str]:
    return None if value is None else str(value)


def _opt_amount(value, places: int = 2) -> Optional[Fixed]:
    return None if value in (None, "") else parse_amount(value, places)


def line_item_to_dict(item: LineItem) -> dict:
    return {
        "line_id": item.line_id,
        "description": item.description,
        "regular_price": str(item.regular_price),
        "sale_price": _opt(item.sale_price),
        "prompted_price": _opt(item.prompted_price),
        "quantity": str(item.quantity),
        "sold_by_weight": item.sold_by_weight,
        "container_value": str(item.container_value),
        "tax_rates": [{"authority_id": r.authority_id, "percent": str(r.percent)} for r in item.tax_rates],
        "snap_eligible": item.snap_eligible,
        "floor_price": _opt(item.floor_price),
        "floor_override": item.floor_override,
        "discount": None if item.discount is None else {
            "kind": item.discount.kind.value,
            "amount": str(item.discount.amount),
        },
        "removed": item.removed,
    }


def dict_to_line_item(d: dict) -> LineItem:
    weighted = bool(d.get("sold_by_weight", False))
    discount = d.get("discount")
    return LineItem(
        line_id=str(d["line_id"]),
        description=d.get("description", ""),
        regular_price=parse_amount(d["regular_price"]),
        sale_price=_opt_amount(d.get("sale_price")),
        prompted_price=_opt_amount(d.get("prompted_price")),
        quantity=parse_amount(d["quantity"], WORK_PLACES if weighted else 0),
        sold_by_weight=weighted,
        container_value=parse_amount(d.get("container_value", "0")),
        tax_rates=tuple(
            TaxRate(r["authority_id"], parse_amount(r["percent"], WORK_PLACES)) for r in d.get("tax_rates", [])
        ),
        snap_eligible=bool(d.get("snap_eligible", False)),
        floor_price=_opt_amount(d.get("floor_price")),
        floor_override=bool(d.get("floor_override", False)),
        discount=None if not discount else LineDiscount(
            DiscountKind(discount["kind"]),
            parse_amount(discount["amount"], WORK_PLACES),
        ),
        removed=bool(d.get("removed", False)),
    )


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """Convert a Snapshot to a dictionary for JSON serialization"""
    td = snapshot.transaction_discount
    return {
        "lines": [line_item_to_dict(item) for item in snapshot.lines],
        "tenders": [
            {"method": t.method.value, "amount": str(t.amount), "sequence": t.sequence, "reference": t.reference}
            for t in snapshot.tenders
        ],
        "transaction_discount": None if td is None else {"kind": td.kind.value, "amount": str(td.amount)},
    }


def dict_to_snapshot(d: dict) -> Snapshot:
    """Convert a dictionary from JSON to a Snapshot"""
    td = d.get("transaction_discount")
    return Snapshot(
        lines=tuple(dict_to_line_item(item) for item in d.get("lines", [])),
        tenders=tuple(
            Tender(
                method=TenderMethod(t["method"]),
                amount=parse_amount(t["amount"]),
                sequence=int(t.get("sequence", i)),
                reference=t.get("reference", ""),
            )
            for i, t in enumerate(d.get("tenders", []))
        ),
        transaction_discount=None if not td else TransactionDiscount(
            DiscountKind(td["kind"]),
            parse_amount(td["amount"], WORK_PLACES),
        ),
    )


def _taxes(taxes) -> List[dict]:
    return [{"taxId": authority, "amount": str(amount)} for authority, amount in taxes]


def _line_to_submission(line: LineTotals) -> dict:
    return {
        "lineId": line.line_id,
        "quantity": str(line.quantity),
        "priceUsed": str(line.effective_price),
        "lineDiscount": str(line.line_discount),
        "transactionDiscount": str(line.invoice_discount),
        "finalPrice": str(line.subtotal),
        "crvTotal": str(line.container_total),
        "snapPaidAmount": str(line.snap_paid),
        "taxableAmount": str(line.taxable_base),
        "taxes": _taxes(line.taxes),
        "taxTotal": str(line.tax),
        "savingsTotal": str(line.savings),
    }


def totals_to_submission(totals: Totals) -> dict:
    """Backend transaction submission fields"""
    out = {
        "subtotal": str(totals.subtotal),
        "crvTotal": str(totals.container_total),
        "taxTotal": str(totals.tax_total),
        "taxes": _taxes(totals.taxes),
        "grandTotal": str(totals.grand_total),
        "savingsTotal": str(totals.savings_total),
        "lineDiscountTotal": str(totals.line_discount_total),
        "invoiceDiscountTotal": str(totals.invoice_discount_total),
        "snapPaidTotal": str(totals.snap_paid_total),
        "snapEligibleTotal": str(totals.snap_eligible_total),
        "nonSnapTotal": str(totals.non_snap_total),
        "isRefund": totals.is_refund,
        "items": [_line_to_submission(line) for line in totals.lines],
    }
    if totals.payment is not None:
        out["payments"] = [
            {
                "method": a.tender.method.value,
                "amount": str(a.tender.amount),
                "applied": str(a.applied),
                "change": str(a.change),
                "remaining": str(a.remaining_after),
                "reference": a.tender.reference,
            }
            for a in totals.payment.applications
        ]
        out["changeDue"] = str(totals.payment.change_due)
        out["remainingBalance"] = str(totals.payment.remaining)
    return out
