"""
CSV export and import for cart lines and per-line totals
"""
from __future__ import annotations
import csv
from typing import List

from models import DiscountKind, LineDiscount, LineItem, TaxRate, Totals
from money import WORK_PLACES
from utils import parse_amount, safe_amount

LINE_ITEM_COLUMNS = [
    'line_id', 'description', 'regular_price', 'sale_price', 'prompted_price', 'quantity',
    'sold_by_weight', 'container_value', 'tax_rates', 'snap_eligible', 'floor_price',
    'floor_override', 'discount',
]


def _flag(s: str) -> bool:
    return s.strip().lower() in ('1', 'true', 'yes', 'y')


def export_line_totals_to_csv(totals: Totals, filepath: str) -> None:
    """
    Export per-line detail of a Totals to CSV
    Tax per authority is written as AUTH:amount pairs separated by ';'
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow([
            'line_id', 'quantity', 'price_used', 'line_discount', 'invoice_discount', 'final_price',
            'crv', 'snap_paid', 'taxable_amount', 'taxes', 'tax', 'savings',
        ])
        for line in totals.lines:
            taxes_str = ';'.join([f"{k}:{v}" for k, v in line.taxes])
            writer.writerow([
                line.line_id,
                line.quantity,
                line.effective_price,
                line.line_discount,
                line.invoice_discount,
                line.subtotal,
                line.container_total,
                line.snap_paid,
                line.taxable_base,
                taxes_str,
                line.tax,
                line.savings,
            ])


def export_line_items_to_csv(items: List[LineItem], filepath: str) -> None:
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(LINE_ITEM_COLUMNS)
        for item in items:
            writer.writerow([
                item.line_id,
                item.description,
                item.regular_price,
                item.sale_price or '',
                item.prompted_price or '',
                item.quantity,
                'yes' if item.sold_by_weight else 'no',
                item.container_value,
                ';'.join([f"{r.authority_id}:{r.percent}" for r in item.tax_rates]),
                'yes' if item.snap_eligible else 'no',
                item.floor_price or '',
                'yes' if item.floor_override else 'no',
                f"{item.discount.kind.value}:{item.discount.amount}" if item.discount else '',
            ])


def import_line_items_from_csv(filepath: str) -> List[LineItem]:
    """
    Import cart lines from CSV
    tax_rates column holds AUTH:percent pairs separated by ';', discount holds kind:amount
    """
    items = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            rates = []
            if row.get('tax_rates'):
                for pair in row['tax_rates'].split(';'):
                    if ':' in pair:
                        k, v = pair.split(':', 1)
                        rates.append(TaxRate(k.strip(), parse_amount(v.strip(), WORK_PLACES)))

            discount = None
            if row.get('discount') and ':' in row['discount']:
                kind, amount = row['discount'].split(':', 1)
                discount = LineDiscount(DiscountKind(kind.strip()), parse_amount(amount.strip(), WORK_PLACES))

            weighted = _flag(row.get('sold_by_weight', ''))
            item = LineItem(
                line_id=row['line_id'],
                description=row.get('description', ''),
                regular_price=parse_amount(row['regular_price']),
                sale_price=safe_amount(row.get('sale_price', '')),
                prompted_price=safe_amount(row.get('prompted_price', '')),
                quantity=parse_amount(row['quantity'], WORK_PLACES if weighted else 0),
                sold_by_weight=weighted,
                container_value=parse_amount(row.get('container_value') or '0'),
                tax_rates=tuple(rates),
                snap_eligible=_flag(row.get('snap_eligible', '')),
                floor_price=safe_amount(row.get('floor_price', '')),
                floor_override=_flag(row.get('floor_override', '')),
                discount=discount,
            )
            items.append(item)

    return items
