"""
Audit workbook export of a Totals snapshot
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Totals
from money import Fixed


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _cell(value):
    """Fixed values go in as text so the workbook shows exactly what was computed"""
    return str(value) if isinstance(value, Fixed) else value


def _append(ws, row):
    ws.append([_cell(v) for v in row])


def export_excel(totals: Totals, filepath: str) -> None:
    """
    Export a Totals snapshot to an Excel file with sheets:
    - Lines: per-line prices, discounts, SNAP share and tax
    - Tax: per-authority totals
    - Tenders: application of each tender (when reconciled)
    - Summary: transaction totals
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    ws = wb.create_sheet("Lines")
    authorities = [a for a, _ in totals.taxes]
    _append(ws, [
        "line", "qty", "price used", "line discount", "invoice discount", "final price",
        "crv", "snap paid", "taxable", *authorities, "tax", "savings",
    ])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for line in totals.lines:
        by_authority = dict(line.taxes)
        _append(ws, [
            line.line_id, line.quantity, line.effective_price, line.line_discount,
            line.invoice_discount, line.subtotal, line.container_total, line.snap_paid,
            line.taxable_base, *[by_authority.get(a, "") for a in authorities], line.tax, line.savings,
        ])
    if totals.lines:
        _append(ws, ["TOTALS", "", "", totals.line_discount_total, totals.invoice_discount_total,
                     totals.subtotal, totals.container_total, totals.snap_paid_total, "",
                     *[amount for _, amount in totals.taxes], totals.tax_total, totals.savings_total])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    _autosize_columns(ws)

    ws = wb.create_sheet("Tax")
    _append(ws, ["Authority", "Amount"])
    _style_header(ws, 1)
    for authority, amount in totals.taxes:
        _append(ws, [authority, amount])
    _autosize_columns(ws)

    ws = wb.create_sheet("Tenders")
    _append(ws, ["Method", "Tendered", "Applied", "Change", "Remaining After", "Reference"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    if totals.payment is not None:
        for a in totals.payment.applications:
            _append(ws, [a.tender.method.value, a.tender.amount, a.applied, a.change,
                         a.remaining_after, a.tender.reference])
    _autosize_columns(ws)

    ws = wb.create_sheet("Summary")
    _append(ws, ["Field", "Amount"])
    _style_header(ws, 1)
    rows = [
        ("Subtotal", totals.subtotal),
        ("CRV", totals.container_total),
        ("Tax", totals.tax_total),
        ("Grand Total", totals.grand_total),
        ("Savings", totals.savings_total),
        ("SNAP Paid", totals.snap_paid_total),
        ("SNAP Eligible", totals.snap_eligible_total),
        ("Non-SNAP", totals.non_snap_total),
    ]
    if totals.payment is not None:
        rows += [("Change Due", totals.payment.change_due), ("Remaining", totals.payment.remaining)]
    for name, amount in rows:
        _append(ws, [name, amount])
    if totals.is_refund:
        _append(ws, ["Refund", "yes"])
    _autosize_columns(ws)

    wb.save(filepath)
