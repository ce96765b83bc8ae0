# tests/conftest.py
# Ensure project root (parent of tests) is on sys.path so the engine modules import without installing.
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from money import Fixed  # noqa: E402
from models import LineItem, TaxRate  # noqa: E402


def M(text, places=2):
    return Fixed.parse(text, places)


@pytest.fixture
def make_line():
    """Factory for LineItem with count quantity and percentage tax rates"""
    def _make(line_id="1", price="1.00", qty=1, taxes=(), **kw):
        rates = tuple(TaxRate(a, M(p, 3)) for a, p in taxes)
        return LineItem(
            line_id=line_id,
            regular_price=M(price),
            quantity=kw.pop("quantity", None) or Fixed(qty, 0),
            tax_rates=rates,
            **kw,
        )
    return _make
