"""
Validation of product drafts.

A DraftProduct holds the raw strings typed into the product dialog. Every rule
is checked independently so the dialog can show all problems at once; the
caller re-runs check_draft after each field edit and normalize_draft right
before submitting.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from db.models import ProductInput, ProductRecord
from utils.errors import ValidationError
from utils.pure import format_number_input

FIELDS = ("name", "unit_price", "quantity")

# plain decimal literal; rejects inf/nan, hex and digit separators
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class ValidationCode(str, Enum):
    EMPTY_NAME = "EmptyName"
    MISSING_PRICE = "MissingPrice"
    INVALID_PRICE = "InvalidPrice"
    MISSING_QUANTITY = "MissingQuantity"
    INVALID_QUANTITY = "InvalidQuantity"


MESSAGES: Dict[ValidationCode, str] = {
    ValidationCode.EMPTY_NAME: "Product name is required",
    ValidationCode.MISSING_PRICE: "Unit price is required",
    ValidationCode.INVALID_PRICE: "Unit price must be a valid positive number",
    ValidationCode.MISSING_QUANTITY: "Quantity is required",
    ValidationCode.INVALID_QUANTITY: "Quantity must be a valid positive integer",
}


@dataclass
class DraftProduct:
    name: str = ""
    unit_price: str = ""
    quantity: str = ""
    product_id: Optional[str] = None  # None while adding
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_edit(self) -> bool:
        return self.product_id is not None

    @classmethod
    def from_record(cls, record: ProductRecord) -> DraftProduct:
        return cls(
            name=record.name,
            unit_price=format_number_input(record.unit_price),
            quantity=str(record.quantity),
            product_id=record.id,
        )


def parse_number(raw: str) -> Optional[float]:
    """Finite float for a decimal literal, otherwise None."""
    text = raw.strip()
    if not _NUMBER_RE.match(text):
        return None
    value = float(text)  # "1e999" gives inf
    return value if math.isfinite(value) else None


def _check(draft: DraftProduct) -> Tuple[Dict[str, ValidationCode], Optional[float], Optional[int]]:
    codes: Dict[str, ValidationCode] = {}

    if not draft.name.strip():
        codes["name"] = ValidationCode.EMPTY_NAME

    price = None
    if not draft.unit_price.strip():
        codes["unit_price"] = ValidationCode.MISSING_PRICE
    else:
        price = parse_number(draft.unit_price)
        if price is None or price < 0:
            codes["unit_price"] = ValidationCode.INVALID_PRICE

    quantity = None
    if not draft.quantity.strip():
        codes["quantity"] = ValidationCode.MISSING_QUANTITY
    else:
        qty = parse_number(draft.quantity)
        if qty is None or qty < 0 or not qty.is_integer():
            codes["quantity"] = ValidationCode.INVALID_QUANTITY
        else:
            quantity = int(qty)

    return codes, price, quantity


def check_draft(draft: DraftProduct) -> Dict[str, str]:
    """field -> error message; an empty dict means the draft is valid"""
    codes, _, _ = _check(draft)
    return {f: MESSAGES[c] for f, c in codes.items()}


def normalize_draft(draft: DraftProduct) -> ProductInput:
    """
    Turn a valid draft into the request body.

    Raises:
        ValidationError: with every failing field, when any rule fails.
    """
    codes, price, quantity = _check(draft)
    if codes:
        raise ValidationError(
            {f: MESSAGES[c] for f, c in codes.items()},
            {f: c.value for f, c in codes.items()},
        )
    return ProductInput(name=draft.name.strip(), unit_price=price, quantity=quantity)
