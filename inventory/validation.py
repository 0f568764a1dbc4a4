"""
Product field validation.

``validate_product`` is pure and returns every violation at once; callers
decide whether a non-empty result blocks submission. Both the API client
(before sending) and the product service (before persisting) apply it.
"""
import math
from numbers import Real
from typing import Any, Mapping, NamedTuple

NAME_MAX_LENGTH = 100


class FieldError(NamedTuple):
    field: str
    message: str


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_product(candidate: Mapping[str, Any], partial: bool = False) -> list[FieldError]:
    """
    Check a product draft.

    Args:
        candidate: Draft fields (``name``, ``price``, ``stock``, ...).
            Missing keys and ``None`` values count as undefined.
        partial: When True an absent ``name`` is allowed (patch semantics);
            a name that is present but blank is still rejected.

    Returns:
        List of ``FieldError``; empty when the draft is valid.
    """
    errors: list[FieldError] = []

    name = candidate.get("name")
    name_given = "name" in candidate and name is not None
    if (not partial or name_given) and (not isinstance(name, str) or not name.strip()):
        errors.append(FieldError("name", "Name is required"))

    if isinstance(name, str) and len(name) > NAME_MAX_LENGTH:
        errors.append(FieldError("name", f"Name must be at most {NAME_MAX_LENGTH} characters"))

    price = candidate.get("price")
    if price is not None:
        if not _is_number(price) or math.isnan(price):
            errors.append(FieldError("price", "Invalid price value"))
        elif price < 0:
            errors.append(FieldError("price", "Price must be greater than or equal to 0"))

    stock = candidate.get("stock")
    if stock is not None:
        if not _is_number(stock) or math.isnan(stock):
            errors.append(FieldError("stock", "Invalid stock value"))
        else:
            if stock < 0:
                errors.append(FieldError("stock", "Stock must be greater than or equal to 0"))
            if not math.isfinite(stock) or stock != int(stock):
                errors.append(FieldError("stock", "Stock must be a whole number"))

    return errors
