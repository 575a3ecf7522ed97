from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, Field, ValidationError, field_validator
from typing import Optional, Dict, Any, Union
import math
import uuid

from .errors import ValidationFailed

NAME_MESSAGE = "Product name is required and must be a string."
PRICE_MESSAGE = "Price is required and must be a number greater than 0."
IN_STOCK_MESSAGE = "inStock must be a boolean if provided."
SHAPE_MESSAGE = "Product payload must be a JSON object."
FINITE_MESSAGE = "Numeric fields must be finite numbers."

class ProductIn(BaseModel):
    """Shape a create/update payload must have. Unknown fields are allowed."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr = Field(min_length=1)
    price: Union[StrictInt, StrictFloat]
    inStock: StrictBool = False
    description: Optional[Any] = None
    category: Optional[Any] = None

    @field_validator("price")
    @classmethod
    def price_positive(cls, v):
        if not v > 0 or not math.isfinite(v):
            raise ValueError(PRICE_MESSAGE)
        return v

_FIELD_MESSAGES = {
    "name": NAME_MESSAGE,
    "price": PRICE_MESSAGE,
    "inStock": IN_STOCK_MESSAGE,
}

def validate_product(payload: Any) -> Optional[ValidationFailed]:
    """
    Check a product payload before create/update.
    Returns None when the payload is acceptable; the payload itself is never modified.
    """
    if not isinstance(payload, dict):
        return ValidationFailed(SHAPE_MESSAGE)
    try:
        ProductIn.model_validate(payload)
    except ValidationError as exc:
        # errors come back in field declaration order: name, price, inStock
        for err in exc.errors():
            loc = err.get("loc") or ()
            field = loc[0] if loc else None
            if field in _FIELD_MESSAGES:
                return ValidationFailed(_FIELD_MESSAGES[field])
        return ValidationFailed(SHAPE_MESSAGE)
    if not _all_finite(payload):
        return ValidationFailed(FINITE_MESSAGE)
    return None

def _all_finite(value: Any) -> bool:
    # 1e400 decodes to inf, which cannot be serialized back to JSON
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(_all_finite(v) for v in value.values())
    if isinstance(value, list):
        return all(_all_finite(v) for v in value)
    return True

def new_product_id() -> str:
    return str(uuid.uuid4())

def _make_product_dict(product_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    product = {"id": product_id}
    product.update(payload)
    product["id"] = product_id
    product["inStock"] = payload.get("inStock") or False
    return product

def _merge_product_dict(existing: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(existing)
    merged.update(payload)
    merged["id"] = existing["id"]
    return merged
