"""
Remote catalog payload validation.

Response bodies are checked against the expected listing/product shape
before any field mapping happens. Validation returns a tagged result
instead of raising, so callers decide how a mismatch is classified.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

T = TypeVar("T")


class RawImage(BaseModel):
    src: str


class RawOption(BaseModel):
    name: str
    values: List[str] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def stringify_values(cls, v):
        if v is None:
            return []
        return [str(value) for value in v]


class RawVariant(BaseModel):
    id: Union[int, str]
    title: str = ""
    price: Optional[Union[str, int, float]] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None

    @field_validator("sku", "option1", "option2", "option3", mode="before")
    @classmethod
    def stringify(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator("price")
    @classmethod
    def decimal_price(cls, v):
        """Prices must parse as decimals so mapping never fails later."""
        if v is None or v == "":
            return v
        try:
            Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid price: {v!r}")
        return v


class RawProduct(BaseModel):
    id: Union[int, str]
    title: str
    handle: str
    body_html: Optional[str] = None
    vendor: Optional[str] = None
    images: List[RawImage] = Field(default_factory=list)
    options: List[RawOption] = Field(default_factory=list)
    variants: List[RawVariant] = Field(default_factory=list)


class CatalogPage(BaseModel):
    """Body of the paginated listing endpoint."""

    products: List[RawProduct]


class ProductEnvelope(BaseModel):
    """Body of the single-product endpoint."""

    product: RawProduct


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Invalid:
    reason: str
    ok: bool = False


def _validate(model, body) -> Union[Valid, Invalid]:
    try:
        return Valid(model.model_validate_json(body))
    except ValidationError as e:
        return Invalid(reason=f"{e.error_count()} validation error(s): {e.errors()[0].get('msg', '')}")
    except ValueError as e:
        return Invalid(reason=str(e))


def validate_catalog_page(body) -> Union[Valid, Invalid]:
    """Validate a listing page body (`{"products": [...]}`)."""
    return _validate(CatalogPage, body)


def validate_product(body) -> Union[Valid, Invalid]:
    """Validate a single-product body (`{"product": {...}}`)."""
    return _validate(ProductEnvelope, body)
