"""
Canonical product shape produced by the catalog scraper.
Consumed by quota reservation and by the import worker.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The destination platform supports at most three option slots per variant
MAX_OPTION_SLOTS = 3

DEFAULT_OPTION_NAME = "Title"


class ProductOption(BaseModel):
    """A product-level option definition, e.g. Size: [S, M, L]."""

    model_config = ConfigDict(frozen=True)

    name: str
    values: List[str] = Field(default_factory=list)


class ScrapedVariant(BaseModel):
    """A purchasable variant of a scraped product."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: str
    price: str = Field(..., description="Decimal price kept as a string")
    sku: str
    inventory_quantity: int = Field(default=0, ge=0)
    selected_options: List[Optional[str]] = Field(
        default_factory=list,
        max_length=MAX_OPTION_SLOTS,
        description="Positional option selections (option1..option3)",
    )

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        """Accept numbers or strings, keep the decimal text exactly."""
        if v is None or v == "":
            return "0.00"
        text = str(v).strip()
        try:
            Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Invalid price: {v!r}")
        return text

    @field_validator("inventory_quantity", mode="before")
    @classmethod
    def clamp_inventory(cls, v):
        """Missing or negative stock counts as zero."""
        if v is None:
            return 0
        return max(0, int(v))

    @field_validator("selected_options", mode="before")
    @classmethod
    def drop_extra_options(cls, v):
        """Option selections past the third slot are dropped."""
        if v is None:
            return []
        return list(v)[:MAX_OPTION_SLOTS]

    @property
    def option_values(self) -> List[str]:
        """Non-empty selections in slot order."""
        return [value for value in self.selected_options if value]


class ScrapedProduct(BaseModel):
    """
    Normalized product record.

    Immutable: the worker derives a copy with the rewritten description
    rather than mutating the scraped record.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description_html: str = ""
    vendor: str
    source_url: str
    images: List[str] = Field(default_factory=list)
    options: List[ProductOption] = Field(default_factory=list)
    variants: List[ScrapedVariant] = Field(default_factory=list)

    @property
    def has_real_options(self) -> bool:
        """False when the only option is the platform's implicit default."""
        if not self.options:
            return False
        return not (len(self.options) == 1 and self.options[0].name == DEFAULT_OPTION_NAME)

    def with_description(self, description_html: str) -> "ScrapedProduct":
        return self.model_copy(update={"description_html": description_html})
