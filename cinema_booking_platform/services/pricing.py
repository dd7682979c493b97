"""
Seat pricing from a band table keyed by seat number.
"""

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import Settings, get_settings
from .seat_layout import seat_number


class PriceBand(BaseModel):
    """Seats numbered ``min_number``..``max_number`` (inclusive) cost ``price``."""
    model_config = ConfigDict(frozen=True)

    name: str
    min_number: int = Field(..., ge=1)
    max_number: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)

    @model_validator(mode="after")
    def bounds_ordered(self):
        if self.max_number < self.min_number:
            raise ValueError("max_number must not be below min_number")
        return self

    def contains(self, number: int) -> bool:
        return self.min_number <= number <= self.max_number


class PricingPolicy(BaseModel):
    """Ordered band table; the first band containing the seat number wins."""
    model_config = ConfigDict(frozen=True)

    bands: Tuple[PriceBand, ...] = ()
    default_price: Decimal = Field(..., ge=0)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PricingPolicy":
        """Build the premium/standard policy from configuration."""
        settings = settings or get_settings()
        return cls(
            bands=(
                PriceBand(
                    name="premium",
                    min_number=settings.premium_seat_min,
                    max_number=settings.premium_seat_max,
                    price=settings.premium_seat_price,
                ),
            ),
            default_price=settings.standard_seat_price,
        )

    def price_for_label(self, label: str) -> Decimal:
        number = seat_number(label)
        for band in self.bands:
            if band.contains(number):
                return band.price
        return self.default_price

    def total(self, labels: Iterable[str]) -> Decimal:
        return sum((self.price_for_label(label) for label in labels), Decimal("0"))
