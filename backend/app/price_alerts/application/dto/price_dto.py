"""Data Transfer Objects for cached price lookups."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AssetPriceDTO(BaseModel):
    """Last cached price of a single asset."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_encoders={Decimal: lambda v: float(v)},
    )

    asset_id: str = Field(description="Normalized asset identifier")
    price: Decimal = Field(description="Price in the quote currency")
    quote_currency: str = Field(default="usd")
