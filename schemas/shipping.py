from pydantic import Field

from schemas.base import CamelModel


class ShippingRate(CamelModel):
    inside_dhaka: float = Field(ge=0)
    outside_dhaka: float = Field(ge=0)
