from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from freightquote.core.enums import EquipmentType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteRequest(CamelModel):
    # Presence and weight are checked by QuoteService so that they surface
    # as domain errors rather than schema errors.
    origin: Optional[str] = None
    destination: Optional[str] = None
    equipment_type: Optional[EquipmentType] = None
    weight: Optional[float] = None
    pickup_date: Optional[date] = None
    cache_distance: Optional[float] = None
    confirmed_origin: Optional[str] = None
    confirmed_destination: Optional[str] = None


class RateBreakdown(CamelModel):
    model_config = ConfigDict(frozen=True)

    base_rate: float
    equipment_charge: float
    fuel_surcharge: float
    weight_factor: float
    total: float


class Quote(CamelModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    origin: str
    destination: str
    equipment_type: EquipmentType
    weight: float = Field(gt=0)
    pickup_date: date
    distance: float = Field(ge=0)
    days: int = Field(ge=1)
    base_rate: float
    equipment_charge: float
    fuel_surcharge: float
    weight_factor: float
    total: float


class QuoteResponse(BaseModel):
    quote: Quote


class ErrorResponse(BaseModel):
    error: str


class RateCard(CamelModel):
    per_km_rate: float
    max_daily_travel_km: float
    equipment_charges: Dict[EquipmentType, str]
    fuel_surcharges: Dict[str, str]
    weight_factor: str
