from typing import List, Optional

from pydantic import BaseModel, field_validator

from freightquote.core.enums import EquipmentType
from freightquote.schemas.quote import CamelModel, Quote


class FilterCriteria(BaseModel):
    origin: str = ""
    destination: str = ""
    equipment: Optional[EquipmentType] = None

    @field_validator("equipment", mode="before")
    @classmethod
    def any_equipment(cls, value):
        if value is None or value == "" or value == "any":
            return None
        return value


class LedgerPage(CamelModel):
    items: List[Quote]
    page: int
    page_size: int
    total_items: int
    total_pages: int
