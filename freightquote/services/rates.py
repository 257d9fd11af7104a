import math

from freightquote.core.enums import EquipmentType
from freightquote.core.errors import InvalidInputError
from freightquote.schemas.quote import RateBreakdown, RateCard

PER_KM_RATE = 1.616
EQUIPMENT_MULTIPLIERS = {
    EquipmentType.DRY_VAN: 0.0,
    EquipmentType.REEFER: 0.30,
    EquipmentType.FLATBED: 0.15,
}
HEAVY_WEIGHT_LB = 10000
LIGHT_FUEL_SURCHARGE = 0.237
HEAVY_FUEL_SURCHARGE = 0.557
WEIGHT_FACTOR_PER_100_LB = 0.10
MAX_DAILY_TRAVEL_KM = 541


def _equipment(equipment_type) -> EquipmentType:
    try:
        return EquipmentType(equipment_type)
    except ValueError:
        raise InvalidInputError(f"Unknown equipment type: {equipment_type!r}")


def fuel_surcharge_rate(weight_lb: float) -> float:
    return LIGHT_FUEL_SURCHARGE if weight_lb < HEAVY_WEIGHT_LB else HEAVY_FUEL_SURCHARGE


def compute_rate(distance_km: float, weight_lb: float, equipment_type) -> RateBreakdown:
    """Itemized price for a shipment.

    The fuel surcharge applies to base rate plus equipment charge, never to
    the weight factor. Amounts are left unrounded.
    """
    equipment = _equipment(equipment_type)
    if weight_lb is None or not math.isfinite(weight_lb) or weight_lb <= 0:
        raise InvalidInputError("Weight must be greater than zero.")
    if distance_km is None or not math.isfinite(distance_km) or distance_km < 0:
        raise InvalidInputError("Distance must be a finite, non-negative number.")

    base_rate = PER_KM_RATE * distance_km
    equipment_charge = base_rate * EQUIPMENT_MULTIPLIERS[equipment]
    fuel_surcharge = (base_rate + equipment_charge) * fuel_surcharge_rate(weight_lb)
    weight_factor = max(0, weight_lb - HEAVY_WEIGHT_LB) / 100 * WEIGHT_FACTOR_PER_100_LB

    return RateBreakdown(
        base_rate=base_rate,
        equipment_charge=equipment_charge,
        fuel_surcharge=fuel_surcharge,
        weight_factor=weight_factor,
        total=base_rate + equipment_charge + fuel_surcharge + weight_factor,
    )


def estimate_days(distance_km: float) -> int:
    if not math.isfinite(distance_km) or distance_km < 0:
        raise InvalidInputError("Distance must be a finite, non-negative number.")
    if distance_km == 0:
        return 1
    return math.ceil(distance_km / MAX_DAILY_TRAVEL_KM)


def _percent(rate: float) -> str:
    return f"{rate * 100:g}%"


def rate_card() -> RateCard:
    return RateCard(
        per_km_rate=PER_KM_RATE,
        max_daily_travel_km=MAX_DAILY_TRAVEL_KM,
        equipment_charges={eq: _percent(m) for eq, m in EQUIPMENT_MULTIPLIERS.items()},
        fuel_surcharges={
            f"under_{HEAVY_WEIGHT_LB}_lb": _percent(LIGHT_FUEL_SURCHARGE),
            f"{HEAVY_WEIGHT_LB}_lb_and_over": _percent(HEAVY_FUEL_SURCHARGE),
        },
        weight_factor=f"{WEIGHT_FACTOR_PER_100_LB:.2f} per 100 lb over {HEAVY_WEIGHT_LB} lb",
    )
