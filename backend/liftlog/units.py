from enum import Enum

from liftlog.errors import ValidationError

KG_TO_LB = 2.20462


class WeightUnit(str, Enum):
    kg = "kg"
    lbs = "lbs"


def convert_weight(weight: float, from_unit: WeightUnit | str, to_unit: WeightUnit | str) -> float:
    from_unit, to_unit = WeightUnit(from_unit), WeightUnit(to_unit)
    if from_unit is to_unit:
        return weight
    if from_unit is WeightUnit.kg:
        return round(weight * KG_TO_LB, 1)
    return round(weight / KG_TO_LB, 1)


def parse_user_weight(raw: str | float | None, unit: WeightUnit | str = WeightUnit.kg) -> float | None:
    """User input (in their preferred unit) -> kilograms for storage; None when blank."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        weight = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid weight: {raw!r}")
    return convert_weight(weight, unit, WeightUnit.kg)
