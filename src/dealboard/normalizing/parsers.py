"""Coercion helpers for loosely-typed raw deal fields."""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from dealboard.models.deal import DealStatus, DealType, VehicleType

DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")

_VEHICLE_CODES = {
    "N": VehicleType.NEW,
    "U": VehicleType.USED,
    "C": VehicleType.CPO,
}

_VEHICLE_DISPLAY = {
    VehicleType.NEW: "New",
    VehicleType.USED: "Used",
    VehicleType.CPO: "CPO",
}

_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}


def _squash(text: str) -> str:
    """Lowercase and drop spaces, dashes and underscores: 'Dead Deal' -> 'deaddeal'."""
    return re.sub(r"[\s_\-]+", "", text.lower())


_STATUS_LOOKUP = {_squash(s.value): s for s in DealStatus}
_DEAL_TYPE_LOOKUP = {_squash(t.value): t for t in DealType}


def parse_number(value: Any) -> float:
    """
    Parse a gross/profit field. Anything that is not a finite number or a
    plain numeric string (e.g. "1,200", "N/A", NaN) becomes 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_text(value: Any) -> str:
    """Identifier/text field as a stripped string; integral floats lose the '.0'."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float, Decimal)):
        return str(value).strip()
    return ""


def parse_optional_id(value: Any) -> Optional[str]:
    text = parse_text(value)
    return text or None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def parse_date(value: Any) -> Optional[date]:
    """Parse a deal date; ISO datetimes keep only their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def parse_vin_suffix(value: Any) -> str:
    return parse_text(value)[-8:]


def parse_vehicle_type(value: Any) -> VehicleType:
    """
    Single-letter codes first (N/U/C); otherwise classify free-text vehicle
    descriptions: "cpo"/"certified" -> CPO, "new" -> New, anything else Used.
    """
    text = parse_text(value)
    if not text:
        return VehicleType.USED
    code = _VEHICLE_CODES.get(text.upper())
    if code is not None:
        return code
    lowered = text.lower()
    for vehicle_type in VehicleType:
        if lowered == vehicle_type.value.lower():
            return vehicle_type
    if "cpo" in lowered or "certified" in lowered:
        return VehicleType.CPO
    if "new" in lowered:
        return VehicleType.NEW
    return VehicleType.USED


def vehicle_type_display(vehicle_type: VehicleType) -> str:
    return _VEHICLE_DISPLAY[vehicle_type]


def parse_deal_type(value: Any) -> DealType:
    return _DEAL_TYPE_LOOKUP.get(_squash(parse_text(value)), DealType.FINANCE)


def parse_status(value: Any) -> Optional[DealStatus]:
    """Match status text ignoring case and spacing; None when unrecognised."""
    if isinstance(value, DealStatus):
        return value
    return _STATUS_LOOKUP.get(_squash(parse_text(value)))
