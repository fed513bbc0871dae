"""
Field-priority resolution table: the one place record-schema drift is handled.

Each canonical field lists the raw keys to try, current name first, then the
legacy names older writers used. The first key holding a non-blank value wins;
when none does, the normalizer applies the field's default. Add new aliases
here, at the end of the relevant tuple.
"""

from collections.abc import Mapping
from typing import Any, Optional

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    # Identity
    "id": ("id", "dealNumber", "deal_number"),
    "deal_number": ("dealNumber", "deal_number", "id"),
    "stock_number": ("stockNumber", "stock_number"),
    "vin": ("vinLast8", "vin_last8", "vin"),
    "customer_last_name": ("lastName", "customer", "customer_name", "customerName"),
    # Classification
    "vehicle_type": ("vehicleType", "vehicle_type", "vehicle"),
    "deal_type": ("dealType", "deal_type"),
    "status": ("dealStatus", "status", "deal_status"),
    "deal_date": ("dealDate", "saleDate", "sale_date", "deal_date"),
    # Financial
    "front_end_gross": ("frontEndGross", "frontGross", "front_end_gross"),
    "back_end_gross": ("backEndGross", "profit", "back_end_gross"),
    "total_gross": ("totalGross", "amount", "total_gross"),
    "reserve_flat": ("reserveFlat", "reserve_flat"),
    # Product profits
    "service_contract_profit": ("vscProfit", "vsc_profit", "serviceContractProfit"),
    "prepaid_maintenance_profit": ("ppmProfit", "ppm_profit", "prepaidMaintenanceProfit"),
    "gap_insurance_profit": ("gapProfit", "gap_profit"),
    "tire_and_wheel_profit": ("tireAndWheelProfit", "tire_and_wheel_profit", "twProfit"),
    "appearance_protection_profit": ("appearanceProfit", "appearance_profit", "paintProtectionProfit"),
    "other_profit": ("otherProfit", "other_profit"),
    # Participants
    "primary_participant_id": ("salespersonId", "primarySalespersonId", "salesperson_id"),
    "secondary_participant_id": ("secondSalespersonId", "secondarySalespersonId", "second_salesperson_id"),
    "is_split_deal": ("isSplitDeal", "is_split_deal", "splitDeal"),
    "supervisor_id": ("salesManagerId", "sales_manager_id", "supervisorId"),
    "dealership_id": ("dealershipId", "dealership_id"),
    # Finance details
    "lender": ("lender",),
    "outside_funding": ("outsideFunding", "outside_funding"),
}


def is_present(value: Any) -> bool:
    """None and blank strings count as absent."""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def resolve(record: Mapping[str, Any], field: str) -> Optional[Any]:
    """Return the value under the highest-priority alias present, or None."""
    for key in FIELD_ALIASES[field]:
        if key in record and is_present(record[key]):
            return record[key]
    return None


def resolved_key(record: Mapping[str, Any], field: str) -> Optional[str]:
    """Which alias supplied the field; None when the default applies."""
    for key in FIELD_ALIASES[field]:
        if key in record and is_present(record[key]):
            return key
    return None
