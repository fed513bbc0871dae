"""Normalize raw deal records of any known shape into a canonical Deal."""

import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any

from dealboard.models.deal import Deal, DealStatus
from dealboard.models.outcome import Outcome, attempt

from .aliases import resolve
from .parsers import (
    parse_bool,
    parse_date,
    parse_deal_type,
    parse_number,
    parse_optional_id,
    parse_status,
    parse_text,
    parse_vehicle_type,
    parse_vin_suffix,
)

logger = logging.getLogger(__name__)

_PRODUCT_FIELDS = (
    "service_contract_profit",
    "prepaid_maintenance_profit",
    "gap_insurance_profit",
    "tire_and_wheel_profit",
    "appearance_protection_profit",
    "other_profit",
)


def record_id(raw: Any) -> str:
    """Deterministic id for records that carry none: hash of the record content."""
    try:
        payload = json.dumps(raw, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return "unknown"
    return "D" + hashlib.sha256(payload.encode()).hexdigest()[:12]


def _build_deal(raw: Any) -> Deal:
    if not isinstance(raw, Mapping):
        raise TypeError(f"expected a mapping, got {type(raw).__name__}")

    deal_id = parse_text(resolve(raw, "id")) or record_id(raw)

    raw_status = resolve(raw, "status")
    status = parse_status(raw_status)
    error = None
    if raw_status is None:
        status = DealStatus.PENDING
    elif status is None:
        status = DealStatus.PENDING
        error = f"Unrecognised deal status: {parse_text(raw_status) or raw_status!r}"

    front = parse_number(resolve(raw, "front_end_gross"))
    back = parse_number(resolve(raw, "back_end_gross"))
    total_value = resolve(raw, "total_gross")
    total = parse_number(total_value) if total_value is not None else front + back

    secondary = parse_optional_id(resolve(raw, "secondary_participant_id"))

    return Deal(
        id=deal_id,
        deal_number=parse_text(resolve(raw, "deal_number")) or deal_id,
        stock_number=parse_text(resolve(raw, "stock_number")),
        vin_suffix=parse_vin_suffix(resolve(raw, "vin")),
        customer_last_name=parse_text(resolve(raw, "customer_last_name")),
        vehicle_type=parse_vehicle_type(resolve(raw, "vehicle_type")),
        deal_type=parse_deal_type(resolve(raw, "deal_type")),
        status=status,
        deal_date=parse_date(resolve(raw, "deal_date")),
        front_end_gross=front,
        back_end_gross=back,
        total_gross=total,
        reserve_flat=parse_number(resolve(raw, "reserve_flat")),
        **{field: parse_number(resolve(raw, field)) for field in _PRODUCT_FIELDS},
        primary_participant_id=parse_text(resolve(raw, "primary_participant_id")),
        secondary_participant_id=secondary,
        is_split_deal=parse_bool(resolve(raw, "is_split_deal")),
        supervisor_id=parse_optional_id(resolve(raw, "supervisor_id")),
        dealership_id=parse_optional_id(resolve(raw, "dealership_id")),
        lender=parse_text(resolve(raw, "lender")),
        outside_funding=parse_bool(resolve(raw, "outside_funding")),
        is_active=error is None,
        error=error,
        raw=raw,
    )


def _fallback_deal(raw: Any, exc: BaseException) -> Deal:
    """Safe-default shape for a record that could not be mapped at all."""
    deal_id = "unknown"
    if isinstance(raw, Mapping):
        try:
            deal_id = parse_text(raw.get("id")) or record_id(raw)
        except Exception:
            deal_id = "unknown"
    return Deal(
        id=deal_id,
        deal_number=deal_id,
        status=DealStatus.DEAD_DEAL,
        is_active=False,
        error=f"Failed to map deal data: {exc}",
        raw=raw,
    )


def try_normalize(raw: Any) -> Outcome[Deal]:
    """Tagged variant of normalize: Ok(deal) or Failed(error, fallback deal)."""
    return attempt(lambda: _build_deal(raw), lambda e: _fallback_deal(raw, e))


def normalize(raw: Any) -> Deal:
    """
    Map one raw record to a Deal. Never raises: unmappable records come back
    with ``error`` set and ``is_active=False``.
    """
    outcome = try_normalize(raw)
    if not outcome.ok:
        logger.warning("Malformed deal record: %s", outcome.error)
    elif outcome.value.error:
        logger.warning("Deal %s marked inactive: %s", outcome.value.id, outcome.value.error)
    return outcome.value


def normalize_many(raw_records: list[Any]) -> list[Deal]:
    return [normalize(r) for r in raw_records]
