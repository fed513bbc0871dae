"""Pytest fixtures for dealboard tests."""

from datetime import datetime, timezone
from typing import Any

import pytest

from dealboard.enrichment import enrich
from dealboard.models.deal import EnrichedDeal
from dealboard.normalizing import normalize

# Mid-month reference time used across the suite: Monday 19 October 2026.
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_raw(**overrides: Any) -> dict[str, Any]:
    """Raw deal record in the current writer's shape, dated this month."""
    record: dict[str, Any] = {
        "id": "D-1001",
        "dealNumber": "1001",
        "stockNumber": "S4471",
        "vin": "1HGCM82633A004352",
        "lastName": "Okafor",
        "vehicleType": "N",
        "dealType": "Finance",
        "dealStatus": "Funded",
        "dealDate": "2026-10-05",
        "frontEndGross": 1500,
        "backEndGross": 800,
        "totalGross": 2300,
        "vscProfit": 500,
        "salespersonId": "S1",
        "dealershipId": "DL1",
    }
    record.update(overrides)
    return record


def make_enriched(participant_id: Any = None, **overrides: Any) -> EnrichedDeal:
    return enrich(normalize(make_raw(**overrides)), participant_id)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def raw_deal() -> dict[str, Any]:
    """One funded new-vehicle deal for salesperson S1 at dealership DL1."""
    return make_raw()


@pytest.fixture
def split_raw_deal() -> dict[str, Any]:
    """Split deal between S1 and S2 with 1000 back-end gross."""
    return make_raw(
        id="D-2001",
        dealNumber="2001",
        backEndGross=1000,
        frontEndGross=2000,
        totalGross=3000,
        isSplitDeal=True,
        secondSalespersonId="S2",
    )
