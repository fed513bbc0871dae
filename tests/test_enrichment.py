"""Unit tests for product mix, metric flags and split credit."""

import pytest

from dealboard.enrichment import FULL_CREDIT, allocate, classify, deal_pvr, enrich, product_mix, products_per_deal
from dealboard.enrichment.credit import NO_CREDIT, credit_shares
from dealboard.enrichment.flags import EXCLUDED
from dealboard.models.deal import Deal, DealStatus, VehicleType
from dealboard.normalizing import normalize

from conftest import make_enriched


def _make_deal(**kwargs) -> Deal:
    defaults = {"id": "D1", "primary_participant_id": "S1"}
    defaults.update(kwargs)
    return Deal(**defaults)


class TestProductMix:
    """Tests for product_mix."""

    def test_only_positive_profit_in_catalog_order(self) -> None:
        """Zero and negative profits are left out; order is fixed."""
        deal = _make_deal(
            other_profit=50,
            service_contract_profit=300,
            gap_insurance_profit=-20,
            prepaid_maintenance_profit=0,
            tire_and_wheel_profit=125,
        )
        mix = product_mix(deal)
        assert [p.key for p in mix] == ["service-contract", "tire-and-wheel", "other"]
        assert all(p.profit > 0 for p in mix)
        assert products_per_deal(deal) == 3

    def test_empty_mix(self) -> None:
        assert product_mix(_make_deal()) == []
        assert products_per_deal(_make_deal()) == 0

    def test_display_names(self) -> None:
        mix = product_mix(_make_deal(appearance_protection_profit=200))
        assert mix[0].name == "Paint Protection"


class TestMetricFlags:
    """Tests for classify."""

    @pytest.mark.parametrize(
        "status,sold,tracking,pvr,excluded",
        [
            (DealStatus.FUNDED, True, False, True, False),
            (DealStatus.PENDING, False, True, True, False),
            (DealStatus.UNWOUND, False, False, False, True),
            (DealStatus.DEAD_DEAL, False, False, False, True),
        ],
    )
    def test_status_table(self, status: DealStatus, sold: bool, tracking: bool, pvr: bool, excluded: bool) -> None:
        flags = classify(status)
        assert flags.counts_for_sold is sold
        assert flags.counts_for_tracking is tracking
        assert flags.counts_for_pvr is pvr
        assert flags.exclude_from_metrics is excluded

    @pytest.mark.parametrize("status", list(DealStatus))
    def test_exhaustive(self, status: DealStatus) -> None:
        """Never both sold and tracking; neither implies excluded."""
        flags = classify(status)
        assert not (flags.counts_for_sold and flags.counts_for_tracking)
        if not flags.counts_for_sold and not flags.counts_for_tracking:
            assert flags.exclude_from_metrics is True

    def test_string_status(self) -> None:
        assert classify("Funded").counts_for_sold is True
        assert classify("bogus") == EXCLUDED


class TestCreditAllocation:
    """Tests for allocate."""

    def test_non_split_primary_gets_full_credit(self) -> None:
        credit = allocate(_make_deal(), "S1")
        assert credit.has_credit is True
        assert credit.credit_percentage == 100
        assert credit.split_with_id is None

    def test_non_split_other_participant(self) -> None:
        assert allocate(_make_deal(), "S9") == NO_CREDIT

    @pytest.mark.parametrize("participant_id", ["", "   ", None])
    def test_blank_participant_never_credited(self, participant_id: object) -> None:
        """A blank id does not match a deal with a blank primary."""
        assert allocate(_make_deal(primary_participant_id=""), participant_id).has_credit is False

    def test_numeric_participant_id_matches(self) -> None:
        assert allocate(_make_deal(primary_participant_id="7"), 7).credit_percentage == 100

    def test_split_deal_halves(self) -> None:
        deal = _make_deal(is_split_deal=True, secondary_participant_id="S2")
        primary = allocate(deal, "S1")
        secondary = allocate(deal, "S2")
        assert primary.credit_percentage == 50
        assert primary.split_with_id == "S2"
        assert secondary.credit_percentage == 50
        assert secondary.split_with_id == "S1"

    def test_split_outsider_has_no_credit(self) -> None:
        deal = _make_deal(is_split_deal=True, secondary_participant_id="S2")
        credit = allocate(deal, "S3")
        assert credit.has_credit is False
        assert credit.credit_percentage == 0

    @pytest.mark.parametrize(
        "is_split,secondary",
        [(True, "S2"), (False, None), (True, None), (True, ""), (True, "S1")],
    )
    def test_credit_conservation(self, is_split: bool, secondary: object) -> None:
        """Credits over all participants sum to exactly 100."""
        deal = _make_deal(is_split_deal=is_split, secondary_participant_id=secondary)
        total = sum(allocate(deal, pid).credit_percentage for pid in ("S1", "S2", "S3"))
        assert total == 100

    def test_split_without_secondary_gives_primary_full_credit(self) -> None:
        deal = _make_deal(is_split_deal=True, secondary_participant_id=None)
        credit = allocate(deal, "S1")
        assert credit.credit_percentage == 100
        assert credit.split_with_id is None

    def test_split_with_same_participant_twice(self) -> None:
        """Primary and secondary naming one person collapse to a single full share."""
        deal = _make_deal(is_split_deal=True, secondary_participant_id="S1")
        assert credit_shares(deal) == [("S1", 100)]
        credit = allocate(deal, "S1")
        assert credit.credit_percentage == 100
        assert credit.split_with_id is None

    def test_credit_shares_drop_blank_ids(self) -> None:
        deal = _make_deal(is_split_deal=True, secondary_participant_id=None)
        assert credit_shares(deal) == [("S1", 100)]
        assert credit_shares(_make_deal(primary_participant_id="")) == []
        assert credit_shares(_make_deal(primary_participant_id="", is_split_deal=True)) == []


class TestEnrich:
    """Tests for enrich."""

    def test_full_credit_without_participant(self) -> None:
        deal = make_enriched()
        assert deal.split_credit == FULL_CREDIT
        assert deal.adjusted_back_gross == deal.back_end_gross
        assert deal.adjusted_total_gross == deal.total_gross

    def test_split_deal_secondary_scaled(self, split_raw_deal: dict) -> None:
        """Secondary participant on a 1000 back-end split sees 500."""
        deal = enrich(normalize(split_raw_deal), "S2")
        assert deal.adjusted_back_gross == 500
        assert deal.adjusted_front_gross == 1000
        assert deal.split_credit.credit_percentage == 50
        assert deal.split_credit.split_with_id == "S1"

    def test_unwound_deal_excluded(self) -> None:
        deal = make_enriched(dealStatus="Unwound")
        assert deal.metric_flags == EXCLUDED
        assert deal.is_active is False
        assert deal.is_funded is False
        assert deal.is_pending is False

    def test_derived_booleans(self) -> None:
        cpo = make_enriched(vehicleType="C", dealStatus="Pending")
        assert cpo.vehicle_type == VehicleType.CPO
        assert cpo.vehicle_type_display == "CPO"
        assert cpo.is_used is True
        assert cpo.is_new is False
        assert cpo.is_pending is True

    def test_pvr_is_profit_per_product(self) -> None:
        deal = make_enriched(vscProfit=300, gapProfit=100)
        assert deal.products_per_deal == 2
        assert deal.pvr == 200

    def test_pvr_zero_without_products(self) -> None:
        assert make_enriched(vscProfit=0).pvr == 0
        assert deal_pvr([]) == 0

    def test_raw_kept_unchanged(self, raw_deal: dict) -> None:
        assert enrich(normalize(raw_deal)).raw == raw_deal
