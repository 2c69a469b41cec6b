"""
Tests for ClaimProcessor.

Travel claims:
- Coverage shared equally by integer division; the remainder is not paid
- Contract always deactivated
- Affected persons must all be insured

Vehicle claims:
- Full coverage paid to the beneficiary, else the policy holder
- Deactivation only at or above the total-loss threshold
"""

from decimal import Decimal

import pytest

from insurance_kernel.domain.values import PremiumPaymentFrequency, Vehicle
from insurance_kernel.exceptions import (
    ForeignContractError,
    InactiveContractError,
    InvalidClaimError,
    MissingArgumentError,
    NotInsuredPersonError,
)

ANNUAL = PremiumPaymentFrequency.ANNUAL
QUARTERLY = PremiumPaymentFrequency.QUARTERLY


@pytest.fixture
def rich_registry(make_registry):
    """Registry paying 20 per insured traveller."""
    return make_registry(travel_coverage_per_person=20)


@pytest.fixture
def trip(rich_registry, holder, travellers):
    """Five travellers, coverage 100."""
    return rich_registry.insure_persons("TR-1", holder, 25, ANNUAL, travellers)


def _ordered(persons):
    return sorted(persons, key=lambda p: p.person_id)


# =============================================================================
# Travel claims
# =============================================================================


class TestTravelClaim:
    """Tests for settle_travel_claim."""

    def test_even_split(self, rich_registry, trip):
        affected = _ordered(trip.insured_persons)[:4]

        settlement = rich_registry.claims.settle_travel_claim(trip, affected)

        assert [amount for _, amount in settlement.payouts] == [25, 25, 25, 25]
        assert all(p.paid_out_amount == 25 for p in affected)
        assert settlement.total_paid == 100
        assert settlement.deactivated
        assert not trip.is_active

    def test_remainder_not_paid(self, rich_registry, trip):
        affected = _ordered(trip.insured_persons)[:3]

        settlement = rich_registry.claims.settle_travel_claim(trip, affected)

        assert all(p.paid_out_amount == 33 for p in affected)
        assert settlement.total_paid == 99

    def test_unaffected_persons_not_paid(self, rich_registry, trip):
        persons = _ordered(trip.insured_persons)
        rich_registry.claims.settle_travel_claim(trip, persons[:1])
        assert persons[0].paid_out_amount == 100
        assert all(p.paid_out_amount == 0 for p in persons[1:])

    def test_duplicates_count_once(self, rich_registry, trip):
        person = _ordered(trip.insured_persons)[0]
        settlement = rich_registry.claims.settle_travel_claim(trip, [person, person])
        assert person.paid_out_amount == 100
        assert len(settlement.payouts) == 1

    def test_outsider_rejects_whole_claim(self, rich_registry, trip, outsider):
        insured = _ordered(trip.insured_persons)[0]

        with pytest.raises(NotInsuredPersonError) as exc_info:
            rich_registry.claims.settle_travel_claim(trip, [insured, outsider])

        assert exc_info.value.person_ids == [outsider.person_id]
        assert insured.paid_out_amount == 0
        assert outsider.paid_out_amount == 0
        assert trip.is_active

    @pytest.mark.parametrize("affected", [None, [], set()])
    def test_no_affected_persons(self, rich_registry, trip, affected):
        with pytest.raises(InvalidClaimError):
            rich_registry.claims.settle_travel_claim(trip, affected)
        assert trip.is_active

    def test_missing_contract(self, rich_registry, travellers):
        with pytest.raises(MissingArgumentError):
            rich_registry.claims.settle_travel_claim(None, travellers)

    def test_second_claim_rejected(self, rich_registry, trip, captured_logs):
        persons = _ordered(trip.insured_persons)
        rich_registry.claims.settle_travel_claim(trip, persons[:2])

        with pytest.raises(InactiveContractError):
            rich_registry.claims.settle_travel_claim(trip, persons[2:])

        assert all(p.paid_out_amount == 0 for p in persons[2:])
        rejected = [r for r in captured_logs() if r["message"] == "claim_rejected"]
        assert rejected[0]["reason"] == "inactive"

    def test_foreign_contract(self, make_registry, trip):
        with pytest.raises(ForeignContractError):
            make_registry().claims.settle_travel_claim(trip, list(trip.insured_persons))
        assert trip.is_active

    def test_settlement_logged(self, rich_registry, trip, captured_logs):
        rich_registry.claims.settle_travel_claim(trip, _ordered(trip.insured_persons)[:3])

        settled = [r for r in captured_logs() if r["message"] == "claim_settled"]
        assert len(settled) == 1
        assert settled[0]["contract_number"] == "TR-1"
        assert settled[0]["share"] == 33
        assert settled[0]["undistributed"] == 1


# =============================================================================
# Vehicle claims
# =============================================================================


class TestVehicleClaim:
    """Tests for settle_vehicle_claim against a 10_000 car with coverage 5_000."""

    def test_total_loss_at_threshold(self, registry, vehicle_contract, beneficiary):
        settlement = registry.claims.settle_vehicle_claim(vehicle_contract, 7_000)

        assert beneficiary.paid_out_amount == 5_000
        assert settlement.total_paid == 5_000
        assert settlement.deactivated
        assert not vehicle_contract.is_active

    def test_partial_damage_keeps_contract(self, registry, vehicle_contract, beneficiary):
        settlement = registry.claims.settle_vehicle_claim(vehicle_contract, 6_999)

        assert beneficiary.paid_out_amount == 5_000
        assert not settlement.deactivated
        assert vehicle_contract.is_active

    def test_repeated_partial_claims_each_pay(self, registry, vehicle_contract, beneficiary):
        registry.claims.settle_vehicle_claim(vehicle_contract, 100)
        registry.claims.settle_vehicle_claim(vehicle_contract, 100)
        assert beneficiary.paid_out_amount == 10_000

    def test_holder_paid_without_beneficiary(self, registry, holder, car):
        contract = registry.insure_vehicle("SV-9", None, holder, 50, QUARTERLY, car)
        registry.claims.settle_vehicle_claim(contract, 500)
        assert holder.paid_out_amount == 5_000

    @pytest.mark.parametrize("damages", [0, -1, None])
    def test_non_positive_damages(self, registry, vehicle_contract, beneficiary, damages):
        with pytest.raises(InvalidClaimError):
            registry.claims.settle_vehicle_claim(vehicle_contract, damages)
        assert beneficiary.paid_out_amount == 0

    def test_inactive_contract(self, registry, vehicle_contract, beneficiary):
        registry.claims.settle_vehicle_claim(vehicle_contract, 8_000)

        with pytest.raises(InactiveContractError):
            registry.claims.settle_vehicle_claim(vehicle_contract, 8_000)
        assert beneficiary.paid_out_amount == 5_000

    def test_missing_contract(self, registry):
        with pytest.raises(MissingArgumentError):
            registry.claims.settle_vehicle_claim(None, 100)

    def test_worthless_vehicle_closes_without_payout(self, registry, holder):
        contract = registry.insure_vehicle("SV-0", None, holder, 1, ANNUAL, Vehicle("ZZ000ZZ", 0))

        settlement = registry.claims.settle_vehicle_claim(contract, 1)

        assert contract.coverage_amount == 0
        assert settlement.total_paid == 0
        assert settlement.deactivated
        assert holder.paid_out_amount == 0

    def test_custom_total_loss_ratio(self, make_registry, holder, car):
        registry = make_registry(total_loss_ratio=Decimal("0.9"))
        contract = registry.insure_vehicle("SV-1", None, holder, 50, QUARTERLY, car)

        assert not registry.claims.settle_vehicle_claim(contract, 8_999).deactivated
        assert registry.claims.settle_vehicle_claim(contract, 9_000).deactivated
