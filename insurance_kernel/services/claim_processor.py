"""
ClaimProcessor -- Settles claims against travel and single-vehicle contracts.

Responsibility:
    Validates a claim, pays the payee(s) and decides whether the contract
    is deactivated. Travel claims share the coverage equally among the
    affected persons and always close the contract; vehicle claims pay the
    full coverage and close the contract only on a total loss.

Architecture position:
    Kernel > Services -- owned by a ContractRegistry and bound to it; reads
    the total-loss threshold from the registry's underwriting rules.

Invariants enforced:
    - MONOTONIC_DEACTIVATION: settlement can only deactivate.
    - ATOMIC_OPERATION: every check runs before the first payout.

Failure modes:
    - MissingArgumentError / InvalidClaimError / NotInsuredPersonError for
      malformed claims.
    - InactiveContractError when the contract is already inactive.
    - ForeignContractError when the contract was issued elsewhere.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from insurance_kernel.domain.contracts import SingleVehicleContract, TravelContract
from insurance_kernel.domain.values import Person
from insurance_kernel.exceptions import (
    ForeignContractError,
    InactiveContractError,
    InvalidClaimError,
    MissingArgumentError,
    NotInsuredPersonError,
)
from insurance_kernel.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from insurance_kernel.services.contract_registry import ContractRegistry

logger = get_logger("services.claim_processor")


@dataclass(frozen=True)
class ClaimSettlement:
    """
    Outcome of one settled claim.

    Attributes:
        contract_number: Contract the claim was settled against.
        payouts: (payee, amount) pairs in payout order.
        total_paid: Sum of all payouts. Integer division may leave part
            of the coverage unpaid.
        deactivated: Whether the settlement closed the contract.
    """

    contract_number: str
    payouts: tuple[tuple[Person, int], ...]
    total_paid: int
    deactivated: bool


class ClaimProcessor:
    """Claim settlement bound to one registry."""

    def __init__(self, registry: ContractRegistry):
        self._registry = registry

    def settle_travel_claim(
        self,
        travel_contract: TravelContract,
        affected_persons: Iterable[Person],
    ) -> ClaimSettlement:
        """
        Pay each affected person an equal share of the coverage.

        The share is ``coverage_amount // len(affected_persons)``; any
        remainder is not paid out. The contract is deactivated regardless
        of how many persons were affected.

        Raises:
            MissingArgumentError: travel_contract is None.
            InvalidClaimError: affected_persons is None or empty.
            NotInsuredPersonError: some affected person is not insured.
            InactiveContractError: the contract is already inactive.
            ForeignContractError: the contract belongs to another registry.
        """
        if travel_contract is None:
            raise MissingArgumentError("travel_contract")
        number = travel_contract.contract_number
        if affected_persons is None:
            raise InvalidClaimError(number, "affected persons must not be None")
        affected = list(dict.fromkeys(affected_persons))
        if not affected:
            raise InvalidClaimError(number, "affected persons must not be empty")
        if not travel_contract.insures_all(affected):
            outsiders = [
                p.person_id for p in affected if p not in travel_contract.insured_persons
            ]
            raise NotInsuredPersonError(number, outsiders)
        self._check_claimable(travel_contract)

        share = travel_contract.coverage_amount // len(affected)
        with LogContext.bind(contract_number=number):
            payouts = tuple(self._pay(person, share) for person in affected)
            travel_contract.deactivate()
            settlement = ClaimSettlement(
                contract_number=number,
                payouts=payouts,
                total_paid=sum(amount for _, amount in payouts),
                deactivated=True,
            )
            logger.info(
                "claim_settled",
                extra={
                    "claim_type": "travel",
                    "affected_count": len(affected),
                    "share": share,
                    "total_paid": settlement.total_paid,
                    "undistributed": travel_contract.coverage_amount - settlement.total_paid,
                    "deactivated": True,
                },
            )
        return settlement

    def settle_vehicle_claim(
        self,
        single_vehicle_contract: SingleVehicleContract,
        expected_damages: int,
    ) -> ClaimSettlement:
        """
        Pay the full coverage to the beneficiary (or the policy holder).

        The contract stays active unless the expected damages reach the
        total-loss share of the vehicle's original value.

        Raises:
            MissingArgumentError: single_vehicle_contract is None.
            InvalidClaimError: expected_damages is not positive.
            InactiveContractError: the contract is already inactive.
            ForeignContractError: the contract belongs to another registry.
        """
        if single_vehicle_contract is None:
            raise MissingArgumentError("single_vehicle_contract")
        number = single_vehicle_contract.contract_number
        if expected_damages is None or expected_damages <= 0:
            raise InvalidClaimError(number, "expected damages must be positive")
        self._check_claimable(single_vehicle_contract)

        vehicle = single_vehicle_contract.insured_vehicle
        total_loss = self._registry.rules.is_total_loss(
            expected_damages, vehicle.original_value
        )

        with LogContext.bind(contract_number=number):
            payouts = (
                self._pay(single_vehicle_contract.payee, single_vehicle_contract.coverage_amount),
            )
            if total_loss:
                single_vehicle_contract.deactivate()
            settlement = ClaimSettlement(
                contract_number=number,
                payouts=payouts,
                total_paid=payouts[0][1],
                deactivated=total_loss,
            )
            logger.info(
                "claim_settled",
                extra={
                    "claim_type": "vehicle",
                    "expected_damages": expected_damages,
                    "original_value": vehicle.original_value,
                    "total_paid": settlement.total_paid,
                    "deactivated": total_loss,
                },
            )
        return settlement

    def _check_claimable(self, contract: TravelContract | SingleVehicleContract) -> None:
        if not contract.is_active:
            logger.warning(
                "claim_rejected",
                extra={"contract_number": contract.contract_number, "reason": "inactive"},
            )
            raise InactiveContractError(contract.contract_number)
        if not self._registry.owns(contract):
            raise ForeignContractError(contract.contract_number)

    @staticmethod
    def _pay(person: Person, amount: int) -> tuple[Person, int]:
        # A zero share (coverage 0) is recorded but not paid.
        if amount > 0:
            person.payout(amount)
        return person, amount
