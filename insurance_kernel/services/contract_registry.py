"""
ContractRegistry -- The insurance company: issues, bundles and bills contracts.

Responsibility:
    Creates single-vehicle, travel and master contracts after underwriting
    validation; moves contracts under a master; drives catch-up premium
    billing across every top-level contract and, recursively, through each
    master's children. Owns the registry's logical current time.

Architecture position:
    Kernel > Services -- stateful orchestration over the pure domain layer.
    Reads time only from ``current_time``, which the caller advances
    between billing passes. Underwriting parameters come from
    ``insurance_config`` rules injected at construction.

Invariants enforced:
    - UNIQUE_CONTRACT_NUMBER: every number ever issued is remembered, so a
      number stays taken after its contract moves under a master.
    - HIERARCHY_EXCLUSION: moving a contract under a master removes it
      from the top-level set and from the holder's direct contracts.
    - BILLING_CAUGHT_UP: every charge runs the schedule up to
      ``current_time``.
    - ATOMIC_OPERATION: all validation happens before the first mutation.

Failure modes:
    - ValidationError subclasses for malformed or below-threshold requests.
    - ContractStateError subclasses for inactive, foreign, mismatched or
      hierarchy-breaking contracts.

Audit relevance:
    Every creation, move and billing pass emits a structured log record
    carrying the contract number, amounts and duration.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, ValuesView
from dataclasses import dataclass
from datetime import datetime

from insurance_config import UnderwritingRules, get_underwriting_rules
from insurance_kernel.domain.contracts import (
    Contract,
    MasterVehicleContract,
    SingleVehicleContract,
    TravelContract,
)
from insurance_kernel.domain.payment import PaymentSchedule
from insurance_kernel.domain.values import (
    LegalForm,
    Person,
    PremiumPaymentFrequency,
    Vehicle,
)
from insurance_kernel.exceptions import (
    DuplicateContractNumberError,
    EmptyInsuredSetError,
    ForeignContractError,
    HierarchyError,
    InactiveContractError,
    InvalidContractNumberError,
    InvalidPersonError,
    InvalidPremiumError,
    MissingArgumentError,
    PolicyHolderMismatchError,
    PremiumBelowThresholdError,
)
from insurance_kernel.logging_config import LogContext, get_logger
from insurance_kernel.services.claim_processor import ClaimProcessor

logger = get_logger("services.contract_registry")


@dataclass(frozen=True)
class BillingRunSummary:
    """Totals of one ``charge_premiums_on_contracts`` pass."""

    contracts_charged: int
    contracts_skipped: int
    periods_charged: int
    amount_charged: int


class ContractRegistry:
    """
    The insurer: owner of every contract it issues.

    Contract:
        Top-level contracts are kept in creation order. Contracts moved
        under a master leave the top-level set but stay reachable through
        the master and through ``find_contract``.

    Guarantees:
        - ``get_contracts()`` is a live, insertion-ordered view.
        - A failed call leaves the registry, every contract and every
          person exactly as they were.

    Non-goals:
        - Not thread-safe; callers serialize access.
        - Does NOT record premium payments against outstanding balances.
    """

    def __init__(
        self,
        current_time: datetime,
        rules: UnderwritingRules | None = None,
    ):
        if current_time is None:
            raise MissingArgumentError("current_time")
        self._current_time = current_time
        self._rules = rules if rules is not None else get_underwriting_rules()
        self._contracts: dict[str, Contract] = {}
        self._issued_numbers: set[str] = set()
        self._claims = ClaimProcessor(self)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> datetime:
        return self._current_time

    @current_time.setter
    def current_time(self, value: datetime) -> None:
        if value is None:
            raise MissingArgumentError("current_time")
        self._current_time = value

    @property
    def rules(self) -> UnderwritingRules:
        return self._rules

    @property
    def claims(self) -> ClaimProcessor:
        return self._claims

    def get_contracts(self) -> ValuesView[Contract]:
        """Live view of the top-level contracts in creation order."""
        return self._contracts.values()

    def owns(self, contract: Contract) -> bool:
        return contract.insurer is self

    def find_contract(self, contract_number: str) -> Contract | None:
        """Look a contract up by number, descending into masters."""
        contract = self._contracts.get(contract_number)
        if contract is not None:
            return contract
        for top in self._contracts.values():
            if top.has_children:
                for leaf in top.iter_leaves():
                    if leaf.contract_number == contract_number:
                        return leaf
        return None

    # ------------------------------------------------------------------
    # Contract creation
    # ------------------------------------------------------------------

    def insure_vehicle(
        self,
        contract_number: str,
        beneficiary: Person | None,
        policy_holder: Person,
        proposed_premium: int,
        frequency: PremiumPaymentFrequency,
        vehicle: Vehicle,
    ) -> SingleVehicleContract:
        """
        Issue a single-vehicle contract.

        The annualized premium must reach the minimum share of the
        vehicle's original value; coverage is a fixed share of that value.

        Raises:
            InvalidContractNumberError, DuplicateContractNumberError,
            MissingArgumentError, InvalidPremiumError,
            PremiumBelowThresholdError.
        """
        self._validate_contract_number(contract_number)
        if frequency is None:
            raise MissingArgumentError("frequency")
        if vehicle is None:
            raise MissingArgumentError("vehicle")
        if policy_holder is None:
            raise MissingArgumentError("policy_holder")
        if proposed_premium <= 0:
            raise InvalidPremiumError(proposed_premium)

        annual_premium = proposed_premium * frequency.periods_per_year
        minimum = self._rules.vehicle_minimum_annual_premium(vehicle.original_value)
        if annual_premium < minimum:
            logger.warning(
                "contract_rejected",
                extra={
                    "contract_number": contract_number,
                    "reason": "premium_below_threshold",
                    "annual_premium": annual_premium,
                    "minimum": str(minimum),
                },
            )
            raise PremiumBelowThresholdError(contract_number, annual_premium, str(minimum))

        schedule = PaymentSchedule(proposed_premium, frequency, self._current_time)
        contract = SingleVehicleContract(
            contract_number,
            self,
            beneficiary,
            policy_holder,
            schedule,
            self._rules.vehicle_coverage(vehicle.original_value),
            vehicle,
        )
        self._issue(contract)
        return contract

    def insure_persons(
        self,
        contract_number: str,
        policy_holder: Person,
        proposed_premium: int,
        frequency: PremiumPaymentFrequency,
        persons_to_insure: Iterable[Person],
    ) -> TravelContract:
        """
        Issue a travel contract over a set of natural persons.

        Minimum annual premium and coverage both scale with the number of
        insured persons.

        Raises:
            InvalidContractNumberError, DuplicateContractNumberError,
            MissingArgumentError, EmptyInsuredSetError, InvalidPersonError,
            InvalidPremiumError, PremiumBelowThresholdError.
        """
        self._validate_contract_number(contract_number)
        if frequency is None:
            raise MissingArgumentError("frequency")
        if policy_holder is None:
            raise MissingArgumentError("policy_holder")
        if persons_to_insure is None:
            raise MissingArgumentError("persons_to_insure")
        persons = frozenset(persons_to_insure)
        if not persons:
            raise EmptyInsuredSetError(contract_number)
        for person in persons:
            if person.legal_form is not LegalForm.NATURAL:
                raise InvalidPersonError(
                    person.person_id, "only natural persons can be insured for travel"
                )
        if proposed_premium <= 0:
            raise InvalidPremiumError(proposed_premium)

        annual_premium = proposed_premium * frequency.periods_per_year
        minimum = self._rules.travel_minimum_annual_premium(len(persons))
        if annual_premium < minimum:
            logger.warning(
                "contract_rejected",
                extra={
                    "contract_number": contract_number,
                    "reason": "premium_below_threshold",
                    "annual_premium": annual_premium,
                    "minimum": minimum,
                },
            )
            raise PremiumBelowThresholdError(contract_number, annual_premium, str(minimum))

        schedule = PaymentSchedule(proposed_premium, frequency, self._current_time)
        contract = TravelContract(
            contract_number,
            self,
            policy_holder,
            schedule,
            self._rules.travel_coverage(len(persons)),
            persons,
        )
        self._issue(contract)
        return contract

    def create_master_vehicle_contract(
        self,
        contract_number: str,
        beneficiary: Person | None,
        policy_holder: Person,
    ) -> MasterVehicleContract:
        """Open an empty master contract; it carries no payment schedule."""
        self._validate_contract_number(contract_number)
        if policy_holder is None:
            raise MissingArgumentError("policy_holder")

        contract = MasterVehicleContract(contract_number, self, beneficiary, policy_holder)
        self._issue(contract)
        return contract

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def move_contract_under_master(
        self,
        master: MasterVehicleContract,
        child: Contract,
    ) -> None:
        """
        Attach a top-level contract to a master contract.

        Afterwards the child is billed and reached only through the master:
        it leaves the registry's top-level set and the policy holder's
        direct contracts.

        Raises:
            MissingArgumentError: either contract is None.
            InactiveContractError: either contract is inactive.
            PolicyHolderMismatchError: the contracts have different holders.
            ForeignContractError: either contract belongs to another registry.
            HierarchyError: the child is not a single-vehicle contract, or
                the move would not keep a tree of masters over top-level
                leaf contracts.
        """
        if master is None:
            raise MissingArgumentError("master")
        if child is None:
            raise MissingArgumentError("child")

        if not master.is_active:
            raise InactiveContractError(master.contract_number)
        if not child.is_active:
            raise InactiveContractError(child.contract_number)
        if master.policy_holder is not child.policy_holder:
            raise PolicyHolderMismatchError(master.contract_number, child.contract_number)
        if not self.owns(master):
            raise ForeignContractError(master.contract_number)
        if not self.owns(child):
            raise ForeignContractError(child.contract_number)

        if master is child:
            raise HierarchyError(
                master.contract_number, child.contract_number, "contract cannot contain itself"
            )
        if not master.has_children:
            raise HierarchyError(
                master.contract_number, child.contract_number, "target is not a master contract"
            )
        if child.has_children:
            raise HierarchyError(
                master.contract_number, child.contract_number, "master contracts cannot be nested"
            )
        if not child.is_bundleable:
            raise HierarchyError(
                master.contract_number,
                child.contract_number,
                "only vehicle contracts can be bundled",
            )
        if self._contracts.get(child.contract_number) is not child:
            raise HierarchyError(
                master.contract_number, child.contract_number, "contract is already under a master"
            )

        master.attach_child(child)
        del self._contracts[child.contract_number]
        child.policy_holder.remove_contract(child)

        logger.info(
            "contract_moved_under_master",
            extra={
                "master_number": master.contract_number,
                "child_number": child.contract_number,
                "child_count": len(master.child_contracts),
            },
        )

    # ------------------------------------------------------------------
    # Billing
    # ------------------------------------------------------------------

    def charge_premiums_on_contracts(self) -> BillingRunSummary:
        """Catch up billing on every active top-level contract."""
        t0 = time.monotonic()
        charged = skipped = periods = amount = 0

        for contract in self._contracts.values():
            if not contract.is_active:
                skipped += 1
                continue
            contract_periods, contract_amount = self._charge(contract)
            charged += 1
            periods += contract_periods
            amount += contract_amount

        summary = BillingRunSummary(
            contracts_charged=charged,
            contracts_skipped=skipped,
            periods_charged=periods,
            amount_charged=amount,
        )
        logger.info(
            "billing_run_completed",
            extra={
                "current_time": self._current_time,
                "contracts_charged": charged,
                "contracts_skipped": skipped,
                "periods_charged": periods,
                "amount_charged": amount,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return summary

    def charge_premium_on_contract(self, contract: Contract) -> int:
        """
        Catch up billing on one contract (recursing into a master).

        Returns:
            Total premium added to outstanding balances.

        Raises:
            MissingArgumentError: contract is None.
            ForeignContractError: contract belongs to another registry.
            InactiveContractError: contract is inactive; nothing is charged.
        """
        if contract is None:
            raise MissingArgumentError("contract")
        if not self.owns(contract):
            raise ForeignContractError(contract.contract_number)
        if not contract.is_active:
            raise InactiveContractError(contract.contract_number)
        _, amount = self._charge(contract)
        return amount

    def _charge(self, contract: Contract) -> tuple[int, int]:
        # Children of a master are charged without their own active check.
        if contract.has_children:
            periods = amount = 0
            for child in contract.child_contracts:
                child_periods, child_amount = self._charge(child)
                periods += child_periods
                amount += child_amount
            return periods, amount

        schedule = contract.payment_schedule
        periods = schedule.charge_until(self._current_time)
        amount = periods * schedule.premium
        if periods:
            logger.debug(
                "premium_charged",
                extra={
                    "contract_number": contract.contract_number,
                    "periods": periods,
                    "amount": amount,
                    "outstanding_balance": schedule.outstanding_balance,
                    "next_payment_time": schedule.next_payment_time,
                },
            )
        return periods, amount

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_contract_number(self, contract_number: str) -> None:
        if not contract_number:
            raise InvalidContractNumberError(contract_number)
        if contract_number in self._issued_numbers:
            logger.warning(
                "contract_rejected",
                extra={"contract_number": contract_number, "reason": "duplicate_number"},
            )
            raise DuplicateContractNumberError(contract_number)

    def _issue(self, contract: Contract) -> None:
        """Bill, register and link a freshly built contract."""
        with LogContext.bind(
            contract_number=contract.contract_number,
            policy_holder_id=contract.policy_holder.person_id,
        ):
            self._charge(contract)
            self._contracts[contract.contract_number] = contract
            self._issued_numbers.add(contract.contract_number)
            contract.policy_holder.add_contract(contract)
            logger.info("contract_created", extra={"contract": contract})
