"""
Contracts -- Insurance agreements and the master/child hierarchy.

Responsibility:
    Defines the common Contract surface and its three variants:
    SingleVehicleContract (one insured vehicle), TravelContract (a set of
    insured persons) and MasterVehicleContract (a bundle of child
    contracts with no billing schedule of its own).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Contracts are constructed only by ContractRegistry; the registry and
    ClaimProcessor dispatch on the capability properties ``is_billable``
    and ``has_children`` rather than on concrete types.

Invariants enforced:
    - MONOTONIC_DEACTIVATION: ``deactivate()`` is the only writer of the
      active flag and it only ever clears it.
    - Only single-vehicle contracts are bundleable, so a master's
      children are billable leaves and the hierarchy is a tree of depth
      one below each master.

Failure modes:
    - InvalidContractNumberError / MissingArgumentError on construction
      with missing identity fields.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from insurance_kernel.domain.payment import PaymentSchedule
from insurance_kernel.domain.values import Person, Vehicle
from insurance_kernel.exceptions import (
    InvalidContractNumberError,
    MissingArgumentError,
)

if TYPE_CHECKING:
    from insurance_kernel.services.contract_registry import ContractRegistry


class Contract(ABC):
    """
    Common surface of every insurance contract.

    Contract:
        Holds identity (number, insurer, policy holder, beneficiary), the
        payout ceiling and the active flag. ``insurer`` and
        ``policy_holder`` are back-references used for identity checks
        only; the registry owns the contract.

    Guarantees:
        - ``contract_number`` is non-empty and never changes.
        - ``is_active`` never goes from False back to True.
    """

    def __init__(
        self,
        contract_number: str,
        insurer: ContractRegistry,
        beneficiary: Person | None,
        policy_holder: Person,
        payment_schedule: PaymentSchedule | None,
        coverage_amount: int,
    ):
        if not contract_number:
            raise InvalidContractNumberError(contract_number)
        if insurer is None:
            raise MissingArgumentError("insurer")
        if policy_holder is None:
            raise MissingArgumentError("policy_holder")

        self._contract_number = contract_number
        self._insurer = insurer
        self._beneficiary = beneficiary
        self._policy_holder = policy_holder
        self._payment_schedule = payment_schedule
        self._coverage_amount = coverage_amount
        self._active = True

    @property
    def contract_number(self) -> str:
        return self._contract_number

    @property
    def insurer(self) -> ContractRegistry:
        return self._insurer

    @property
    def beneficiary(self) -> Person | None:
        return self._beneficiary

    @property
    def policy_holder(self) -> Person:
        return self._policy_holder

    @property
    def payment_schedule(self) -> PaymentSchedule | None:
        return self._payment_schedule

    @property
    def coverage_amount(self) -> int:
        return self._coverage_amount

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_billable(self) -> bool:
        """True when the contract carries its own payment schedule."""
        return self._payment_schedule is not None

    @property
    def has_children(self) -> bool:
        return False

    @property
    def is_bundleable(self) -> bool:
        """True when the contract may be moved under a master vehicle contract."""
        return False

    @property
    def payee(self) -> Person:
        """Who receives a payout: the beneficiary if set, else the holder."""
        return self._beneficiary if self._beneficiary is not None else self._policy_holder

    def deactivate(self) -> None:
        self._active = False

    def describe(self) -> dict[str, Any]:
        """Structured summary for log records."""
        summary: dict[str, Any] = {
            "contract_number": self._contract_number,
            "contract_type": type(self).__name__,
            "policy_holder_id": self._policy_holder.person_id,
            "coverage_amount": self._coverage_amount,
            "active": self.is_active,
        }
        if self._payment_schedule is not None:
            summary["premium"] = self._payment_schedule.premium
            summary["frequency_months"] = self._payment_schedule.frequency.months
            summary["outstanding_balance"] = self._payment_schedule.outstanding_balance
        return summary

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"{type(self).__name__}({self._contract_number!r}, {state})"


class SingleVehicleContract(Contract):
    """Insures one vehicle; coverage is a fixed share of its value."""

    def __init__(
        self,
        contract_number: str,
        insurer: ContractRegistry,
        beneficiary: Person | None,
        policy_holder: Person,
        payment_schedule: PaymentSchedule,
        coverage_amount: int,
        insured_vehicle: Vehicle,
    ):
        if payment_schedule is None:
            raise MissingArgumentError("payment_schedule")
        if insured_vehicle is None:
            raise MissingArgumentError("insured_vehicle")
        super().__init__(
            contract_number,
            insurer,
            beneficiary,
            policy_holder,
            payment_schedule,
            coverage_amount,
        )
        self._insured_vehicle = insured_vehicle

    @property
    def insured_vehicle(self) -> Vehicle:
        return self._insured_vehicle

    @property
    def is_bundleable(self) -> bool:
        return True


class TravelContract(Contract):
    """Insures a fixed set of persons; coverage is shared by claimants."""

    def __init__(
        self,
        contract_number: str,
        insurer: ContractRegistry,
        policy_holder: Person,
        payment_schedule: PaymentSchedule,
        coverage_amount: int,
        insured_persons: Iterable[Person],
    ):
        if payment_schedule is None:
            raise MissingArgumentError("payment_schedule")
        if insured_persons is None:
            raise MissingArgumentError("insured_persons")
        super().__init__(
            contract_number,
            insurer,
            None,
            policy_holder,
            payment_schedule,
            coverage_amount,
        )
        self._insured_persons = frozenset(insured_persons)

    @property
    def insured_persons(self) -> frozenset[Person]:
        return self._insured_persons

    def insures_all(self, persons: Iterable[Person]) -> bool:
        return self._insured_persons.issuperset(persons)


class MasterVehicleContract(Contract):
    """
    A bundle of child contracts administered together.

    Contract:
        Carries no payment schedule; billing and activity are derived from
        the children. Children keep their own schedules and claim rules.

    Guarantees:
        - Children are kept in the order they were attached.
        - With children attached, the master is active only while its own
          flag is set and at least one child is still active.
    """

    def __init__(
        self,
        contract_number: str,
        insurer: ContractRegistry,
        beneficiary: Person | None,
        policy_holder: Person,
    ):
        super().__init__(
            contract_number,
            insurer,
            beneficiary,
            policy_holder,
            None,
            0,
        )
        self._child_contracts: list[Contract] = []

    @property
    def child_contracts(self) -> tuple[Contract, ...]:
        return tuple(self._child_contracts)

    @property
    def has_children(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:
        if not self._active:
            return False
        if not self._child_contracts:
            return True
        return any(child.is_active for child in self._child_contracts)

    def attach_child(self, child: Contract) -> None:
        self._child_contracts.append(child)

    def deactivate(self) -> None:
        """Deactivate the master and every child it bundles."""
        for child in self._child_contracts:
            child.deactivate()
        super().deactivate()

    def iter_leaves(self) -> Iterator[Contract]:
        """Depth-first walk over every billable descendant."""
        for child in self._child_contracts:
            if child.has_children:
                yield from child.iter_leaves()
            else:
                yield child
