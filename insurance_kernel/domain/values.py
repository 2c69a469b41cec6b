"""
Values -- Parties, insured objects and billing frequencies.

Responsibility:
    Provides the collaborator types the registry operates on: the
    PremiumPaymentFrequency enumeration, Person (policy holders,
    beneficiaries and insured persons) and Vehicle (insured objects).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by payment and contracts. No outward dependencies except
    insurance_kernel.exceptions.

Invariants enforced:
    - Person identifiers are valid birth numbers (natural persons) or
      registration numbers (legal persons); the legal form is derived,
      never supplied.
    - Payouts are strictly positive; paid_out_amount never decreases.
    - Vehicle license plates are 7 uppercase alphanumerics and original
      values are non-negative.

Failure modes:
    - InvalidPersonError on a malformed identifier or non-positive payout.
    - InvalidVehicleError on a malformed plate or negative value.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from insurance_kernel.exceptions import InvalidPersonError, InvalidVehicleError

if TYPE_CHECKING:
    from insurance_kernel.domain.contracts import Contract


class PremiumPaymentFrequency(int, Enum):
    """Billing interval, valued in months per period."""

    ANNUAL = 12
    SEMI_ANNUAL = 6
    QUARTERLY = 3
    MONTHLY = 1

    @property
    def months(self) -> int:
        return self.value

    @property
    def periods_per_year(self) -> int:
        return 12 // self.value


class LegalForm(str, Enum):
    """Legal form of a person, derived from the identifier shape."""

    NATURAL = "NATURAL"
    LEGAL = "LEGAL"


def is_valid_birth_number(value: str) -> bool:
    """
    Check a 9 or 10 digit birth number.

    The first six digits encode YYMMDD, with 50 added to the month for
    women. Ten-digit numbers must be divisible by 11; nine-digit numbers
    were only issued before 1954.
    """
    if not value.isdigit() or len(value) not in (9, 10):
        return False

    yy = int(value[0:2])
    mm = int(value[2:4])
    dd = int(value[4:6])

    if len(value) == 9:
        if yy >= 54:
            return False
        year = 1900 + yy
    else:
        year = 1900 + yy if yy >= 54 else 2000 + yy
        if int(value) % 11 != 0:
            return False

    if 51 <= mm <= 62:
        mm -= 50
    if not 1 <= mm <= 12:
        return False

    return 1 <= dd <= calendar.monthrange(year, mm)[1]


def is_valid_registration_number(value: str) -> bool:
    """Check a 6 or 8 digit company registration number."""
    return value.isdigit() and len(value) in (6, 8)


@dataclass(eq=False)
class Person:
    """
    A natural or legal person.

    Contract:
        Identity-based equality (two Person objects with the same id are
        still two parties). Holds the contracts the person is the direct
        policy holder of, in the order they were linked.

    Guarantees:
        - ``legal_form`` is derived from ``person_id`` at construction.
        - ``paid_out_amount`` only grows, by strictly positive payouts.
    """

    person_id: str
    legal_form: LegalForm = field(init=False)
    paid_out_amount: int = field(default=0, init=False)
    _contracts: list[Contract] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.person_id:
            raise InvalidPersonError(self.person_id, "id must not be empty")
        if is_valid_birth_number(self.person_id):
            self.legal_form = LegalForm.NATURAL
        elif is_valid_registration_number(self.person_id):
            self.legal_form = LegalForm.LEGAL
        else:
            raise InvalidPersonError(
                self.person_id,
                "id is neither a birth number nor a registration number",
            )

    @property
    def contracts(self) -> tuple[Contract, ...]:
        """Contracts this person directly holds, in link order."""
        return tuple(self._contracts)

    def add_contract(self, contract: Contract) -> None:
        if contract is None:
            raise InvalidPersonError(self.person_id, "contract must not be None")
        if not any(c is contract for c in self._contracts):
            self._contracts.append(contract)

    def remove_contract(self, contract: Contract) -> None:
        self._contracts[:] = [c for c in self._contracts if c is not contract]

    def payout(self, amount: int) -> None:
        """Receive a claim payout."""
        if amount <= 0:
            raise InvalidPersonError(self.person_id, "payout amount must be positive")
        self.paid_out_amount += amount


@dataclass(frozen=True, eq=False)
class Vehicle:
    """An insured vehicle with its declared original value."""

    license_plate: str
    original_value: int

    def __post_init__(self) -> None:
        plate = self.license_plate
        if (
            not plate
            or len(plate) != 7
            or not plate.isascii()
            or not all(ch.isdigit() or ch.isupper() for ch in plate)
        ):
            raise InvalidVehicleError(
                plate, "license plate must be 7 uppercase letters or digits"
            )
        if self.original_value < 0:
            raise InvalidVehicleError(plate, "original value must not be negative")
