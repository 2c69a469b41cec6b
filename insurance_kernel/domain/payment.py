"""
Payment -- Per-contract billing state and catch-up charging.

Responsibility:
    PaymentSchedule holds the premium, frequency, next due time and the
    accumulated outstanding balance of one contract, and implements the
    catch-up loop that charges every period elapsed up to a given time.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Time is always
    passed in by the caller; this module never reads a clock.

Invariants enforced:
    - BILLING_CAUGHT_UP: after ``charge_until(now)`` returns,
      ``next_payment_time > now``.
    - ``outstanding_balance`` never decreases.
    - ``premium`` is strictly positive.

Failure modes:
    - InvalidPremiumError on a non-positive premium.
    - MissingArgumentError on a missing frequency or anchor time.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime

from insurance_kernel.domain.values import PremiumPaymentFrequency
from insurance_kernel.exceptions import InvalidPremiumError, MissingArgumentError


def add_months(moment: datetime, months: int) -> datetime:
    """
    Shift a datetime by whole calendar months.

    The day of month is clamped to the last valid day of the target month,
    so Jan 31 + 1 month is Feb 28 (or 29).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass
class PaymentSchedule:
    """
    Billing state owned by exactly one contract.

    Contract:
        ``next_payment_time`` is the moment the next premium falls due.
        A charge adds one premium to the balance and moves the due time
        forward one period.

    Guarantees:
        - ``charge_until`` is idempotent for a fixed ``now``.
        - After k elapsed periods, one ``charge_until`` call adds exactly
          ``k * premium`` and advances exactly k periods.
    """

    premium: int
    frequency: PremiumPaymentFrequency
    next_payment_time: datetime
    outstanding_balance: int = 0

    def __post_init__(self) -> None:
        if self.frequency is None:
            raise MissingArgumentError("frequency")
        if self.next_payment_time is None:
            raise MissingArgumentError("next_payment_time")
        if self.premium <= 0:
            raise InvalidPremiumError(self.premium)

    @property
    def annual_premium(self) -> int:
        return self.premium * self.frequency.periods_per_year

    def is_due(self, now: datetime) -> bool:
        return self.next_payment_time <= now

    def advance_next_payment_time(self) -> None:
        self.next_payment_time = add_months(
            self.next_payment_time, self.frequency.months
        )

    def charge_until(self, now: datetime) -> int:
        """
        Charge every period due at or before ``now``.

        Args:
            now: The registry's current time, fixed for the whole call.

        Returns:
            Number of periods charged (0 when nothing is due).
        """
        periods = 0
        while self.is_due(now):
            self.outstanding_balance += self.premium
            self.advance_next_payment_time()
            periods += 1
        return periods
