"""
Pytest fixtures for the insurance kernel test suite.

Provides:
- A registry anchored at a fixed logical time
- Natural and legal persons with valid identifiers
- Vehicles and traveller groups
- Structured log capture
"""

import json
import logging
from datetime import datetime
from io import StringIO

import pytest

from insurance_config import UnderwritingRules
from insurance_kernel.domain.values import Person, PremiumPaymentFrequency, Vehicle
from insurance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from insurance_kernel.services.contract_registry import ContractRegistry

# Fixed logical start of every registry under test. Day 15 keeps month
# arithmetic free of end-of-month clamping.
NOW = datetime(2024, 1, 15, 9, 30)

# Valid 10-digit birth numbers (divisible by 11).
BIRTH_NUMBERS = (
    "8001010006",
    "8001010017",
    "8001010028",
    "0101010008",
    "0101010019",
    "7503151007",
    "7503151018",
    "8807220004",
    "8807220015",
    "9302090006",
    "9302090017",
)
FEMALE_BIRTH_NUMBER = "9055123451"
REGISTRATION_NUMBER = "12345678"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture insurance_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, registry):
            registry.create_master_vehicle_contract(...)
            logs = captured_logs()
            assert any(r["message"] == "contract_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("insurance_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Registry fixtures
# =============================================================================


@pytest.fixture
def registry() -> ContractRegistry:
    """Registry with the default underwriting rules, anchored at NOW."""
    return ContractRegistry(NOW)


@pytest.fixture
def make_registry():
    """Factory for registries with custom rules or start times."""

    def _make(current_time: datetime = NOW, **rule_overrides) -> ContractRegistry:
        rules = UnderwritingRules(**rule_overrides) if rule_overrides else None
        return ContractRegistry(current_time, rules)

    return _make


# =============================================================================
# Party fixtures
# =============================================================================


@pytest.fixture
def holder() -> Person:
    return Person(BIRTH_NUMBERS[0])


@pytest.fixture
def other_holder() -> Person:
    return Person(BIRTH_NUMBERS[1])


@pytest.fixture
def beneficiary() -> Person:
    return Person(FEMALE_BIRTH_NUMBER)


@pytest.fixture
def company() -> Person:
    return Person(REGISTRATION_NUMBER)


@pytest.fixture
def travellers() -> set[Person]:
    """Five insurable natural persons."""
    return {Person(number) for number in BIRTH_NUMBERS[2:7]}


@pytest.fixture
def outsider() -> Person:
    return Person(BIRTH_NUMBERS[7])


@pytest.fixture
def car() -> Vehicle:
    return Vehicle("AB123CD", 10_000)


@pytest.fixture
def second_car() -> Vehicle:
    return Vehicle("XY987ZW", 20_000)


# =============================================================================
# Contract fixtures
# =============================================================================


@pytest.fixture
def vehicle_contract(registry, beneficiary, holder, car):
    """Quarterly single-vehicle contract: premium 50, coverage 5000."""
    return registry.insure_vehicle(
        "SV-001", beneficiary, holder, 50, PremiumPaymentFrequency.QUARTERLY, car
    )


@pytest.fixture
def travel_contract(registry, holder, travellers):
    """Annual travel contract over five persons: premium 25, coverage 50."""
    return registry.insure_persons(
        "TR-001", holder, 25, PremiumPaymentFrequency.ANNUAL, travellers
    )


@pytest.fixture
def master_contract(registry, beneficiary, holder):
    return registry.create_master_vehicle_contract("MV-001", beneficiary, holder)
