"""
Registry Invariants Contract.

These invariants are structural law for every ContractRegistry. No
underwriting rule set may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across ContractRegistry, ClaimProcessor,
PaymentSchedule and the Contract types.
"""

from enum import Enum, unique


@unique
class RegistryInvariant(str, Enum):
    """Non-configurable invariants enforced by the registry.

    Each value names one structural guarantee that the kernel provides
    unconditionally. Underwriting rules may influence *how much* is
    charged or paid out, but never *whether* these rules apply.
    """

    UNIQUE_CONTRACT_NUMBER = "unique_contract_number"
    """Contract numbers are unique among every contract the registry has
    ever issued, including children moved under a master. Enforced by
    ContractRegistry before any contract is constructed."""

    BILLING_CAUGHT_UP = "billing_caught_up"
    """After a billing pass every billed schedule has its next payment
    time strictly after the registry's current time. Enforced by
    PaymentSchedule.charge_until."""

    HIERARCHY_EXCLUSION = "hierarchy_exclusion"
    """A master contract's children are never members of the registry's
    top-level contract set. Enforced by
    ContractRegistry.move_contract_under_master."""

    MONOTONIC_DEACTIVATION = "monotonic_deactivation"
    """A contract's active flag only moves from True to False. Enforced by
    Contract.deactivate, the only writer of the flag."""

    ATOMIC_OPERATION = "atomic_operation"
    """Failed operations leave no trace: every validation runs before the
    first mutation."""


# All invariants as a frozenset for programmatic checks.
ALL_REGISTRY_INVARIANTS: frozenset[RegistryInvariant] = frozenset(RegistryInvariant)

# The kernel domain layer may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_DOMAIN_IMPORTS: tuple[str, ...] = (
    "insurance_config",
    "insurance_kernel.services",
)
