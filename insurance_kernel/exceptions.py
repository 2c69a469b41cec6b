"""
Typed Exception Hierarchy for the Insurance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the registry must be able to tell a rejected request apart from
an operation attempted against a contract whose state forbids it, without
parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (contract numbers, amounts)

Example:
    try:
        registry.insure_vehicle("SV-001", None, holder, 50, freq, car)
    except PremiumBelowThresholdError as e:
        log.warning("premium too low", extra={"minimum": e.minimum})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InsuranceKernelError (base)
    |
    +-- ValidationError
    |   +-- MissingArgumentError
    |   +-- InvalidContractNumberError
    |   +-- DuplicateContractNumberError
    |   +-- InvalidPremiumError
    |   +-- EmptyInsuredSetError
    |   +-- PremiumBelowThresholdError
    |   +-- InvalidClaimError
    |   +-- NotInsuredPersonError
    |   +-- InvalidPersonError
    |   +-- InvalidVehicleError
    |
    +-- ContractStateError
        +-- InactiveContractError
        +-- PolicyHolderMismatchError
        +-- ForeignContractError
        +-- HierarchyError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | MISSING_ARGUMENT            | Required argument is None
                | INVALID_CONTRACT_NUMBER     | Contract number None or empty
                | DUPLICATE_CONTRACT_NUMBER   | Contract number already held
                | INVALID_PREMIUM             | Proposed premium <= 0
                | EMPTY_INSURED_SET           | Travel contract with no persons
                | PREMIUM_BELOW_THRESHOLD     | Annual premium under the minimum
                | INVALID_CLAIM               | Empty affected set, damages <= 0
                | NOT_INSURED_PERSON          | Affected person not insured
                | INVALID_PERSON              | Malformed person identifier
                | INVALID_VEHICLE             | Malformed plate or value
----------------|-----------------------------|-----------------------------------------
State           | CONTRACT_INACTIVE           | Billing or claim on inactive contract
                | POLICY_HOLDER_MISMATCH      | Master/child held by different persons
                | FOREIGN_CONTRACT            | Contract issued by another registry
                | INVALID_HIERARCHY           | Move would break the contract tree

All exceptions are raised before any mutation. A caller that catches one
may assume the registry and every contract are exactly as they were.
"""


class InsuranceKernelError(Exception):
    """
    Base exception for all insurance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INSURANCE_KERNEL_ERROR"


# Validation exceptions


class ValidationError(InsuranceKernelError):
    """Malformed or policy-violating input to a creation or claim call."""

    code: str = "VALIDATION_ERROR"


class MissingArgumentError(ValidationError):
    """A required argument was None."""

    code: str = "MISSING_ARGUMENT"

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"{argument} must not be None")


class InvalidContractNumberError(ValidationError):
    """Contract number is None or empty."""

    code: str = "INVALID_CONTRACT_NUMBER"

    def __init__(self, contract_number: str | None):
        self.contract_number = contract_number
        super().__init__("contract_number must not be None or empty")


class DuplicateContractNumberError(ValidationError):
    """Contract number is already held by this registry."""

    code: str = "DUPLICATE_CONTRACT_NUMBER"

    def __init__(self, contract_number: str):
        self.contract_number = contract_number
        super().__init__(f"Contract number already in use: {contract_number}")


class InvalidPremiumError(ValidationError):
    """Proposed premium is not positive."""

    code: str = "INVALID_PREMIUM"

    def __init__(self, proposed_premium: int):
        self.proposed_premium = proposed_premium
        super().__init__(
            f"proposed_premium must be positive, got {proposed_premium}"
        )


class EmptyInsuredSetError(ValidationError):
    """Travel contract requested with no persons to insure."""

    code: str = "EMPTY_INSURED_SET"

    def __init__(self, contract_number: str):
        self.contract_number = contract_number
        super().__init__(
            f"Contract {contract_number} must insure at least one person"
        )


class PremiumBelowThresholdError(ValidationError):
    """Annualized premium does not meet the minimum yearly threshold."""

    code: str = "PREMIUM_BELOW_THRESHOLD"

    def __init__(self, contract_number: str, annual_premium: int, minimum: str):
        self.contract_number = contract_number
        self.annual_premium = annual_premium
        self.minimum = minimum
        super().__init__(
            f"Annual premium {annual_premium} for {contract_number} "
            f"is below the minimum of {minimum}"
        )


class InvalidClaimError(ValidationError):
    """Claim request is malformed."""

    code: str = "INVALID_CLAIM"

    def __init__(self, contract_number: str, reason: str):
        self.contract_number = contract_number
        self.reason = reason
        super().__init__(f"Invalid claim on {contract_number}: {reason}")


class NotInsuredPersonError(ValidationError):
    """Affected persons are not a subset of the contract's insured persons."""

    code: str = "NOT_INSURED_PERSON"

    def __init__(self, contract_number: str, person_ids: list[str]):
        self.contract_number = contract_number
        self.person_ids = person_ids
        super().__init__(
            f"Persons {', '.join(person_ids)} are not insured "
            f"by contract {contract_number}"
        )


class InvalidPersonError(ValidationError):
    """Person identifier or payout request is malformed."""

    code: str = "INVALID_PERSON"

    def __init__(self, person_id: str | None, reason: str):
        self.person_id = person_id
        self.reason = reason
        super().__init__(f"Invalid person {person_id!r}: {reason}")


class InvalidVehicleError(ValidationError):
    """License plate or original value is malformed."""

    code: str = "INVALID_VEHICLE"

    def __init__(self, license_plate: str | None, reason: str):
        self.license_plate = license_plate
        self.reason = reason
        super().__init__(f"Invalid vehicle {license_plate!r}: {reason}")


# Contract state exceptions


class ContractStateError(InsuranceKernelError):
    """Operation attempted against a contract whose state forbids it."""

    code: str = "CONTRACT_STATE_ERROR"


class InactiveContractError(ContractStateError):
    """Contract is inactive and can no longer be billed, claimed or moved."""

    code: str = "CONTRACT_INACTIVE"

    def __init__(self, contract_number: str):
        self.contract_number = contract_number
        super().__init__(f"Contract is not active: {contract_number}")


class PolicyHolderMismatchError(ContractStateError):
    """Master and child contracts are held by different policy holders."""

    code: str = "POLICY_HOLDER_MISMATCH"

    def __init__(self, master_number: str, child_number: str):
        self.master_number = master_number
        self.child_number = child_number
        super().__init__(
            f"Policy holder of {child_number} does not match "
            f"master contract {master_number}"
        )


class ForeignContractError(ContractStateError):
    """Contract was issued by a different registry."""

    code: str = "FOREIGN_CONTRACT"

    def __init__(self, contract_number: str):
        self.contract_number = contract_number
        super().__init__(
            f"Contract {contract_number} does not belong to this insurer"
        )


class HierarchyError(ContractStateError):
    """Moving the contract would break the master/child tree."""

    code: str = "INVALID_HIERARCHY"

    def __init__(self, master_number: str, child_number: str, reason: str):
        self.master_number = master_number
        self.child_number = child_number
        self.reason = reason
        super().__init__(
            f"Cannot move {child_number} under {master_number}: {reason}"
        )
