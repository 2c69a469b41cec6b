"""Services for the insurance kernel (write side)."""

from insurance_kernel.services.claim_processor import ClaimProcessor, ClaimSettlement
from insurance_kernel.services.contract_registry import BillingRunSummary, ContractRegistry

__all__ = [
    "BillingRunSummary",
    "ClaimProcessor",
    "ClaimSettlement",
    "ContractRegistry",
]
