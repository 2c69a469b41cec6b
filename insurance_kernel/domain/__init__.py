"""
Pure domain layer.

This module contains the contract, billing and party types with NO
dependencies on:
- Configuration
- Services
- Wall-clock time
- I/O

Time always arrives as an argument.
"""

from insurance_kernel.domain.contracts import (
    Contract,
    MasterVehicleContract,
    SingleVehicleContract,
    TravelContract,
)
from insurance_kernel.domain.payment import PaymentSchedule, add_months
from insurance_kernel.domain.values import (
    LegalForm,
    Person,
    PremiumPaymentFrequency,
    Vehicle,
)

__all__ = [
    "Contract",
    "LegalForm",
    "MasterVehicleContract",
    "PaymentSchedule",
    "Person",
    "PremiumPaymentFrequency",
    "SingleVehicleContract",
    "TravelContract",
    "Vehicle",
    "add_months",
]
