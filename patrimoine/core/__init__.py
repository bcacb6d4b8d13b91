"""Core financial math, exceptions, logging and settings."""

from .exceptions import (
    ConfigurationError,
    DataLoadError,
    InvalidParameterError,
    NotComputedError,
    NumericDomainError,
    PatrimoineError,
    SimulationCancelledError,
    SimulationError,
)
from .financial import (
    future_value,
    loan_payment,
    pct_to_rate,
    residual_loan_value,
)

__all__ = [
    "future_value",
    "loan_payment",
    "residual_loan_value",
    "pct_to_rate",
    # Exceptions
    "PatrimoineError",
    "ConfigurationError",
    "DataLoadError",
    "NumericDomainError",
    "InvalidParameterError",
    "SimulationError",
    "SimulationCancelledError",
    "NotComputedError",
]
