"""Custom exceptions for patrimoine.

Domain-specific exception types carrying the failing component and cause.
"""

from __future__ import annotations

from typing import Any


class PatrimoineError(Exception):
    """Base exception for all patrimoine errors."""
    pass


# --- Data Errors ---

class DataLoadError(PatrimoineError):
    """Failed to load or parse data files (e.g., fiscal model JSON)."""
    pass


# --- Configuration Errors ---

class ConfigurationError(PatrimoineError):
    """Malformed or inconsistent tax-model configuration."""

    def __init__(self, component: str, reason: str):
        self.component = component
        self.reason = reason
        super().__init__(f"Invalid configuration for '{component}': {reason}")


# --- Calculation Errors ---

class NumericDomainError(PatrimoineError):
    """Input outside the domain where a financial formula is defined."""

    def __init__(self, function: str, reason: str):
        self.function = function
        self.reason = reason
        super().__init__(f"{function}: {reason}")


class InvalidParameterError(PatrimoineError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Simulation Errors ---

class SimulationError(PatrimoineError):
    """A simulation run aborted on a per-year failure."""

    def __init__(self, component: str, year: int | None, cause: str):
        self.component = component
        self.year = year
        self.cause = cause
        where = f" in {year}" if year is not None else ""
        super().__init__(f"Simulation aborted{where} by '{component}': {cause}")


class InsufficientFundsError(PatrimoineError):
    """Financial assets cannot cover a negative net cash flow."""

    def __init__(self, year: int, shortfall: float):
        self.year = year
        self.shortfall = shortfall
        super().__init__(f"Financial assets exhausted in {year}: {shortfall:.2f} € not covered")


class SimulationCancelledError(PatrimoineError):
    """A simulation run was cancelled before completing."""

    def __init__(self, year: int):
        self.year = year
        super().__init__(f"Simulation cancelled before year {year}")


class NotComputedError(PatrimoineError):
    """Results requested before a successful computation."""
    pass
