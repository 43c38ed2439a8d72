from __future__ import annotations


class BondEngineError(Exception):
    """Base exception for every error raised by the engine."""


class ValidationError(BondEngineError, ValueError):
    """
    Raised when an input fails validation (face value, rates, quotes,
    tax settings, maturity range, frequency).

    Validation always runs before a Bond is built, so a rejected change
    leaves the previous instance untouched.
    """


class UnsupportedConvention(BondEngineError, ValueError):
    """Raised for a day count convention the engine does not implement."""


class ConvergenceError(BondEngineError, ArithmeticError):
    """Raised by the bracketed yield solver when no root can be bracketed."""
