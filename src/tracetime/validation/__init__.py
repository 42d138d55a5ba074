"""Fluent validation chain for single parameter values."""

from tracetime.validation.chain import UNSET, ValueChain, check

__all__ = ["UNSET", "ValueChain", "check"]
