"""Structural and identifier validation for catalog entities.

Attributes:
    Validator: Injectable validator shared by the RPC handlers.
        See [Validator][smarthub.validation.validator.Validator].
"""

from .validator import Validator


__all__ = ["Validator"]
