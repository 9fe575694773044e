from __future__ import annotations


class VaultError(Exception):
    """Base class for every failure raised by the vault core."""


class ValidationError(VaultError):
    pass


class AuthorizationError(VaultError):
    pass


class ReentrancyError(VaultError):
    pass


class VaultArithmeticError(VaultError, ArithmeticError):
    pass


class ImproperRatioError(ValidationError):
    def __init__(self, message: str = "Improper ratio"):
        super().__init__(message)
