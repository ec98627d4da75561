"""
Modelos SQLModel para la API de cuentas
"""

from .account import (
    AccountBase,
    Account,
    AccountRead,
)
from .verification_token import VerificationToken

__all__ = [
    "AccountBase",
    "Account",
    "AccountRead",
    "VerificationToken",
]
