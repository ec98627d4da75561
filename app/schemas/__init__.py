from .accounts import (
    RegisterRequest,
    MessageResponse,
    AccountResponse,
    AccountListResponse,
)
from .auth import LoginRequest, Token

__all__ = [
    "RegisterRequest",
    "MessageResponse",
    "AccountResponse",
    "AccountListResponse",
    "LoginRequest",
    "Token",
]
