"""
Esquemas Pydantic para cuentas
"""
from typing import List

from pydantic import BaseModel

from app.models.account import AccountRead


class RegisterRequest(BaseModel):
    """Esquema para registrar una cuenta (campos vacíos se validan en el servicio)"""
    email: str = ""
    username: str = ""
    password: str = ""


class MessageResponse(BaseModel):
    message: str


class AccountResponse(BaseModel):
    message: str
    data: AccountRead


class AccountListResponse(BaseModel):
    message: str
    data: List[AccountRead]
