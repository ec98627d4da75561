"""
Esquemas Pydantic para autenticación
"""
from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Esquema para login con JSON"""
    username: str = ""
    password: str = ""


class Token(BaseModel):
    """Esquema para credencial de sesión"""
    message: str = "Authentication successful"
    token: str
    token_type: str = "bearer"
    expires_in: int  # segundos
