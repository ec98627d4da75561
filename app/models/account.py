"""
Modelos de cuenta de usuario
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountBase(SQLModel):
    """Campos públicos de una cuenta"""
    email: str
    username: str
    verified: bool = Field(default=False)


class Account(AccountBase, table=True):
    """Cuenta registrada. Email y usuario son únicos sin distinguir mayúsculas."""
    __tablename__ = "accounts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    # Claves en minúsculas: la restricción UNIQUE es la garantía real de unicidad
    email_canonical: str = Field(unique=True, index=True)
    username_canonical: str = Field(unique=True, index=True)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        index=True,
    )


class AccountRead(AccountBase):
    """Esquema para leer una cuenta (sin hash de contraseña)"""
    id: uuid.UUID
    created_at: Optional[datetime] = None
