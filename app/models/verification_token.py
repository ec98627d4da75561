import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from app.models.account import utcnow


class VerificationToken(SQLModel, table=True):
    __tablename__ = "verification_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: uuid.UUID = Field(foreign_key="accounts.id", index=True)
    secret: str = Field(index=True, unique=True, max_length=64)
    issued_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        index=True,
    )
