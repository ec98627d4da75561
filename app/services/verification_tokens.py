import secrets
import uuid
from typing import List, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.verification_token import VerificationToken

TOKEN_BYTES = 16


class VerificationTokenStore:
    @staticmethod
    def issue(session: Session, account_id: uuid.UUID, *, commit: bool = True) -> VerificationToken:
        record = VerificationToken(
            account_id=account_id,
            secret=secrets.token_hex(TOKEN_BYTES),
        )
        session.add(record)
        if commit:
            session.commit()
            session.refresh(record)
        else:
            session.flush()
        return record

    @staticmethod
    def find_by_account_and_secret(
        session: Session,
        account_id: uuid.UUID,
        secret: str,
    ) -> Optional[VerificationToken]:
        statement = select(VerificationToken).where(
            VerificationToken.account_id == account_id,
            VerificationToken.secret == secret,
        )
        return session.exec(statement).first()

    @staticmethod
    def find_by_account(session: Session, account_id: uuid.UUID) -> List[VerificationToken]:
        statement = select(VerificationToken).where(VerificationToken.account_id == account_id)
        return list(session.exec(statement).all())

    @staticmethod
    def consume(session: Session, token_id: int, *, commit: bool = True) -> bool:
        """Borrar el token si existe; retorna si esta llamada fue la que lo borró"""
        result = session.execute(delete(VerificationToken).where(VerificationToken.id == token_id))
        if commit:
            session.commit()
        return result.rowcount == 1

    @staticmethod
    def delete_all(session: Session) -> int:
        result = session.execute(delete(VerificationToken))
        session.commit()
        return result.rowcount
