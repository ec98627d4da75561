"""
Directorio de cuentas: consultas y escritura con unicidad garantizada
"""
import re
import uuid
from typing import List, Optional, Union

from sqlalchemy import delete, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.account import Account

# local-part@dominio, dominio como IPv4 entre corchetes o etiquetas con TLD de 2+ letras
EMAIL_PATTERN = re.compile(
    r'(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))'
)


class DuplicateIdentityError(Exception):
    """Otra cuenta ya tiene el email o el nombre de usuario"""


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(str(email).lower()) is not None


def canonical(value: str) -> str:
    return value.strip().lower()


def _parse_account_id(account_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(account_id, uuid.UUID):
        return account_id
    try:
        return uuid.UUID(str(account_id))
    except ValueError:
        return None


class AccountDirectory:
    """Operaciones de persistencia sobre cuentas"""

    @staticmethod
    def find_all(session: Session) -> List[Account]:
        statement = select(Account).order_by(Account.created_at)
        return list(session.exec(statement).all())

    @staticmethod
    def find_by_id(session: Session, account_id: Union[str, uuid.UUID]) -> Optional[Account]:
        """Obtener cuenta por ID; un ID mal formado no resuelve a ninguna cuenta"""
        parsed = _parse_account_id(account_id)
        if parsed is None:
            return None
        return session.get(Account, parsed)

    @staticmethod
    def find_by_email_or_username(session: Session, email: str, username: str) -> List[Account]:
        """Coincidencia exacta, sin distinguir mayúsculas, en cualquiera de los dos campos"""
        statement = select(Account).where(
            or_(
                Account.email_canonical == canonical(email),
                Account.username_canonical == canonical(username),
            )
        )
        return list(session.exec(statement).all())

    @staticmethod
    def find_by_username(session: Session, username: str) -> List[Account]:
        statement = select(Account).where(Account.username_canonical == canonical(username))
        return list(session.exec(statement).all())

    @staticmethod
    def insert(session: Session, account: Account, *, commit: bool = True) -> Account:
        """
        Guardar una cuenta nueva.

        La restricción UNIQUE de la base decide ante registros concurrentes;
        el perdedor recibe DuplicateIdentityError.
        """
        account.email_canonical = canonical(account.email)
        account.username_canonical = canonical(account.username)
        session.add(account)
        try:
            if commit:
                session.commit()
                session.refresh(account)
            else:
                session.flush()
        except IntegrityError as e:
            session.rollback()
            raise DuplicateIdentityError(str(e.orig)) from e
        return account

    @staticmethod
    def set_verified(session: Session, account_id: uuid.UUID, *, commit: bool = True) -> Optional[Account]:
        account = session.get(Account, account_id)
        if account is None:
            return None
        account.verified = True
        session.add(account)
        if commit:
            session.commit()
            session.refresh(account)
        return account

    @staticmethod
    def delete_all(session: Session) -> int:
        result = session.execute(delete(Account))
        session.commit()
        return result.rowcount
