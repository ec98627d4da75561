"""
Servicio de ciclo de vida de cuentas: registro, verificación de email,
autenticación y consultas.
"""
import logging
import uuid
from typing import List, Optional, Protocol, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import Settings, settings as default_settings
from app.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    UnknownAccountError,
    ValidationError,
)
from app.core.security import (
    CredentialIssuer,
    MalformedPasswordHashError,
    PasswordHashingError,
    get_password_hash,
    verify_password,
)
from app.models.account import Account
from app.services.accounts import AccountDirectory, DuplicateIdentityError, is_valid_email
from app.services.verification_tokens import VerificationTokenStore

logger = logging.getLogger(__name__)

ALL_FIELDS_REQUIRED = "Failure: All Fields are Compulsory!"
INVALID_EMAIL = "Failure: Invalid Email Format!"
DUPLICATE_IDENTITY = "Failure: Duplicate Username/Email!"
INVALID_ID = "Failure: Invalid ID. No User Found!"
INVALID_LINK = "Failure: Invalid Link!"
LOGIN_FIELDS_REQUIRED = "Authentication Failed: All Fields are Compulsory!"
WRONG_CREDENTIALS = "Authentication Failed: Wrong Username or Password!"
ACCOUNT_NOT_VERIFIED = "Authentication Failed: Please verify account before continuing."


class Notifier(Protocol):
    def send_email_verification(self, *, to_email: str, verification_link: str) -> object:
        ...


class AccountLifecycleService:
    """Orquesta directorio, tokens, hashing, credenciales y notificaciones"""

    def __init__(
        self,
        session: Session,
        *,
        issuer: CredentialIssuer,
        notifier: Notifier,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.issuer = issuer
        self.notifier = notifier
        self.settings = settings or default_settings

    def build_verification_link(self, account_id: uuid.UUID, secret: str) -> str:
        base = self.settings.verification_base_url.rstrip("/")
        return f"{base}/{account_id}/{secret}"

    def list_accounts(self) -> List[Account]:
        return AccountDirectory.find_all(self.session)

    def get_account(self, account_id: Union[str, uuid.UUID]) -> Account:
        account = AccountDirectory.find_by_id(self.session, account_id)
        if account is None:
            raise UnknownAccountError(INVALID_ID)
        return account

    def register(self, email: str, username: str, password: str) -> Account:
        """
        Registrar una cuenta sin verificar y enviar el link de verificación.

        La cuenta y su token se guardan en la misma transacción. Una falla
        del envío de email no deshace el registro.
        """
        email = (email or "").strip()
        username = (username or "").strip()
        password = (password or "").strip()

        if not email or not username or not password:
            raise ValidationError(ALL_FIELDS_REQUIRED)
        if not is_valid_email(email):
            raise ValidationError(INVALID_EMAIL)

        # Chequeo rápido; la restricción UNIQUE del insert es la que decide
        if AccountDirectory.find_by_email_or_username(self.session, email, username):
            raise ConflictError(DUPLICATE_IDENTITY)

        try:
            password_hash = get_password_hash(password, rounds=self.settings.bcrypt_rounds)
        except PasswordHashingError as e:
            raise InternalError(str(e)) from e

        account = Account(email=email, username=username, password_hash=password_hash)
        try:
            account = AccountDirectory.insert(self.session, account, commit=False)
        except DuplicateIdentityError as e:
            logger.info("Registro concurrente perdido para %s / %s", email, username)
            raise ConflictError(DUPLICATE_IDENTITY) from e

        token = VerificationTokenStore.issue(self.session, account.id)
        self.session.refresh(account)
        logger.info("Cuenta registrada %s (%s)", account.username, account.id)

        self._notify(account, self.build_verification_link(account.id, token.secret))
        return account

    def _notify(self, account: Account, verification_link: str) -> None:
        try:
            self.notifier.send_email_verification(
                to_email=account.email,
                verification_link=verification_link,
            )
        except Exception:
            logger.exception("No se pudo despachar el email de verificación para %s", account.id)

    def verify_email(self, account_id: Union[str, uuid.UUID], secret: str) -> Account:
        """Canjear el token de verificación; un token solo puede canjearse una vez"""
        account = AccountDirectory.find_by_id(self.session, account_id)
        if account is None:
            raise NotFoundError(INVALID_LINK)

        token = VerificationTokenStore.find_by_account_and_secret(self.session, account.id, secret)
        if token is None:
            raise NotFoundError(INVALID_LINK)

        try:
            # Consumir y marcar en una sola transacción
            if not VerificationTokenStore.consume(self.session, token.id, commit=False):
                self.session.rollback()
                raise NotFoundError(INVALID_LINK)
            AccountDirectory.set_verified(self.session, account.id, commit=False)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        self.session.refresh(account)
        logger.info("Email verificado para cuenta %s", account.id)
        return account

    def authenticate(self, username: str, password: str) -> str:
        """Validar credenciales y emitir una credencial de sesión firmada"""
        username = (username or "").strip()
        password = (password or "").strip()
        if not username or not password:
            raise ValidationError(LOGIN_FIELDS_REQUIRED)

        accounts = AccountDirectory.find_by_username(self.session, username)
        if not accounts:
            logger.info("Login fallido: usuario inexistente")
            raise UnauthorizedError(WRONG_CREDENTIALS)
        account = accounts[0]

        try:
            matches = verify_password(password, account.password_hash)
        except MalformedPasswordHashError:
            # Al cliente se le responde igual que ante una contraseña incorrecta
            logger.warning("Hash de contraseña corrupto para cuenta %s", account.id)
            raise UnauthorizedError(WRONG_CREDENTIALS)

        if account.verified and matches:
            logger.info("Login exitoso para cuenta %s", account.id)
            return self.issuer.issue(
                account_id=str(account.id),
                username=account.username,
                email=account.email,
            )
        if not account.verified:
            logger.info("Login rechazado: cuenta %s sin verificar", account.id)
            raise UnauthorizedError(ACCOUNT_NOT_VERIFIED)

        logger.info("Login fallido: contraseña incorrecta para cuenta %s", account.id)
        raise UnauthorizedError(WRONG_CREDENTIALS)

    def delete_all(self) -> None:
        """
        Borrar todas las cuentas y tokens.

        Cada borrado es independiente; las fallas se registran y no se
        informan al cliente.
        """
        wipes = (
            ("tokens", VerificationTokenStore.delete_all),
            ("cuentas", AccountDirectory.delete_all),
        )
        for label, wipe in wipes:
            try:
                deleted = wipe(self.session)
                logger.info("Borrado masivo de %s: %s filas", label, deleted)
            except SQLAlchemyError:
                self.session.rollback()
                logger.exception("Falló el borrado masivo de %s", label)
