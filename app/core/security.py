from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
import bcrypt
import logging
from app.core.config import Settings

# Configurar logging
logger = logging.getLogger(__name__)

# bcrypt solo considera los primeros 72 bytes
BCRYPT_MAX_BYTES = 72


class PasswordHashingError(Exception):
    """Falla del motor de hashing (error interno, no de autenticación)"""


class MalformedPasswordHashError(Exception):
    """El hash almacenado no es un hash bcrypt válido"""


def _truncate_password_safely(password: str) -> bytes:
    """
    Truncar contraseña de forma segura a 72 bytes para bcrypt.
    Retorna bytes directamente para evitar problemas de codificación.
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) <= BCRYPT_MAX_BYTES:
        return password_bytes
    return password_bytes[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str, rounds: int = 10) -> str:
    """Generar hash de contraseña usando bcrypt directamente"""
    try:
        safe_password_bytes = _truncate_password_safely(password)
        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(safe_password_bytes, salt)
        return hashed.decode('utf-8')
    except Exception as e:
        logger.exception("Error al generar hash de contraseña")
        raise PasswordHashingError(f"No se pudo generar hash de contraseña: {e}") from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verificar contraseña plana contra hash usando bcrypt directamente.

    Una contraseña incorrecta retorna False; un hash almacenado corrupto
    lanza MalformedPasswordHashError.
    """
    safe_password_bytes = _truncate_password_safely(plain_password)
    try:
        hashed_password_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(safe_password_bytes, hashed_password_bytes)
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedPasswordHashError(str(e)) from e


class CredentialIssuer:
    """Firma credenciales de sesión (JWT) con una clave fija por proceso"""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=3),
    ):
        if not secret_key:
            raise ValueError("secret_key es obligatoria")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialIssuer":
        return cls(
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )

    @property
    def expires_in(self) -> int:
        """Duración de la credencial en segundos"""
        return int(self.expires_delta.total_seconds())

    def issue(self, *, account_id: str, username: str, email: str, now: Optional[datetime] = None) -> str:
        """Crear token JWT con los claims de la cuenta"""
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "accountId": account_id,
            "username": username,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[dict]:
        """Verificar y decodificar token JWT"""
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
