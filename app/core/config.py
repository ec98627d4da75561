from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # Configuración de la base de datos
    database_url: str = "sqlite:///./accounts.db"
    sql_echo: bool = False
    auto_create_db: bool = True

    # Configuración de la aplicación
    app_name: str = "PeerPrep Accounts API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Configuración del servidor
    host: str = "0.0.0.0"
    port: int = 8000

    # Configuración JWT (clave de firma de credenciales de sesión)
    secret_key: str = "your-secret-key-change-this-in-production-make-it-very-long-and-random"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 180

    # Costo de bcrypt
    bcrypt_rounds: int = 10

    # Verificación de email
    verification_base_url: str = "http://localhost:8000/api/users/verify"
    verification_email_subject: str = "Verify Email for PeerPrep"

    # Envío de emails: "console", "smtp" o "disabled"
    email_backend: str = "console"
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_from: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


# Instancia global de configuración
settings = Settings()
