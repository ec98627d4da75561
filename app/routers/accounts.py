"""
Router de cuentas - registro, verificación de email y login
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlmodel import Session

from app.core.database import get_session
from app.core.security import CredentialIssuer
from app.models.account import AccountRead
from app.schemas.accounts import (
    AccountListResponse,
    AccountResponse,
    MessageResponse,
    RegisterRequest,
)
from app.schemas.auth import LoginRequest, Token
from app.services.account_lifecycle import AccountLifecycleService
from app.services.email_service import BackgroundNotifier

router = APIRouter(prefix="/users", tags=["users"])


def get_credential_issuer(request: Request) -> CredentialIssuer:
    """Emisor de credenciales configurado al iniciar la aplicación"""
    return request.app.state.credential_issuer


def get_account_service(
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
) -> AccountLifecycleService:
    return AccountLifecycleService(
        session,
        issuer=issuer,
        notifier=BackgroundNotifier(background_tasks),
    )


@router.get("", response_model=AccountListResponse)
def list_accounts(service: AccountLifecycleService = Depends(get_account_service)):
    """Listar todas las cuentas"""
    accounts = service.list_accounts()
    return AccountListResponse(
        message="Success: All Users Displayed!",
        data=[AccountRead.model_validate(account) for account in accounts],
    )


@router.post("", response_model=MessageResponse)
def register(
    payload: RegisterRequest,
    service: AccountLifecycleService = Depends(get_account_service),
):
    """
    Registrar una cuenta nueva

    - **email**: Email único (sin distinguir mayúsculas)
    - **username**: Nombre de usuario único (sin distinguir mayúsculas)
    - **password**: Contraseña

    La cuenta queda sin verificar hasta abrir el link enviado por email.
    """
    service.register(payload.email, payload.username, payload.password)
    return MessageResponse(message="An email has been sent to your account. Please verify.")


@router.post("/login", response_model=Token)
def login(
    payload: LoginRequest,
    service: AccountLifecycleService = Depends(get_account_service),
):
    """
    Iniciar sesión

    Retorna una credencial JWT válida por 3 horas
    """
    token = service.authenticate(payload.username, payload.password)
    return Token(token=token, expires_in=service.issuer.expires_in)


@router.get("/verify/{account_id}/{token}", response_model=MessageResponse)
def verify_email(
    account_id: str,
    token: str,
    service: AccountLifecycleService = Depends(get_account_service),
):
    """Verificar el email con el link enviado al registrarse"""
    service.verify_email(account_id, token)
    return MessageResponse(message="Email Verified. You can log in to your account now.")


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    service: AccountLifecycleService = Depends(get_account_service),
):
    """Obtener una cuenta por ID"""
    account = service.get_account(account_id)
    return AccountResponse(
        message="Success: User found!",
        data=AccountRead.model_validate(account),
    )


@router.delete("", response_model=MessageResponse)
def delete_all_accounts(service: AccountLifecycleService = Depends(get_account_service)):
    """Borrar todas las cuentas y tokens de verificación"""
    service.delete_all()
    return MessageResponse(message="Success: All Users and Tokens Deleted")
