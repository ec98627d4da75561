from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.errors import register_exception_handlers
from app.core.request_id import RequestIdMiddleware, configure_logging
from app.core.security import CredentialIssuer
from app.routers import accounts

configure_logging(settings.log_level)

# Crear la aplicación FastAPI
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="API de cuentas - registro, verificación de email y login",
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

# La clave de firma se lee una sola vez por proceso
app.state.credential_issuer = CredentialIssuer.from_settings(settings)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # En producción, especificar dominios específicos
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

register_exception_handlers(app)

# Incluir routers
app.include_router(accounts.router, prefix="/api")


@app.on_event("startup")
def on_startup():
    """Eventos que se ejecutan al iniciar la aplicación"""
    if settings.auto_create_db:
        create_db_and_tables()


@app.get("/")
def read_root():
    """Endpoint raíz de la API"""
    return {
        "message": f"Bienvenido a {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Endpoint para verificar el estado de la API"""
    return {"status": "healthy", "app": settings.app_name}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
