import logging
import secrets
from collections.abc import AsyncGenerator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Response, status
from starlette.middleware.sessions import SessionMiddleware

from newsletter_service import __version__
from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.dev_email import DevEmailAdapter
from newsletter_service.adapters.email_client import PostmarkEmailClient
from newsletter_service.adapters.sqlite.migrator import SQLiteMigrator
from newsletter_service.adapters.sqlite_db import SQLiteConnectionPool
from newsletter_service.api.errors import register_exception_handlers
from newsletter_service.api.routes import admin, login, newsletters, subscriptions
from newsletter_service.config import EmailClientSettings, Settings, get_settings
from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.ports.email import EmailSenderPort

logger = logging.getLogger(__name__)


def build_email_sender(settings: EmailClientSettings) -> EmailSenderPort:
    if settings.backend == "dev":
        return DevEmailAdapter()
    if settings.backend == "postmark":
        return PostmarkEmailClient(
            base_url=settings.base_url,
            sender=SubscriberEmail.parse(settings.sender_email),
            authorization_token=settings.authorization_token,
            timeout=settings.timeout_seconds,
        )
    raise ValueError(f"Unknown email backend: {settings.backend!r}")


def _session_secret(cfg: Settings) -> str:
    secret = cfg.application.session_secret.get_secret_value()
    if not secret:
        # Production refuses to load without one; elsewhere sessions just
        # don't survive a restart.
        logger.warning("No session secret configured, using a random one")
        secret = secrets.token_urlsafe(32)
    return secret


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open shared resources on startup and release them on shutdown."""
        db_path = cfg.database.path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        app.state.settings = cfg
        app.state.pool = SQLiteConnectionPool(
            db_path,
            max_connections=cfg.database.max_connections,
            acquire_timeout=cfg.database.acquire_timeout_seconds,
        )
        if cfg.database.run_migrations:
            applied = SQLiteMigrator(app.state.pool).run_migrations()
            logger.info("Applied %d migrations to %s", len(applied), db_path)

        # Tests may install a sender before startup.
        if getattr(app.state, "email_sender", None) is None:
            app.state.email_sender = build_email_sender(cfg.email_client)
        app.state.password_verifier = Argon2AuthAdapter()
        app.state.hashing_executor = ThreadPoolExecutor(
            max_workers=cfg.hashing.max_workers,
            thread_name_prefix="password-hash",
        )
        logger.info("Newsletter service started (environment=%s)", cfg.environment)

        try:
            yield
        finally:
            app.state.hashing_executor.shutdown(wait=True)
            if isinstance(app.state.email_sender, PostmarkEmailClient):
                app.state.email_sender.close()
            app.state.pool.close()
            logger.info("Newsletter service stopped")

    app = FastAPI(
        title="Newsletter Service API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(cfg),
        session_cookie="newsletter_session",
        same_site="strict",
        https_only=cfg.environment == "production",
    )

    # --- Routers ---
    app.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
    app.include_router(newsletters.router, prefix="/newsletters", tags=["Newsletters"])
    app.include_router(login.router, prefix="/login", tags=["Admin"])
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])

    register_exception_handlers(app)

    @app.get("/health_check", status_code=status.HTTP_200_OK)
    def health_check() -> Response:
        """Liveness check; empty body."""
        return Response(status_code=status.HTTP_200_OK)

    return app
