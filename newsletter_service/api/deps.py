from concurrent.futures import Executor

from fastapi import Depends, Request

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.sqlite_db import (
    SQLiteConnectionPool,
    SQLiteSubscriptionRepo,
    SQLiteSubscriptionStore,
    SQLiteUserRepo,
)
from newsletter_service.components.subscriptions import RegistrarConfig
from newsletter_service.config import Settings
from newsletter_service.ports.email import EmailSenderPort

# Long-lived resources are opened in the app lifespan and parked on app.state;
# the providers below only hand them out.


# --- Settings ---
def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


# --- Storage ---
def get_pool(request: Request) -> SQLiteConnectionPool:
    pool: SQLiteConnectionPool = request.app.state.pool
    return pool


def get_subscription_store(
    pool: SQLiteConnectionPool = Depends(get_pool),
) -> SQLiteSubscriptionStore:
    return SQLiteSubscriptionStore(pool)


def get_subscription_repo(
    pool: SQLiteConnectionPool = Depends(get_pool),
) -> SQLiteSubscriptionRepo:
    return SQLiteSubscriptionRepo(pool)


def get_user_repo(pool: SQLiteConnectionPool = Depends(get_pool)) -> SQLiteUserRepo:
    return SQLiteUserRepo(pool)


# --- Email ---
def get_email_sender(request: Request) -> EmailSenderPort:
    sender: EmailSenderPort = request.app.state.email_sender
    return sender


# --- Auth ---
def get_password_verifier(request: Request) -> Argon2AuthAdapter:
    verifier: Argon2AuthAdapter = request.app.state.password_verifier
    return verifier


def get_hashing_executor(request: Request) -> Executor:
    executor: Executor = request.app.state.hashing_executor
    return executor


# --- Component config ---
def get_registrar_config(settings: Settings = Depends(get_app_settings)) -> RegistrarConfig:
    return RegistrarConfig(base_url=settings.application.base_url.rstrip("/"))
