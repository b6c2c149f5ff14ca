"""
Credential validator.

Resolves a username/password pair to an operator id without revealing
whether the username exists: unknown usernames are verified against a
fixed dummy hash so both failure paths cost one Argon2 verification.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor

from pydantic import SecretStr

from newsletter_service.domain.errors import (
    PasswordHashFormatError,
    StorageError,
    UnexpectedError,
)

from .models import (
    INVALID_CREDENTIALS,
    CredentialsOutput,
    GetUsernameInput,
    UsernameOutput,
    ValidateCredentialsInput,
)
from .ports import CredentialStorePort, PasswordVerifierPort, UserDirectoryPort

logger = logging.getLogger(__name__)

# Same Argon2id parameters as real operator hashes (m=15000, t=2, p=1).
DUMMY_PASSWORD_HASH = SecretStr(
    "$argon2id$v=19$m=15000,t=2,p=1$"
    "gZiV/M1gPc22ElAH/Jh1Hw$"
    "CWOrkoo7oJBQ/iyh7uJ0LO2aLEfrHwTWllSAxT0zRno"
)


async def run_validate_credentials(
    inp: ValidateCredentialsInput,
    credential_store: CredentialStorePort,
    verifier: PasswordVerifierPort,
    *,
    executor: Executor | None = None,
) -> CredentialsOutput:
    """
    Validate credentials.

    Args:
        inp: Credentials to check
        credential_store: Operator record lookup
        verifier: Password hash verifier
        executor: Pool the hash verification is dispatched to. None uses
            the event loop's default executor.

    Returns:
        CredentialsOutput with the operator id on success, or the uniform
        "Invalid credentials" error.

    Raises:
        UnexpectedError: storage failure, unparseable stored hash, or the
            verification could not be dispatched.
    """
    credentials = inp.credentials

    try:
        stored = await asyncio.to_thread(credential_store.find_by_username, credentials.username)
    except StorageError as e:
        raise UnexpectedError(
            "get_stored_credentials",
            "Failed to perform the query to retrieve stored credentials",
        ) from e

    user_id = None
    password_hash = DUMMY_PASSWORD_HASH
    if stored is not None:
        user_id = stored.user_id
        password_hash = stored.password_hash

    loop = asyncio.get_running_loop()
    try:
        verification = loop.run_in_executor(
            executor, verifier.verify_password, credentials.password, password_hash
        )
    except RuntimeError as e:
        raise UnexpectedError(
            "dispatch_password_verification", "Failed to dispatch password verification"
        ) from e

    try:
        verified = await verification
    except PasswordHashFormatError as e:
        raise UnexpectedError(
            "verify_password_hash", "Failed to parse hash in PHC string format"
        ) from e

    if user_id is None:
        logger.info("Credential validation failed: unknown username")
        return CredentialsOutput(success=False, error=INVALID_CREDENTIALS)

    if not verified:
        logger.info("Credential validation failed: invalid password")
        return CredentialsOutput(success=False, error=INVALID_CREDENTIALS)

    return CredentialsOutput(user_id=user_id, success=True)


async def run_get_username(
    inp: GetUsernameInput,
    directory: UserDirectoryPort,
) -> UsernameOutput:
    """Resolve a logged-in operator id to its username. Raises UnexpectedError on storage failure."""
    try:
        username = await asyncio.to_thread(directory.get_username, inp.user_id)
    except StorageError as e:
        raise UnexpectedError(
            "get_username", "Failed to perform a query to retrieve the username"
        ) from e
    return UsernameOutput(username=username)


async def run(
    inp: ValidateCredentialsInput,
    *,
    credential_store: CredentialStorePort,
    verifier: PasswordVerifierPort,
    executor: Executor | None = None,
) -> CredentialsOutput:
    if isinstance(inp, ValidateCredentialsInput):
        return await run_validate_credentials(
            inp, credential_store, verifier, executor=executor
        )
    raise ValueError(f"Unknown input type: {type(inp)}")
