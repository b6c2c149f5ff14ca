"""
Auth component - operator credential validation.
"""

from .component import DUMMY_PASSWORD_HASH, run, run_get_username, run_validate_credentials
from .models import (
    INVALID_CREDENTIALS,
    CredentialsOutput,
    GetUsernameInput,
    UsernameOutput,
    ValidateCredentialsInput,
)
from .ports import CredentialStorePort, PasswordVerifierPort, UserDirectoryPort

__all__ = [
    # Entry points
    "run",
    "run_validate_credentials",
    "run_get_username",
    "DUMMY_PASSWORD_HASH",
    # Models
    "CredentialsOutput",
    "ValidateCredentialsInput",
    "GetUsernameInput",
    "UsernameOutput",
    "INVALID_CREDENTIALS",
    # Ports
    "CredentialStorePort",
    "PasswordVerifierPort",
    "UserDirectoryPort",
]
