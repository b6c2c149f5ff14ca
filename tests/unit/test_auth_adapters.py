import pytest
from pydantic import SecretStr

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.components.auth import DUMMY_PASSWORD_HASH
from newsletter_service.domain import PasswordHashFormatError


@pytest.fixture
def auth() -> Argon2AuthAdapter:
    return Argon2AuthAdapter()


def test_hash_verify_success(auth):
    pwd = SecretStr("my-secret-password")
    hashed = auth.hash_password(pwd)

    assert hashed != pwd.get_secret_value()
    assert hashed.startswith("$argon2id$v=19$m=15000,t=2,p=1$")
    assert auth.verify_password(pwd, SecretStr(hashed)) is True


def test_verify_fail(auth):
    hashed = auth.hash_password(SecretStr("password"))

    assert auth.verify_password(SecretStr("wrong"), SecretStr(hashed)) is False


def test_hashes_are_salted(auth):
    pwd = SecretStr("password")
    assert auth.hash_password(pwd) != auth.hash_password(pwd)


def test_dummy_hash_parses_and_rejects(auth):
    assert auth.verify_password(SecretStr("anything"), DUMMY_PASSWORD_HASH) is False


def test_unparseable_hash_raises(auth):
    with pytest.raises(PasswordHashFormatError):
        auth.verify_password(SecretStr("password"), SecretStr("not-a-phc-string"))
