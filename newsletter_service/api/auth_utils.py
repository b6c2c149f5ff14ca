import base64
import binascii
from collections.abc import Mapping

from pydantic import SecretStr

from newsletter_service.domain.entities import Credentials

BASIC_SCHEME = "Basic "
PUBLISH_REALM = 'Basic realm="publish_newsletter"'


class AuthError(Exception):
    """The Authorization header is missing or unusable."""

    pass


def parse_basic_credentials(headers: Mapping[str, str]) -> Credentials:
    """
    Decode `Authorization: Basic <base64(username:password)>`.

    Raises:
        AuthError: header missing, wrong scheme, invalid base64 or UTF-8,
            or no ':' between username and password.
    """
    header_value = headers.get("authorization")
    if header_value is None:
        raise AuthError("The 'Authorization' header was missing")

    if not header_value.startswith(BASIC_SCHEME):
        raise AuthError("The authorization scheme was not 'Basic'")
    encoded = header_value[len(BASIC_SCHEME) :]

    try:
        decoded_bytes = base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise AuthError("Failed to base64-decode 'Basic' credentials") from e

    try:
        decoded = decoded_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise AuthError("The decoded credential string is not valid UTF-8") from e

    username, separator, password = decoded.partition(":")
    if not separator:
        raise AuthError("A username and a password must be provided in 'Basic' auth")

    return Credentials(username=username, password=SecretStr(password))
