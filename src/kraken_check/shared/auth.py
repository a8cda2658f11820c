"""Authentication utilities for kraken-check.

Private endpoints take a form-encoded body with a nonce (and an optional
two-factor one-time password), signed with the account's API secret:

    API-Sign = base64(HMAC-SHA512(base64decode(secret),
                                  url_path + SHA256(nonce + post_data)))

Credentials are resolved once and passed explicitly to whatever needs
them; nothing here keeps them in module state.
"""

import base64
import binascii
import hashlib
import hmac
import os
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlencode

import pyotp

from ..errors import ConfigError

# Environment variable names used by the exchange's own tooling
ENV_API_KEY = "API_Public_Key"
ENV_API_SECRET = "API_Private_Key"
ENV_OTP = "OTP"
ENV_OTP_SETUP_KEY = "OTP_Setup_Key"


@dataclass(frozen=True)
class Credentials:
    """API key material for private endpoints."""

    api_key: str
    api_secret: str = field(repr=False)
    otp: str | None = field(default=None, repr=False)
    otp_setup_key: str | None = field(default=None, repr=False)

    def one_time_password(self) -> str | None:
        """Return the OTP to send, generating it from the setup key if needed."""
        if self.otp_setup_key:
            return otp_token(self.otp_setup_key)
        return self.otp


def load_credentials(
    api_key: str | None = None,
    api_secret: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Credentials | None:
    """Resolve credentials from: explicit args > environment.

    Args:
        api_key: API key passed via CLI argument
        api_secret: API secret passed via CLI argument
        env: Environment mapping (defaults to os.environ)

    Returns:
        Credentials if both key and secret are found, None otherwise
    """
    env = os.environ if env is None else env

    key = api_key or env.get(ENV_API_KEY)
    secret = api_secret or env.get(ENV_API_SECRET)
    if not key or not secret:
        return None

    return Credentials(
        api_key=key,
        api_secret=secret,
        otp=env.get(ENV_OTP) or None,
        otp_setup_key=env.get(ENV_OTP_SETUP_KEY) or None,
    )


class NonceSource:
    """Millisecond nonces, strictly increasing within the process."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            nonce = max(int(time.time() * 1000), self._last + 1)
            self._last = nonce
            return nonce


def otp_token(setup_key: str) -> str:
    """Current 6-digit TOTP (SHA1, 30s step) for a base32 setup key."""
    try:
        return pyotp.TOTP(setup_key.replace(" ", "").upper()).now()
    except (binascii.Error, ValueError) as e:
        raise ConfigError(f"Invalid OTP setup key: {e}") from e


def sign(url_path: str, post_data: str, nonce: int | str, secret: str) -> str:
    """Compute the API-Sign header value.

    Args:
        url_path: Request path (e.g. /0/private/OpenOrders)
        post_data: Form-encoded body exactly as it will be sent
        nonce: Nonce contained in post_data
        secret: Base64-encoded API secret

    Returns:
        Base64-encoded HMAC-SHA512 signature

    Raises:
        ConfigError: If the secret is not valid base64
    """
    try:
        key = base64.b64decode(secret, validate=True)
    except binascii.Error as e:
        raise ConfigError("API secret is not valid base64") from e

    sha256_digest = hashlib.sha256(f"{nonce}{post_data}".encode()).digest()
    mac = hmac.new(key, url_path.encode() + sha256_digest, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode()


def signed_form(
    credentials: Credentials,
    url_path: str,
    nonce: int,
) -> tuple[str, dict[str, str]]:
    """Build the signed body and headers for a private request.

    Returns:
        (post_data, headers) where post_data is the form-encoded body
    """
    form: dict[str, str] = {"nonce": str(nonce)}
    otp = credentials.one_time_password()
    if otp:
        form["otp"] = otp
    post_data = urlencode(form)

    headers = {
        "API-Key": credentials.api_key,
        "API-Sign": sign(url_path, post_data, nonce, credentials.api_secret),
        "Content-Type": "application/x-www-form-urlencoded",
    }
    return post_data, headers
