"""OAuth sign-in with PKCE: building the login URL and exchanging the code."""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from urllib.parse import parse_qs, urlencode, urlsplit

import requests

VERIFIER_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-._~"
VERIFIER_LENGTH = 32

LOGIN_URL = "https://app-api.pixiv.net/web/v1/login"
TOKEN_URL = "https://oauth.secure.pixiv.net/auth/token"
CALLBACK_URL = "https://app-api.pixiv.net/web/v1/users/auth/pixiv/callback"
USER_AGENT = "PixivAndroidApp/5.0.234 (Android 11; Pixel 5)"


def generate_code_verifier(length: int = VERIFIER_LENGTH) -> str:
    """Return a random PKCE code verifier of ``length`` unreserved characters."""
    if length < 0:
        raise ValueError(f"verifier length must not be negative: {length}")
    return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))


def code_challenge(verifier: str) -> str:
    """Return the S256 challenge for a verifier: unpadded base64url of its SHA-256."""
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def extract_callback_code(url: str) -> str | None:
    """Return the authorization code carried by a callback URL, or None for other URLs."""
    if not url.startswith(CALLBACK_URL):
        return None
    values = parse_qs(urlsplit(url).query).get("code")
    return values[0] if values else ""


class LoginProcessor:
    """Drives one sign-in: produces the login URL, then trades the code for tokens."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session if session is not None else requests.Session()
        self.code_verifier = ""

    def begin(self) -> str:
        """Start a sign-in with a fresh verifier and return the URL to open."""
        self.code_verifier = generate_code_verifier()
        query = urlencode(
            {
                "code_challenge": code_challenge(self.code_verifier),
                "code_challenge_method": "S256",
                "client": "pixiv-android",
            }
        )
        return f"{LOGIN_URL}?{query}"

    def finish(self, code: str) -> str:
        """Exchange an authorization code for tokens; return the raw response body."""
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "code_verifier": self.code_verifier,
            "grant_type": "authorization_code",
            "include_policy": "true",
            "redirect_uri": CALLBACK_URL,
        }
        headers = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/x-www-form-urlencoded",
        }
        response = self.session.post(TOKEN_URL, data=urlencode(form), headers=headers)
        return response.text