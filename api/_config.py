import os
from dataclasses import dataclass

from dotenv import load_dotenv

from api._errors import ConfigError

# --- Load environment variables from .env (no-op in production) ---
load_dotenv()

CLIENT_ID_VAR = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_VAR = "SPOTIFY_CLIENT_SECRET"
REFRESH_TOKEN_VAR = "SPOTIFY_REFRESH_TOKEN"


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str
    refresh_token: str


def missing_credentials(environ=None):
    """Names of the required variables that are unset or empty."""
    environ = os.environ if environ is None else environ
    return [
        name
        for name in (CLIENT_ID_VAR, CLIENT_SECRET_VAR, REFRESH_TOKEN_VAR)
        if not environ.get(name)
    ]


def load_credentials(environ=None) -> Credentials:
    environ = os.environ if environ is None else environ
    missing = missing_credentials(environ)
    if missing:
        raise ConfigError(f"Missing Spotify configuration: {', '.join(missing)}")

    return Credentials(
        client_id=environ[CLIENT_ID_VAR],
        client_secret=environ[CLIENT_SECRET_VAR],
        refresh_token=environ[REFRESH_TOKEN_VAR],
    )
