class NowPlayingError(Exception):
    """Base exception for anything that fails a now-playing request."""


class ConfigError(NowPlayingError):
    """Raised when the Spotify credentials are missing from the environment."""


class TokenError(NowPlayingError):
    """Raised when the refresh token can't be exchanged for an access token."""

    def __init__(self, message, status_code=None, body=None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class UpstreamError(NowPlayingError):
    """Raised when a player endpoint can't be reached or sends back garbage."""

    def __init__(self, message, endpoint=None):
        self.endpoint = endpoint
        super().__init__(message)
