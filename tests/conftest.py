# tests/conftest.py
import pytest
import requests

from api._config import Credentials
from api._spotify import NOW_PLAYING_ENDPOINT, RECENTLY_PLAYED_ENDPOINT, TOKEN_ENDPOINT

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=_NO_JSON, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Serves canned responses per endpoint and records every call."""

    def __init__(self, token=None, now_playing=None, recent=None):
        self.responses = {
            TOKEN_ENDPOINT: token if token is not None else FakeResponse(200, {"access_token": "access-123"}),
            NOW_PLAYING_ENDPOINT: now_playing if now_playing is not None else FakeResponse(204),
            RECENTLY_PLAYED_ENDPOINT: recent if recent is not None else FakeResponse(200, {"items": []}),
        }
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._answer("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def urls(self):
        return [url for _, url, _ in self.calls]


def make_track(name="Song", artists=("Artist A",), images=("https://img/large.jpg",), duration_ms=200000):
    return {
        "type": "track",
        "name": name,
        "artists": [{"name": a} for a in artists],
        "album": {"images": [{"url": u} for u in images]},
        "external_urls": {"spotify": "https://open.spotify.com/track/abc"},
        "duration_ms": duration_ms,
    }


def playing_response(track=None, is_playing=True, progress_ms=42000):
    return FakeResponse(200, {
        "is_playing": is_playing,
        "progress_ms": progress_ms,
        "item": track if track is not None else make_track(),
    })


def recent_response(*tracks):
    return FakeResponse(200, {"items": [{"track": t} for t in tracks]})


@pytest.fixture
def credentials():
    return Credentials(client_id="client", client_secret="secret", refresh_token="refresh")


@pytest.fixture
def spotify_env(monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "client")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "refresh")


@pytest.fixture
def fake_spotify(monkeypatch):
    """Route module-level requests.get/post through a FakeSession."""

    def install(session):
        monkeypatch.setattr(requests, "post", session.post)
        monkeypatch.setattr(requests, "get", session.get)
        return session

    return install
