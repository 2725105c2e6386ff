"""
Spotify calls behind the now-playing endpoint.

The pipeline is one straight line per request:
refresh token -> access token -> currently playing -> (if idle) recently played.
Nothing is cached between invocations.
"""

import base64
import json
import traceback
from dataclasses import dataclass
from typing import Optional

import requests

from api._config import Credentials, load_credentials
from api._errors import NowPlayingError, TokenError, UpstreamError

TOKEN_ENDPOINT = "https://accounts.spotify.com/api/token"
NOW_PLAYING_ENDPOINT = "https://api.spotify.com/v1/me/player/currently-playing"
RECENTLY_PLAYED_ENDPOINT = "https://api.spotify.com/v1/me/player/recently-played"

# seconds, applied to every outbound call
REQUEST_TIMEOUT = 5

CACHE_CONTROL = "public, s-maxage=10, stale-while-revalidate=5"

STATUS_PLAYING = "playing"
STATUS_LAST_PLAYED = "last_played"
STATUS_OFFLINE = "offline"
STATUS_ERROR = "error"


@dataclass
class TrackInfo:
    status: str
    is_playing: bool = False
    track_name: Optional[str] = None
    artist_name: Optional[str] = None
    album_art_url: Optional[str] = None
    song_url: Optional[str] = None
    progress_ms: Optional[int] = None
    duration_ms: Optional[int] = None

    def to_json(self):
        if self.status == STATUS_OFFLINE:
            return {"status": self.status, "isPlaying": False}

        data = {
            "status": self.status,
            "isPlaying": self.is_playing,
            "trackName": self.track_name,
            "artistName": self.artist_name,
            "songUrl": self.song_url,
            "progressMs": self.progress_ms,
            "durationMs": self.duration_ms,
        }
        if self.album_art_url:
            data["albumArtUrl"] = self.album_art_url
        return data

    @classmethod
    def offline(cls):
        return cls(status=STATUS_OFFLINE, is_playing=False)

    @classmethod
    def from_track(cls, track, status, is_playing, progress_ms):
        names = [(artist or {}).get("name") for artist in track.get("artists") or []]
        artists = [name for name in names if name]
        images = (track.get("album") or {}).get("images") or []
        return cls(
            status=status,
            is_playing=is_playing,
            track_name=track.get("name"),
            artist_name=", ".join(artists),
            album_art_url=images[0].get("url") if images else None,
            song_url=(track.get("external_urls") or {}).get("spotify"),
            progress_ms=progress_ms,
            duration_ms=track.get("duration_ms"),
        )


def error_payload(message):
    return {"status": STATUS_ERROR, "isPlaying": False, "error": message}


def _basic_auth(credentials: Credentials) -> str:
    raw = f"{credentials.client_id}:{credentials.client_secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _bearer(access_token):
    return {"Authorization": f"Bearer {access_token}"}


def exchange_refresh_token(credentials: Credentials, session=None) -> str:
    """Trade the long-lived refresh token for a short-lived access token."""
    http = session or requests
    print("--- [LOG] Getting access token...")

    try:
        response = http.post(
            TOKEN_ENDPOINT,
            data={
                "grant_type": "refresh_token",
                "refresh_token": credentials.refresh_token,
            },
            headers={
                "Authorization": f"Basic {_basic_auth(credentials)}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise TokenError(f"Spotify token API unreachable: {e}") from e

    try:
        data = response.json()
        body = json.dumps(data)
    except ValueError:
        data = None
        body = response.text

    if not response.ok:
        print(f"--- [ERROR] Failed to get access token: {response.status_code}")
        raise TokenError(
            f"Spotify token API returned {response.status_code}: {body}",
            status_code=response.status_code,
            body=body,
        )

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token:
        raise TokenError("Could not get access token", status_code=response.status_code, body=body)

    print("--- [LOG] Access token received.")
    return access_token


def fetch_currently_playing(access_token, session=None) -> Optional[TrackInfo]:
    """Return a "playing" TrackInfo, or None when nothing is actively playing."""
    http = session or requests

    try:
        response = http.get(NOW_PLAYING_ENDPOINT, headers=_bearer(access_token), timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise UpstreamError(f"Spotify currently-playing API unreachable: {e}", NOW_PLAYING_ENDPOINT) from e

    print(f"--- [LOG] Currently playing status: {response.status_code}")

    # 204 / 404 / anything else just means "go check history"
    if response.status_code != 200:
        return None

    try:
        song = response.json()
    except ValueError:
        return None

    if not isinstance(song, dict):
        return None

    item = song.get("item")
    if song.get("is_playing") and item and item.get("type") == "track":
        print("--- [LOG] Found actively playing track.")
        return TrackInfo.from_track(
            item,
            status=STATUS_PLAYING,
            is_playing=True,
            progress_ms=song.get("progress_ms"),
        )
    return None


def fetch_recently_played(access_token, session=None) -> TrackInfo:
    """Most recent track from history as "last_played", otherwise offline."""
    http = session or requests

    try:
        response = http.get(
            RECENTLY_PLAYED_ENDPOINT,
            headers=_bearer(access_token),
            params={"limit": 1},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"Spotify recently-played API unreachable: {e}", RECENTLY_PLAYED_ENDPOINT) from e

    print(f"--- [LOG] Recently played status: {response.status_code}")

    if not response.ok:
        print(f"--- [ERROR] Spotify recently-played API returned {response.status_code}")
        return TrackInfo.offline()

    try:
        recent = response.json()
    except ValueError as e:
        raise UpstreamError("Spotify recently-played API returned invalid JSON", RECENTLY_PLAYED_ENDPOINT) from e

    items = recent.get("items") if isinstance(recent, dict) else None
    last_track = (items[0] or {}).get("track") if items else None

    if last_track:
        print("--- [LOG] Found last played track.")
        return TrackInfo.from_track(last_track, status=STATUS_LAST_PLAYED, is_playing=False, progress_ms=0)

    print("--- [LOG] No recently played track found.")
    return TrackInfo.offline()


def get_now_playing(credentials: Optional[Credentials] = None, session=None) -> TrackInfo:
    """Run the whole pipeline. Token and transport failures propagate."""
    if credentials is None:
        credentials = load_credentials()

    access_token = exchange_refresh_token(credentials, session=session)

    track = fetch_currently_playing(access_token, session=session)
    if track is not None:
        return track

    print("--- [LOG] Nothing playing, checking recently played.")
    return fetch_recently_played(access_token, session=session)


def now_playing_response(credentials: Optional[Credentials] = None, session=None):
    """
    Run the pipeline and shape the HTTP answer.
    Returns (payload, status_code, headers); any failure becomes a 500 payload.
    """
    try:
        track = get_now_playing(credentials, session=session)
    except NowPlayingError as e:
        print(f"--- [ERROR] Now-playing request failed: {e}")
        return error_payload(str(e)), 500, {"Content-Type": "application/json"}
    except Exception as e:
        print(f"--- [FATAL ERROR] Error in now-playing handler: {e}")
        traceback.print_exc()
        message = str(e) or "Unknown error"
        return error_payload(message), 500, {"Content-Type": "application/json"}

    headers = {
        "Content-Type": "application/json",
        "Cache-Control": CACHE_CONTROL,
    }
    return track.to_json(), 200, headers
