from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import dbus

from .errors import NoPlayersFound, PlayerUnavailable

logger = logging.getLogger(__name__)

_PLAYER_IFACE = "org.mpris.MediaPlayer2.Player"


@dataclass(frozen=True, slots=True)
class TrackInfo:
    title: str
    artist: str
    album: str
    # stable-ish identifier for "track changed" checks
    track_key: str
    url: str = ""
    track_id: str = ""


def _to_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return ""


def _join_artist(value: Any) -> str:
    if isinstance(value, (list, tuple, dbus.Array)):
        return ", ".join(_to_str(x) for x in value if _to_str(x))
    return _to_str(value)


def track_info_from_metadata(md: dict[str, Any]) -> TrackInfo:
    title = _to_str(md.get("xesam:title", "")) or ""
    artist = _join_artist(md.get("xesam:artist", [])) or ""
    album = _to_str(md.get("xesam:album", "")) or ""
    url = _to_str(md.get("xesam:url", "")) or ""
    track_id = _to_str(md.get("mpris:trackid", "")) or ""
    key = " | ".join(x for x in (artist, title, album, url, track_id) if x)
    return TrackInfo(title=title, artist=artist, album=album, track_key=key, url=url, track_id=track_id)


class MprisClient:
    """Playback clock and track metadata from an MPRIS-compatible player."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self._bus = dbus.SessionBus()
        self._obj = self._bus.get_object(service_name, "/org/mpris/MediaPlayer2")
        self._props = dbus.Interface(self._obj, "org.freedesktop.DBus.Properties")
        self._player = dbus.Interface(self._obj, _PLAYER_IFACE)

    @staticmethod
    def list_players() -> list[str]:
        try:
            bus = dbus.SessionBus()
            return [s for s in bus.list_names() if s.startswith("org.mpris.MediaPlayer2.")]
        except dbus.DBusException as e:
            # No session bus (CI, sandbox, ssh): treat as "no players"
            logger.debug("Unable to connect to D-Bus session bus: %s", e)
            return []

    @staticmethod
    def pick_player(preferred: str | None = None) -> "MprisClient":
        players = MprisClient.list_players()
        if not players:
            raise NoPlayersFound("No active MPRIS players")

        if preferred:
            # allow passing short name like "vlc"
            for s in players:
                if s == preferred or s.endswith("." + preferred):
                    return MprisClient(s)
            logger.warning("Preferred player '%s' not found, falling back", preferred)

        # prefer Playing
        for s in players:
            try:
                c = MprisClient(s)
                if c.playback_status().lower() == "playing":
                    return c
            except (dbus.DBusException, PlayerUnavailable) as e:
                logger.debug("Skipping player %s: %s", s, e)
                continue

        return MprisClient(players[0])

    def playback_status(self) -> str:
        try:
            return _to_str(self._props.Get(_PLAYER_IFACE, "PlaybackStatus"))
        except dbus.DBusException as e:
            raise PlayerUnavailable(str(e)) from e

    def metadata(self) -> dict[str, Any]:
        try:
            md = self._props.Get(_PLAYER_IFACE, "Metadata")
            # dbus.Dictionary acts like dict
            return dict(md)
        except dbus.DBusException as e:
            raise PlayerUnavailable(str(e)) from e

    def position_ms(self) -> int:
        """
        MPRIS Position is microseconds.
        """
        try:
            pos_us = self._props.Get(_PLAYER_IFACE, "Position")
            return int(pos_us) // 1000
        except dbus.DBusException as e:
            raise PlayerUnavailable(str(e)) from e

    def set_position_ms(self, track_id: str, position_ms: int) -> None:
        """
        SetPosition is ignored by players when track_id is not the current track.
        """
        if not track_id:
            raise PlayerUnavailable("Player reports no mpris:trackid, cannot set position")
        try:
            self._player.SetPosition(dbus.ObjectPath(track_id), dbus.Int64(max(0, position_ms) * 1000))
        except dbus.DBusException as e:
            raise PlayerUnavailable(str(e)) from e

    def track_info(self) -> TrackInfo:
        return track_info_from_metadata(self.metadata())
