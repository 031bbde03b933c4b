"""Decoding of the daemon's JSON payloads into plain records."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import InvalidServerResponse
from .request import Priority

SUCCESS_MARKER = "build"

_ROW_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)


class RequestResult(enum.Enum):
  SUCCESS = "success"
  FAIL = "fail"


def classify_result(text: Optional[str]) -> RequestResult:
  """The daemon echoes its build number on success; nothing else is reliable."""
  if text is not None and SUCCESS_MARKER in text:
    return RequestResult.SUCCESS
  return RequestResult.FAIL


class TorrentStatus(enum.IntFlag):
  STARTED = 1
  CHECKING = 2
  START_AFTER_CHECK = 4
  CHECKED = 8
  ERROR = 16
  PAUSED = 32
  QUEUED = 64
  LOADED = 128


@dataclass(frozen=True)
class Torrent:
  """One row of the torrent list. Only ``hash`` matters to the cache."""

  hash: str
  status: TorrentStatus = TorrentStatus(0)
  name: str = ""
  size: int = 0
  progress: int = 0
  downloaded: int = 0
  uploaded: int = 0
  ratio: int = 0
  upload_speed: int = 0
  download_speed: int = 0
  eta: int = 0
  label: str = ""
  peers_connected: int = 0
  peers_in_swarm: int = 0
  seeds_connected: int = 0
  seeds_in_swarm: int = 0
  availability: int = 0
  queue_order: int = 0
  remaining: int = 0
  status_message: Optional[str] = None
  added_on: Optional[int] = None
  completed_on: Optional[int] = None
  save_path: Optional[str] = None

  @property
  def percent_done(self) -> float:
    return self.progress / 10.0

  @property
  def is_complete(self) -> bool:
    return self.progress >= 1000

  @classmethod
  def from_row(cls, row: Sequence[Any]) -> "Torrent":
    if not isinstance(row, list) or not row or not isinstance(row[0], str):
      raise InvalidServerResponse(f"Torrent row without a hash: {row!r}")

    def at(index: int, default: Any = None) -> Any:
      return row[index] if len(row) > index else default

    try:
      return cls(
        hash=row[0].upper(),
        status=TorrentStatus(int(at(1, 0))),
        name=at(2, ""),
        size=int(at(3, 0)),
        progress=int(at(4, 0)),
        downloaded=int(at(5, 0)),
        uploaded=int(at(6, 0)),
        ratio=int(at(7, 0)),
        upload_speed=int(at(8, 0)),
        download_speed=int(at(9, 0)),
        eta=int(at(10, 0)),
        label=at(11, ""),
        peers_connected=int(at(12, 0)),
        peers_in_swarm=int(at(13, 0)),
        seeds_connected=int(at(14, 0)),
        seeds_in_swarm=int(at(15, 0)),
        availability=int(at(16, 0)),
        queue_order=int(at(17, 0)),
        remaining=int(at(18, 0)),
        status_message=at(21),
        added_on=at(23),
        completed_on=at(24),
        save_path=at(26),
      )
    except _ROW_ERRORS as exc:
      raise InvalidServerResponse(f"Malformed torrent row: {row!r}") from exc


@dataclass(frozen=True)
class TorrentListUpdate:
  """Decoded ``list=1`` payload.

  ``full`` marks a complete snapshot (sent when no usable cache id was
  echoed); otherwise ``torrents`` holds only changed rows.
  """

  torrents: Tuple[Torrent, ...] = ()
  removed: Tuple[str, ...] = ()
  cache_id: Optional[str] = None
  full: bool = False


@dataclass(frozen=True)
class TorrentFile:
  name: str
  size: int
  downloaded: int
  priority: Priority

  @property
  def is_complete(self) -> bool:
    return self.size > 0 and self.downloaded >= self.size


@dataclass(frozen=True)
class TorrentFileList:
  hash: str
  files: Tuple[TorrentFile, ...] = ()


@dataclass(frozen=True)
class TorrentProperties:
  hash: str
  trackers: Tuple[str, ...] = ()
  upload_rate: int = 0
  download_rate: int = 0
  superseed: int = 0
  dht: int = 0
  pex: int = 0
  seed_override: int = 0
  seed_ratio: int = 0
  seed_time: int = 0
  upload_slots: int = 0


class SettingType(enum.IntEnum):
  INTEGER = 0
  BOOLEAN = 1
  STRING = 2


@dataclass(frozen=True)
class Setting:
  name: str
  type: Optional[SettingType]
  value: str

  @property
  def typed_value(self) -> Any:
    if self.type is SettingType.INTEGER:
      return int(self.value)
    if self.type is SettingType.BOOLEAN:
      return str(self.value).lower() == "true"
    return self.value


@dataclass
class ClientSettings:
  settings: Dict[str, Setting] = field(default_factory=dict)

  def add(self, name: str, type_code: int, value: Any) -> None:
    try:
      setting_type: Optional[SettingType] = SettingType(type_code)
    except ValueError:
      setting_type = None
    self.settings[name] = Setting(name=name, type=setting_type, value=str(value))

  def get(self, name: str) -> Optional[Setting]:
    return self.settings.get(name)

  def __contains__(self, name: object) -> bool:
    return name in self.settings

  def __len__(self) -> int:
    return len(self.settings)


# -----------------------------------------------------------------------------
# Parsers
# -----------------------------------------------------------------------------
def parse_torrent_list(text: str) -> TorrentListUpdate:
  payload = _load(text)
  full = "torrents" in payload
  rows = payload.get("torrents") if full else payload.get("torrentp", [])
  removed = payload.get("torrentm", [])
  cache_id = payload.get("torrentc")
  if not isinstance(rows, list) or not isinstance(removed, list):
    raise InvalidServerResponse("Torrent list payload has an unexpected shape.")
  return TorrentListUpdate(
    torrents=tuple(Torrent.from_row(row) for row in rows),
    removed=tuple(str(torrent_hash).upper() for torrent_hash in removed),
    cache_id=str(cache_id) if cache_id not in (None, "") else None,
    full=full,
  )


def parse_file_lists(text: str) -> List[TorrentFileList]:
  """Decode ``files``, which alternates hash and rows: ``[h1, [...], h2, [...]]``."""
  flat = _load(text).get("files", [])
  if not isinstance(flat, list) or len(flat) % 2:
    raise InvalidServerResponse("File list payload has an unexpected shape.")

  result: List[TorrentFileList] = []
  for torrent_hash, rows in zip(flat[0::2], flat[1::2]):
    if not isinstance(rows, list):
      raise InvalidServerResponse(f"File rows for {torrent_hash!r} are not a list.")
    files = tuple(_file_from_row(row) for row in rows)
    result.append(TorrentFileList(hash=str(torrent_hash).upper(), files=files))
  return result


def _file_from_row(row: Sequence[Any]) -> TorrentFile:
  try:
    return TorrentFile(
      name=row[0],
      size=int(row[1]),
      downloaded=int(row[2]),
      priority=Priority(int(row[3])),
    )
  except _ROW_ERRORS as exc:
    raise InvalidServerResponse(f"Malformed file row: {row!r}") from exc


def parse_properties(text: str) -> List[TorrentProperties]:
  entries = _load(text).get("props", [])
  if not isinstance(entries, list):
    raise InvalidServerResponse("Properties payload has an unexpected shape.")
  return [_properties_from_entry(entry) for entry in entries]


def _properties_from_entry(entry: Dict[str, Any]) -> TorrentProperties:
  try:
    return TorrentProperties(
      hash=str(entry.get("hash", "")).upper(),
      trackers=tuple(line for line in str(entry.get("trackers", "")).splitlines() if line.strip()),
      upload_rate=int(entry.get("ulrate", 0)),
      download_rate=int(entry.get("dlrate", 0)),
      superseed=int(entry.get("superseed", 0)),
      dht=int(entry.get("dht", 0)),
      pex=int(entry.get("pex", 0)),
      seed_override=int(entry.get("seed_override", 0)),
      seed_ratio=int(entry.get("seed_ratio", 0)),
      seed_time=int(entry.get("seed_time", 0)),
      upload_slots=int(entry.get("ulslots", 0)),
    )
  except _ROW_ERRORS as exc:
    raise InvalidServerResponse(f"Malformed properties entry: {entry!r}") from exc


def parse_settings(text: str) -> ClientSettings:
  rows = _load(text).get("settings", [])
  if not isinstance(rows, list):
    raise InvalidServerResponse("Settings payload has an unexpected shape.")
  settings = ClientSettings()
  for row in rows:
    if not isinstance(row, list) or len(row) < 3:
      raise InvalidServerResponse(f"Malformed setting row: {row!r}")
    try:
      settings.add(str(row[0]), int(row[1]), row[2])
    except _ROW_ERRORS as exc:
      raise InvalidServerResponse(f"Malformed setting row: {row!r}") from exc
  return settings


def _load(text: str) -> Dict[str, Any]:
  try:
    payload = json.loads(text)
  except ValueError as exc:
    raise InvalidServerResponse(f"Invalid JSON from uTorrent: {exc}") from exc
  if not isinstance(payload, dict):
    raise InvalidServerResponse("Expected a JSON object from uTorrent.")
  return payload


__all__ = [
  "ClientSettings",
  "RequestResult",
  "Setting",
  "SettingType",
  "Torrent",
  "TorrentFile",
  "TorrentFileList",
  "TorrentListUpdate",
  "TorrentProperties",
  "TorrentStatus",
  "classify_result",
  "parse_file_lists",
  "parse_properties",
  "parse_settings",
  "parse_torrent_list",
]
