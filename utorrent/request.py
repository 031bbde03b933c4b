"""Request descriptors for the uTorrent WebUI action API."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

ACTION_PARAM = "action"
TOKEN_PARAM = "token"
HASH_PARAM = "hash"
URL_PARAM = "s"
SETTING_NAME_PARAM = "s"
SETTING_VALUE_PARAM = "v"
LIST_PARAM = "list"
CACHE_ID_PARAM = "cid"
FILE_INDEX_PARAM = "f"
PRIORITY_PARAM = "p"
TORRENT_FILE_PART = "torrent_file"
COOKIE_HEADER = "Cookie"
BITTORRENT_CONTENT_TYPE = "application/x-bittorrent"


class Action(str, enum.Enum):
  """Action names understood by the daemon's ``?action=`` parameter."""

  START = "start"
  STOP = "stop"
  PAUSE = "pause"
  FORCE_START = "forcestart"
  UNPAUSE = "unpause"
  RECHECK = "recheck"
  REMOVE = "remove"
  REMOVE_DATA = "removedata"
  SET_PRIORITY = "setprio"
  GET_PROPERTIES = "getprops"
  ADD_URL = "add-url"
  GET_FILES = "getfiles"
  GET_SETTINGS = "getsettings"
  SET_SETTING = "setsetting"
  ADD_FILE = "add-file"
  QUEUE_BOTTOM = "queuebottom"
  QUEUE_DOWN = "queuedown"
  QUEUE_TOP = "queuetop"
  QUEUE_UP = "queueup"


class Priority(enum.IntEnum):
  DO_NOT_DOWNLOAD = 0
  LOW = 1
  NORMAL = 2
  HIGH = 3


@dataclass(frozen=True)
class QueryParam:
  name: str
  value: str


@dataclass(frozen=True)
class FilePart:
  name: str
  path: Path
  content_type: str = BITTORRENT_CONTENT_TYPE


@dataclass(frozen=True)
class Request:
  """One logical call against the daemon, built per call and then discarded."""

  action: Optional[Action] = None
  hashes: Tuple[str, ...] = ()
  params: Tuple[QueryParam, ...] = ()
  headers: Dict[str, str] = field(default_factory=dict)
  files: Tuple[FilePart, ...] = ()

  def query_params(self) -> List[Tuple[str, str]]:
    """Flatten the descriptor into ordered ``(name, value)`` pairs.

    Names may repeat (one ``hash`` per torrent, one ``f`` per file index),
    so a list of pairs is returned rather than a mapping.
    """
    pairs: List[Tuple[str, str]] = []
    if self.action is not None:
      pairs.append((ACTION_PARAM, self.action.value))
    pairs.extend((param.name, param.value) for param in self.params)
    pairs.extend((HASH_PARAM, torrent_hash) for torrent_hash in self.hashes)
    return pairs

  def with_credentials(self, token: str, cookie: str) -> "Request":
    headers = dict(self.headers)
    headers[COOKIE_HEADER] = cookie
    return replace(
      self,
      params=self.params + (QueryParam(TOKEN_PARAM, token),),
      headers=headers,
    )


__all__ = [
  "Action",
  "FilePart",
  "Priority",
  "QueryParam",
  "Request",
]
