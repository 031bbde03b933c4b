"""uTorrent WebUI API client."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

import requests

from config import UTorrentConfig
from magnet import MagnetLink

from .cache import TorrentListCache
from .errors import TorrentNotFoundError
from .invoker import AuthenticatedInvoker
from .messages import (
  ClientSettings,
  RequestResult,
  Torrent,
  TorrentFileList,
  TorrentProperties,
  classify_result,
  parse_file_lists,
  parse_properties,
  parse_settings,
  parse_torrent_list,
)
from .request import (
  FILE_INDEX_PARAM,
  PRIORITY_PARAM,
  SETTING_NAME_PARAM,
  SETTING_VALUE_PARAM,
  TORRENT_FILE_PART,
  URL_PARAM,
  Action,
  FilePart,
  Priority,
  QueryParam,
  Request,
)
from .session import SessionManager
from .transport import WebUITransport

LOG = logging.getLogger(__name__)

Hashes = Union[str, Iterable[str]]


class UTorrentClient:
  """Facade over the uTorrent WebUI action API.

  One instance talks to one daemon and owns one session and one torrent
  list cache. Calls block; nothing is locked, so share an instance between
  threads only behind your own lock.
  """

  def __init__(
    self,
    base_url: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    *,
    timeout: float = 10.0,
    poll_delay: float = 1.0,
    poll_retries: int = 5,
    session: Optional[requests.Session] = None,
    transport: Optional[WebUITransport] = None,
    sleep: Callable[[float], None] = time.sleep,
  ) -> None:
    self._transport = transport or WebUITransport(
      base_url,
      username,
      password,
      timeout=timeout,
      session=session,
    )
    self._sessions = SessionManager(self._transport.authenticate)
    self._invoker = AuthenticatedInvoker(self._sessions)
    self._cache = TorrentListCache()
    self._sleep = sleep
    self.poll_delay = poll_delay
    self.poll_retries = poll_retries
    LOG.info("uTorrent WebUI client initialised for %s.", self._transport.server_url)

  @classmethod
  def from_config(cls, config: UTorrentConfig, **kwargs) -> "UTorrentClient":
    return cls(
      config.url,
      config.username,
      config.password,
      timeout=config.timeout,
      poll_delay=config.poll_delay,
      poll_retries=config.poll_retries,
      **kwargs,
    )

  def close(self) -> None:
    self._transport.close()

  def __enter__(self) -> "UTorrentClient":
    return self

  def __exit__(self, *exc_info) -> None:
    self.close()

  # ---------------------------------------------------------------------------
  # Torrent list
  # ---------------------------------------------------------------------------
  def get_all_torrents(self) -> FrozenSet[Torrent]:
    self._refresh_torrents()
    return self._cache.snapshot()

  def get_torrent(self, torrent_hash: str) -> Optional[Torrent]:
    self._refresh_torrents()
    return self._cache.lookup(torrent_hash)

  def wait_for_torrent(
    self,
    torrent_hash: str,
    *,
    delay: Optional[float] = None,
    retries: Optional[int] = None,
  ) -> Torrent:
    """Poll the list until ``torrent_hash`` appears.

    The daemon does not always list a torrent right after ``add-url`` has
    been acknowledged. Makes ``retries + 1`` attempts, sleeping ``delay``
    seconds between attempts but not after the last one.
    """
    delay = self.poll_delay if delay is None else delay
    retries = self.poll_retries if retries is None else retries
    if retries < 0:
      raise ValueError("retries must not be negative.")
    if delay < 0:
      raise ValueError("delay must not be negative.")

    for attempt in range(retries + 1):
      torrent = self.get_torrent(torrent_hash)
      if torrent is not None:
        return torrent
      if attempt < retries:
        LOG.debug("Torrent %s not listed yet; retrying in %.2fs.", torrent_hash, delay)
        self._sleep(delay)

    raise TorrentNotFoundError(torrent_hash, retries + 1)

  # ---------------------------------------------------------------------------
  # Structured reads
  # ---------------------------------------------------------------------------
  def get_torrent_files(self, hashes: Hashes) -> List[TorrentFileList]:
    return parse_file_lists(self._execute(Action.GET_FILES, hashes))

  def get_torrent_file_list(self, torrent_hash: str) -> Optional[TorrentFileList]:
    return next(iter(self.get_torrent_files(torrent_hash)), None)

  def get_torrent_properties(self, hashes: Hashes) -> List[TorrentProperties]:
    return parse_properties(self._execute(Action.GET_PROPERTIES, hashes))

  def get_properties(self, torrent_hash: str) -> Optional[TorrentProperties]:
    return next(iter(self.get_torrent_properties(torrent_hash)), None)

  def get_settings(self) -> ClientSettings:
    return parse_settings(self._execute(Action.GET_SETTINGS))

  # ---------------------------------------------------------------------------
  # Adding torrents
  # ---------------------------------------------------------------------------
  def add_url(self, url: Union[str, MagnetLink]) -> RequestResult:
    """Enqueue a magnet link or ``.torrent`` URL."""
    link = url.decoded if isinstance(url, MagnetLink) else url
    return self._execute_action(Action.ADD_URL, params=[QueryParam(URL_PARAM, link)])

  def add_torrent_file(self, path: Union[str, Path]) -> RequestResult:
    request = Request(
      action=Action.ADD_FILE,
      files=(FilePart(TORRENT_FILE_PART, Path(path)),),
    )
    return classify_result(
      self._invoker.invoke(request, self._transport.post, require_content=False)
    )

  # ---------------------------------------------------------------------------
  # Torrent actions
  # ---------------------------------------------------------------------------
  def start(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.START, hashes)

  def stop(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.STOP, hashes)

  def pause(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.PAUSE, hashes)

  def unpause(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.UNPAUSE, hashes)

  def force_start(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.FORCE_START, hashes)

  def recheck(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.RECHECK, hashes)

  def remove(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.REMOVE, hashes)

  def remove_data(self, hashes: Hashes) -> RequestResult:
    """Remove the torrents and delete their downloaded data."""
    return self._execute_action(Action.REMOVE_DATA, hashes)

  def queue_top(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.QUEUE_TOP, hashes)

  def queue_up(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.QUEUE_UP, hashes)

  def queue_down(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.QUEUE_DOWN, hashes)

  def queue_bottom(self, hashes: Hashes) -> RequestResult:
    return self._execute_action(Action.QUEUE_BOTTOM, hashes)

  def set_file_priority(
    self,
    torrent_hash: str,
    priority: Priority,
    file_indices: Iterable[int],
  ) -> RequestResult:
    params = [QueryParam(PRIORITY_PARAM, str(int(priority)))]
    params.extend(QueryParam(FILE_INDEX_PARAM, str(index)) for index in file_indices)
    return self._execute_action(Action.SET_PRIORITY, torrent_hash, params=params)

  def set_setting(self, name: str, value: object) -> RequestResult:
    return self.set_settings({name: value})

  def set_settings(self, settings: Mapping[str, object]) -> RequestResult:
    params: List[QueryParam] = []
    for name, value in settings.items():
      params.append(QueryParam(SETTING_NAME_PARAM, name))
      params.append(QueryParam(SETTING_VALUE_PARAM, _setting_value(value)))
    return self._execute_action(Action.SET_SETTING, params=params)

  # ---------------------------------------------------------------------------
  # Internal helpers
  # ---------------------------------------------------------------------------
  def _refresh_torrents(self) -> None:
    request = Request(params=tuple(self._cache.build_list_params()))
    payload = self._invoker.invoke(request, self._transport.get)
    self._cache.apply_update(parse_torrent_list(payload))

  def _execute(
    self,
    action: Action,
    hashes: Hashes = (),
    *,
    params: Iterable[QueryParam] = (),
    require_content: bool = True,
  ) -> str:
    request = Request(action=action, hashes=_as_hashes(hashes), params=tuple(params))
    return self._invoker.invoke(request, self._transport.get, require_content=require_content)

  def _execute_action(
    self,
    action: Action,
    hashes: Hashes = (),
    *,
    params: Iterable[QueryParam] = (),
  ) -> RequestResult:
    return classify_result(self._execute(action, hashes, params=params, require_content=False))


def _as_hashes(hashes: Hashes) -> Tuple[str, ...]:
  if isinstance(hashes, str):
    return (hashes,)
  return tuple(hashes)


def _setting_value(value: object) -> str:
  if isinstance(value, bool):
    return "true" if value else "false"
  return str(value)


__all__ = ["UTorrentClient"]
