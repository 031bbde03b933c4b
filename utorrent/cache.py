"""Local mirror of the daemon's torrent list, kept current through cache-id deltas."""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional

from .messages import Torrent, TorrentListUpdate
from .request import CACHE_ID_PARAM, LIST_PARAM, QueryParam


class TorrentListCache:
  """Torrents keyed by hash, plus the cache id the daemon last issued.

  ``apply_update`` is the only mutator. Nothing here is locked; callers that
  share a client between threads must serialise access themselves.
  """

  def __init__(self) -> None:
    self._cache_id: Optional[str] = None
    self._torrents: Dict[str, Torrent] = {}

  @property
  def cache_id(self) -> Optional[str]:
    return self._cache_id

  def build_list_params(self) -> List[QueryParam]:
    params = [QueryParam(LIST_PARAM, "1")]
    if self._cache_id is not None:
      params.append(QueryParam(CACHE_ID_PARAM, self._cache_id))
    return params

  def apply_update(self, update: TorrentListUpdate) -> None:
    if update.full:
      self._torrents.clear()

    for torrent in update.torrents:
      # Rows are authoritative: no field survives from the previous value.
      self._torrents[_key(torrent.hash)] = torrent

    for torrent_hash in update.removed:
      self._torrents.pop(_key(torrent_hash), None)

    if update.cache_id is not None:
      self._cache_id = update.cache_id

  def snapshot(self) -> FrozenSet[Torrent]:
    return frozenset(self._torrents.values())

  def lookup(self, torrent_hash: str) -> Optional[Torrent]:
    return self._torrents.get(_key(torrent_hash))

  def __len__(self) -> int:
    return len(self._torrents)

  def __contains__(self, torrent_hash: object) -> bool:
    return isinstance(torrent_hash, str) and _key(torrent_hash) in self._torrents


def _key(torrent_hash: str) -> str:
  return torrent_hash.upper()


__all__ = ["TorrentListCache"]
