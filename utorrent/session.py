"""Ownership of the token/cookie pair issued by the daemon."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import AuthenticationUnavailable, UTorrentError

LOG = logging.getLogger(__name__)


class SessionStatus(enum.Enum):
  VALID = "valid"
  EXPIRED = "expired"
  UNKNOWN = "unknown"


@dataclass
class Session:
  """Token and ``GUID`` cookie proving the client is logged in."""

  token: str
  cookie: str
  status: SessionStatus = SessionStatus.VALID

  def __repr__(self) -> str:
    return f"Session(token={_mask(self.token)!r}, cookie={_mask(self.cookie)!r}, status={self.status.value})"


def _mask(value: str) -> str:
  return f"{value[:4]}..." if len(value) > 4 else "***"


class SessionManager:
  """Hands out the cached session, performing the handshake only when needed.

  There is no retry loop here: a failed handshake surfaces immediately as
  :class:`AuthenticationUnavailable`, and retrying after a rejected token is
  the invoker's job.
  """

  def __init__(self, authenticate: Callable[[], Session]) -> None:
    self._authenticate = authenticate
    self._session: Optional[Session] = None

  @property
  def session(self) -> Optional[Session]:
    return self._session

  def current(self) -> Session:
    if self._session is not None and self._session.status is SessionStatus.VALID:
      return self._session

    try:
      session = self._authenticate()
    except AuthenticationUnavailable:
      raise
    except UTorrentError as exc:
      raise AuthenticationUnavailable(f"uTorrent token handshake failed: {exc}") from exc

    if session.status is not SessionStatus.VALID:
      raise AuthenticationUnavailable(
        f"uTorrent handshake returned an unusable session ({session.status.value})."
      )

    self._session = session
    LOG.debug("Obtained uTorrent session %r.", session)
    return session

  def invalidate(self) -> None:
    if self._session is not None:
      self._session.status = SessionStatus.EXPIRED
    self._session = None


__all__ = ["Session", "SessionManager", "SessionStatus"]
