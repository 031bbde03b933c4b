"""Error hierarchy for the uTorrent WebUI client."""

from __future__ import annotations

from typing import Dict, Optional, Type


class UTorrentError(RuntimeError):
  """Base error for uTorrent communication problems."""


class TorrentServerUnavailable(UTorrentError):
  """Raised when the uTorrent daemon cannot be reached."""


class ClientRequestError(UTorrentError):
  """Raised when the daemon answers with a status code of 300 or above."""

  def __init__(self, status_code: int, reason: str = "") -> None:
    self.status_code = status_code
    self.reason = reason
    super().__init__(f"uTorrent returned {status_code}: {reason}".rstrip(": "))


class BadRequestError(ClientRequestError):
  """400. The daemon uses this to reject a stale or invalid token."""


class UnauthorizedError(ClientRequestError):
  """401."""


class ForbiddenError(ClientRequestError):
  """403."""


class NotFoundError(ClientRequestError):
  """404."""


class NotAcceptableError(ClientRequestError):
  """406."""


class AuthenticationUnavailable(UTorrentError):
  """Raised when the token handshake itself cannot be completed."""


class AuthenticationError(UTorrentError):
  """Raised when the daemon keeps rejecting freshly issued credentials."""


class InvalidServerResponse(UTorrentError):
  """Raised when a successful response carries no usable content."""


class TorrentNotFoundError(UTorrentError):
  """Raised when a polled torrent does not show up within the retry budget."""

  def __init__(self, torrent_hash: str, attempts: int) -> None:
    self.torrent_hash = torrent_hash
    self.attempts = attempts
    super().__init__(
      f"Torrent {torrent_hash} not found after {attempts} attempt(s)."
    )


_STATUS_ERRORS: Dict[int, Type[ClientRequestError]] = {
  400: BadRequestError,
  401: UnauthorizedError,
  403: ForbiddenError,
  404: NotFoundError,
  406: NotAcceptableError,
}


def error_for_status(status_code: int, reason: Optional[str] = None) -> ClientRequestError:
  """Return the categorized error for an HTTP status of 300 or above."""
  error_cls = _STATUS_ERRORS.get(status_code, ClientRequestError)
  return error_cls(status_code, (reason or "").strip())


__all__ = [
  "AuthenticationError",
  "AuthenticationUnavailable",
  "BadRequestError",
  "ClientRequestError",
  "ForbiddenError",
  "InvalidServerResponse",
  "NotAcceptableError",
  "NotFoundError",
  "TorrentNotFoundError",
  "TorrentServerUnavailable",
  "UTorrentError",
  "UnauthorizedError",
  "error_for_status",
]
