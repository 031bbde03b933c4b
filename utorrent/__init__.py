"""uTorrent WebUI client helpers."""

from .cache import TorrentListCache
from .client import UTorrentClient
from .errors import (
  AuthenticationError,
  AuthenticationUnavailable,
  BadRequestError,
  ClientRequestError,
  ForbiddenError,
  InvalidServerResponse,
  NotAcceptableError,
  NotFoundError,
  TorrentNotFoundError,
  TorrentServerUnavailable,
  UnauthorizedError,
  UTorrentError,
)
from .invoker import AuthenticatedInvoker
from .messages import (
  ClientSettings,
  RequestResult,
  Setting,
  SettingType,
  Torrent,
  TorrentFile,
  TorrentFileList,
  TorrentListUpdate,
  TorrentProperties,
  TorrentStatus,
)
from .request import Action, FilePart, Priority, QueryParam, Request
from .session import Session, SessionManager, SessionStatus
from .transport import WebUITransport

__all__ = [
  "Action",
  "AuthenticatedInvoker",
  "AuthenticationError",
  "AuthenticationUnavailable",
  "BadRequestError",
  "ClientRequestError",
  "ClientSettings",
  "FilePart",
  "ForbiddenError",
  "InvalidServerResponse",
  "NotAcceptableError",
  "NotFoundError",
  "Priority",
  "QueryParam",
  "Request",
  "RequestResult",
  "Session",
  "SessionManager",
  "SessionStatus",
  "Setting",
  "SettingType",
  "Torrent",
  "TorrentFile",
  "TorrentFileList",
  "TorrentListCache",
  "TorrentListUpdate",
  "TorrentNotFoundError",
  "TorrentProperties",
  "TorrentServerUnavailable",
  "TorrentStatus",
  "UTorrentClient",
  "UTorrentError",
  "UnauthorizedError",
  "WebUITransport",
]
