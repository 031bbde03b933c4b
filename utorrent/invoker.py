"""Executes requests with session credentials and recovers from one stale token."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import AuthenticationError, BadRequestError, InvalidServerResponse
from .request import Request
from .session import SessionManager

LOG = logging.getLogger(__name__)

MAX_ATTEMPTS = 2

Executor = Callable[[Request], Optional[str]]


class AuthenticatedInvoker:
  """Attach the current token and cookie to a request and execute it.

  The daemon answers 400 when the token is stale. On that status the session
  is discarded and the request is repeated once with a fresh one; a second
  400 means the credentials themselves are wrong. Every other error from
  ``execute`` propagates untouched.
  """

  def __init__(self, sessions: SessionManager) -> None:
    self._sessions = sessions

  def invoke(self, request: Request, execute: Executor, *, require_content: bool = True) -> str:
    """Run ``request`` through ``execute`` (the transport's ``get`` or ``post``).

    A ``None`` response always raises :class:`InvalidServerResponse`. With
    ``require_content`` an empty body does too; action calls pass ``False``
    and classify the empty body themselves.
    """
    rejection: Optional[BadRequestError] = None
    for attempt in range(1, MAX_ATTEMPTS + 1):
      session = self._sessions.current()
      authed_request = request.with_credentials(session.token, session.cookie)
      try:
        response = execute(authed_request)
      except BadRequestError as exc:
        LOG.warning(
          "uTorrent rejected the session token (attempt %d of %d); discarding session.",
          attempt,
          MAX_ATTEMPTS,
        )
        self._sessions.invalidate()
        rejection = exc
        continue

      if response is None or (require_content and not response):
        raise InvalidServerResponse(
          f"Received empty response from uTorrent for {_describe(request)}."
        )
      return response

    raise AuthenticationError(
      "Impossible to connect to uTorrent, wrong username or password."
    ) from rejection


def _describe(request: Request) -> str:
  if request.action is not None:
    return f"action '{request.action.value}'"
  return "torrent list request"


__all__ = ["AuthenticatedInvoker", "MAX_ATTEMPTS"]
