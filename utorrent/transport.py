"""HTTP plumbing for the uTorrent WebUI: verbs, status mapping and the token handshake."""

from __future__ import annotations

import logging
import re
from contextlib import ExitStack
from typing import Any, List, Optional, Tuple
from urllib.parse import urljoin

import requests

from .errors import AuthenticationUnavailable, TorrentServerUnavailable, error_for_status
from .request import Request
from .session import Session

LOG = logging.getLogger(__name__)

GUI_PATH = "/gui/"
TOKEN_PATH = "token.html"
GUID_COOKIE = "GUID"

_TAG_PATTERN = re.compile(r"<[^>]*>")
_GUID_PATTERN = re.compile(r"(?:^|[;,]\s*)GUID=([^;,\s]+)")


class WebUITransport:
  """Stateless executor for single requests against ``<base_url>/gui/``."""

  def __init__(
    self,
    base_url: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    *,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
  ) -> None:
    self.base_url = base_url.rstrip("/")
    self.server_url = urljoin(f"{self.base_url}/", GUI_PATH.lstrip("/"))
    self.timeout = timeout
    self._session = session or requests.Session()
    if username:
      self._session.auth = (username, password or "")

  # ---------------------------------------------------------------------------
  # Verbs
  # ---------------------------------------------------------------------------
  def get(self, request: Request) -> str:
    response = self._request(
      "get",
      self.server_url,
      params=request.query_params(),
      headers=dict(request.headers),
    )
    return response.text

  def post(self, request: Request) -> str:
    fields: List[Tuple[str, Any]] = [
      (name, (None, value)) for name, value in request.query_params()
    ]
    with ExitStack() as stack:
      for part in request.files:
        handle = stack.enter_context(open(part.path, "rb"))
        fields.append((part.name, (part.path.name, handle, part.content_type)))
      response = self._request(
        "post",
        self.server_url,
        files=fields,
        headers=dict(request.headers),
      )
    return response.text

  def authenticate(self) -> Session:
    """Fetch ``token.html`` and turn it into a fresh session."""
    response = self._request("get", urljoin(self.server_url, TOKEN_PATH))

    guid = _extract_guid(response.headers.get("Set-Cookie", ""))
    if not guid:
      raise AuthenticationUnavailable("uTorrent token response did not set a GUID cookie.")

    token = _TAG_PATTERN.sub("", response.text or "").strip()
    if not token:
      raise AuthenticationUnavailable("uTorrent token response did not contain a token.")

    LOG.debug("Authenticated with uTorrent WebUI at %s.", self.server_url)
    return Session(token=token, cookie=f"{GUID_COOKIE}={guid}")

  def close(self) -> None:
    self._session.close()

  # ---------------------------------------------------------------------------
  # Internal helpers
  # ---------------------------------------------------------------------------
  def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
    kwargs.setdefault("timeout", self.timeout)
    LOG.debug("uTorrent %s %s", method.upper(), url)
    try:
      response = self._session.request(method, url, **kwargs)
    except requests.RequestException as exc:
      raise TorrentServerUnavailable(f"uTorrent request failed: {exc}") from exc

    if response.status_code > 299:
      raise error_for_status(response.status_code, response.reason)

    return response


def _extract_guid(set_cookie: str) -> Optional[str]:
  match = _GUID_PATTERN.search(set_cookie or "")
  return match.group(1) if match else None


__all__ = ["WebUITransport"]
