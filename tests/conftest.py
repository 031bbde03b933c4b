import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

BUILD_BODY = '{"build":30303}'


class StubResponse:
  def __init__(self, text: str = "", status_code: int = 200, headers=None, reason: str = "OK"):
    self.text = text
    self.status_code = status_code
    self.headers = headers or {}
    self.reason = reason


def request_pairs(kwargs: Dict[str, Any]) -> List[Tuple[str, Any]]:
  """Return the name/value pairs a stubbed call carried, for GET or multipart POST."""
  if "params" in kwargs:
    return list(kwargs["params"])
  pairs = []
  for name, value in kwargs.get("files", []):
    filename, content = value[0], value[1]
    pairs.append((name, content if filename is None else filename))
  return pairs


def request_param(kwargs: Dict[str, Any], name: str) -> Optional[str]:
  values = [value for key, value in request_pairs(kwargs) if key == name]
  return values[0] if values else None


class FakeDaemon:
  """Stands in for ``requests.Session`` and answers like a uTorrent WebUI."""

  def __init__(self) -> None:
    self.auth = None
    self.closed = False
    self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
    self.handshakes = 0
    self.bad_requests_left = 0
    self.list_payloads: List[Dict[str, Any]] = []
    self.responses: Dict[str, Any] = {}

  def request(self, method: str, url: str, **kwargs: Any) -> StubResponse:
    self.calls.append((method, url, kwargs))
    if url.endswith("token.html"):
      self.handshakes += 1
      return StubResponse(
        f"<html><div id='token' style='display:none;'>token-{self.handshakes}</div></html>",
        headers={"Set-Cookie": f"GUID=guid-{self.handshakes}; path=/"},
      )

    if self.bad_requests_left:
      self.bad_requests_left -= 1
      return StubResponse("", status_code=400, reason="Bad Request")

    action = request_param(kwargs, "action")
    if action is None:
      payload = self.list_payloads.pop(0) if len(self.list_payloads) > 1 else self.list_payloads[0]
      return StubResponse(json.dumps(payload))

    body = self.responses.get(action, BUILD_BODY)
    if isinstance(body, StubResponse):
      return body
    return StubResponse(body)

  def close(self) -> None:
    self.closed = True

  def authed_calls(self) -> List[Tuple[str, str, Dict[str, Any]]]:
    return [call for call in self.calls if not call[1].endswith("token.html")]


@pytest.fixture
def daemon():
  return FakeDaemon()
