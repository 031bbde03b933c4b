import pytest
import requests

from conftest import StubResponse
from utorrent import (
  Action,
  AuthenticationUnavailable,
  BadRequestError,
  ClientRequestError,
  FilePart,
  ForbiddenError,
  NotAcceptableError,
  NotFoundError,
  QueryParam,
  Request,
  TorrentServerUnavailable,
  UnauthorizedError,
  WebUITransport,
)


class RecordingSession:
  def __init__(self, response=None, error=None):
    self.auth = None
    self.calls = []
    self.response = response or StubResponse('{"build":1}')
    self.error = error

  def request(self, method, url, **kwargs):
    self.calls.append((method, url, kwargs))
    if self.error:
      raise self.error
    return self.response

  def close(self):
    pass


def test_transport_builds_gui_url_and_sets_basic_auth():
  session = RecordingSession()
  transport = WebUITransport("http://host.com:8080/", "admin", "secret", session=session)

  assert transport.server_url == "http://host.com:8080/gui/"
  assert session.auth == ("admin", "secret")


def test_get_sends_repeated_params_headers_and_timeout():
  session = RecordingSession()
  transport = WebUITransport("http://host.com:8080", session=session, timeout=3.5)
  request = Request(
    action=Action.START,
    hashes=("AAA", "BBB"),
    params=(QueryParam("token", "tok"),),
    headers={"Cookie": "GUID=abc"},
  )

  body = transport.get(request)

  assert body == '{"build":1}'
  method, url, kwargs = session.calls[0]
  assert method == "get"
  assert url == "http://host.com:8080/gui/"
  assert kwargs["params"] == [("action", "start"), ("token", "tok"), ("hash", "AAA"), ("hash", "BBB")]
  assert kwargs["headers"] == {"Cookie": "GUID=abc"}
  assert kwargs["timeout"] == 3.5


def test_post_sends_fields_and_torrent_file_as_multipart(tmp_path):
  torrent_file = tmp_path / "example.torrent"
  torrent_file.write_bytes(b"d4:infod4:name3:fooee")
  session = RecordingSession()
  transport = WebUITransport("http://host.com:8080", session=session)
  request = Request(
    action=Action.ADD_FILE,
    files=(FilePart("torrent_file", torrent_file),),
  ).with_credentials("tok", "GUID=abc")

  transport.post(request)

  method, _, kwargs = session.calls[0]
  assert method == "post"
  fields = dict(kwargs["files"])
  assert fields["action"] == (None, "add-file")
  assert fields["token"] == (None, "tok")
  filename, _, content_type = fields["torrent_file"]
  assert filename == "example.torrent"
  assert content_type == "application/x-bittorrent"
  assert kwargs["headers"] == {"Cookie": "GUID=abc"}


@pytest.mark.parametrize(
  "status, error_cls",
  [
    (400, BadRequestError),
    (401, UnauthorizedError),
    (403, ForbiddenError),
    (404, NotFoundError),
    (406, NotAcceptableError),
  ],
)
def test_status_codes_map_to_categorized_errors(status, error_cls):
  session = RecordingSession(StubResponse("", status_code=status, reason="Nope"))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(error_cls) as excinfo:
    transport.get(Request(action=Action.STOP))

  assert excinfo.value.status_code == status
  assert excinfo.value.reason == "Nope"


def test_other_error_statuses_raise_generic_client_request_error():
  session = RecordingSession(StubResponse("", status_code=503, reason="Service Unavailable"))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(ClientRequestError) as excinfo:
    transport.get(Request(action=Action.STOP))

  assert type(excinfo.value) is ClientRequestError
  assert excinfo.value.status_code == 503


def test_redirect_status_is_treated_as_error():
  session = RecordingSession(StubResponse("", status_code=302, reason="Found"))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(ClientRequestError):
    transport.get(Request(action=Action.STOP))


def test_connection_failures_raise_server_unavailable():
  session = RecordingSession(error=requests.ConnectionError("refused"))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(TorrentServerUnavailable, match="refused"):
    transport.get(Request(action=Action.STOP))


def test_authenticate_strips_markup_and_reads_guid_cookie():
  response = StubResponse(
    "<html><div id='token' style='display:none;'>abc123XYZ</div></html>\n",
    headers={"Set-Cookie": "GUID=Zq9w8e7r6t; path=/"},
  )
  session = RecordingSession(response)
  transport = WebUITransport("http://host.com:8080", session=session)

  result = transport.authenticate()

  assert result.token == "abc123XYZ"
  assert result.cookie == "GUID=Zq9w8e7r6t"
  assert session.calls[0][1] == "http://host.com:8080/gui/token.html"


def test_authenticate_requires_guid_cookie():
  session = RecordingSession(StubResponse("<div>abc</div>", headers={"Set-Cookie": "OTHER=1"}))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(AuthenticationUnavailable, match="GUID"):
    transport.authenticate()


def test_authenticate_requires_token_body():
  session = RecordingSession(StubResponse("<html></html>", headers={"Set-Cookie": "GUID=x"}))
  transport = WebUITransport("http://host.com:8080", session=session)

  with pytest.raises(AuthenticationUnavailable, match="token"):
    transport.authenticate()
