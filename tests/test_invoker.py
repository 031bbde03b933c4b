import pytest

from utorrent import (
  Action,
  AuthenticatedInvoker,
  AuthenticationError,
  BadRequestError,
  ForbiddenError,
  InvalidServerResponse,
  NotFoundError,
  Request,
  Session,
  SessionManager,
)


class CountingHandshake:
  def __init__(self):
    self.calls = 0

  def __call__(self):
    self.calls += 1
    return Session(token=f"token-{self.calls}", cookie=f"GUID=guid-{self.calls}")


class ScriptedExecutor:
  """Raise or return the scripted outcomes in order, recording each request."""

  def __init__(self, *outcomes):
    self.outcomes = list(outcomes)
    self.requests = []

  def __call__(self, request):
    self.requests.append(request)
    outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
    if isinstance(outcome, Exception):
      raise outcome
    return outcome


@pytest.fixture
def handshake():
  return CountingHandshake()


@pytest.fixture
def invoker(handshake):
  return AuthenticatedInvoker(SessionManager(handshake))


def test_invoke_attaches_token_and_cookie(invoker):
  execute = ScriptedExecutor('{"build":1}')

  result = invoker.invoke(Request(action=Action.START, hashes=("AAA",)), execute)

  assert result == '{"build":1}'
  sent = execute.requests[0]
  assert ("token", "token-1") in sent.query_params()
  assert sent.headers["Cookie"] == "GUID=guid-1"


def test_single_retry_after_stale_session(invoker, handshake):
  execute = ScriptedExecutor(BadRequestError(400, "Bad Request"), '{"build":1}')

  result = invoker.invoke(Request(action=Action.STOP), execute)

  assert result == '{"build":1}'
  assert handshake.calls == 2
  assert len(execute.requests) == 2
  assert ("token", "token-2") in execute.requests[1].query_params()
  assert execute.requests[1].headers["Cookie"] == "GUID=guid-2"


def test_repeated_bad_request_fails_after_exactly_two_attempts(invoker, handshake):
  rejection = BadRequestError(400, "Bad Request")
  execute = ScriptedExecutor(rejection)

  with pytest.raises(AuthenticationError) as excinfo:
    invoker.invoke(Request(action=Action.STOP), execute)

  assert len(execute.requests) == 2
  assert handshake.calls == 2
  assert excinfo.value.__cause__ is rejection


def test_session_is_reused_across_calls(invoker, handshake):
  execute = ScriptedExecutor('{"build":1}')

  invoker.invoke(Request(action=Action.START), execute)
  invoker.invoke(Request(action=Action.STOP), execute)

  assert handshake.calls == 1


@pytest.mark.parametrize("error", [ForbiddenError(403, "Forbidden"), NotFoundError(404, "Not Found")])
def test_other_errors_propagate_without_retry(invoker, handshake, error):
  execute = ScriptedExecutor(error)

  with pytest.raises(type(error)) as excinfo:
    invoker.invoke(Request(action=Action.STOP), execute)

  assert excinfo.value is error
  assert len(execute.requests) == 1
  assert handshake.calls == 1


def test_none_response_is_invalid(invoker):
  with pytest.raises(InvalidServerResponse):
    invoker.invoke(Request(action=Action.START), ScriptedExecutor(None), require_content=False)


def test_empty_response_is_invalid_when_content_required(invoker):
  with pytest.raises(InvalidServerResponse):
    invoker.invoke(Request(action=Action.GET_FILES), ScriptedExecutor(""))


def test_empty_response_passes_through_for_action_calls(invoker):
  result = invoker.invoke(Request(action=Action.START), ScriptedExecutor(""), require_content=False)
  assert result == ""


def test_original_request_is_not_mutated(invoker):
  request = Request(action=Action.START, hashes=("AAA",))
  invoker.invoke(request, ScriptedExecutor('{"build":1}'))

  assert request.headers == {}
  assert all(name != "token" for name, _ in request.query_params())
