from unittest.mock import MagicMock

import pytest
import requests

from advisor.dispatcher import (
    CANNED_REPLIES,
    CONNECTION_ERROR_MESSAGE,
    EMPTY_REPLY_MESSAGE,
    GREETING,
    RATE_LIMITED_MESSAGE,
    AdvisorClient,
    canned_reply,
    match_programs,
    normalize_query,
    program_context,
)


def _response(status: int, body=None, text: str | None = None) -> MagicMock:
    """Stand-in for requests.Response."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if body is None:
        resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", text or "", 0)
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    """Fake requests session; tests set session.post.return_value / side_effect."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(catalog, session):
    return AdvisorClient(catalog, url="http://chat.test/api/chat", timeout=5, session=session)


class TestCannedReplies:
    """Test the local short-circuit table."""

    def test_normalize(self):
        """Test trimming, lower-casing and punctuation stripping."""
        assert normalize_query("  Thank You!! ") == "thank you"
        assert normalize_query("What can you do?") == "what can you do"

    def test_hello_is_canned(self, client, session):
        """Test that 'hello' answers locally with no network call."""
        result = client.dispatch([], "hello")
        assert result.status == "canned"
        assert result.text == GREETING
        session.post.assert_not_called()

    def test_canned_with_punctuation(self, client, session):
        """Test that punctuation and case don't defeat the table."""
        result = client.dispatch([], "Hey!")
        assert result.text == CANNED_REPLIES["hey"]
        session.post.assert_not_called()

    def test_not_canned(self):
        """Test that longer questions miss the table."""
        assert canned_reply("hello, which majors involve patients?") is None


class TestMatchPrograms:
    """Test local pre-filtering of program context."""

    def test_name_contains_query(self, catalog):
        """Test matching when a program name contains the query."""
        ids = [p.program_id for p in match_programs("Computer", catalog)]
        assert ids == ["computer-science-bs", "computer-science-minor"]

    def test_query_mentions_degree_type(self, catalog):
        """Test matching when the query names a degree type."""
        ids = [p.program_id for p in match_programs("which ba programs are there", catalog)]
        assert ids == ["art-ba"]

    def test_interest_keywords(self, catalog):
        """Test matching through a mapped interest keyword."""
        ids = [p.program_id for p in match_programs("I want to work with patients", catalog)]
        assert ids == ["nursing-bs"]

    def test_limit(self, catalog):
        """Test that at most `limit` programs are returned."""
        assert len(match_programs("minor bs ba", catalog, limit=2)) == 2

    def test_no_match(self, catalog):
        """Test that unrelated queries send no context."""
        assert match_programs("xyzzy", catalog) == []

    def test_context_fields(self, catalog):
        """Test the fields sent for each context program."""
        ctx = program_context([catalog.get_program("nursing-bs")])
        assert ctx == [{
            "program_name": "Nursing",
            "degree_type": "BS",
            "program_credits": "72-74",
            "short_description": "Pre-licensure nursing.",
            "total_credits": 124,
        }]


class TestDispatch:
    """Test the single POST to the chat endpoint and its outcomes."""

    def test_success(self, client, session):
        """Test that the text field is returned on success."""
        session.post.return_value = _response(200, {"text": "Nursing is a great fit."})
        result = client.dispatch([], "Tell me about nursing")
        assert result.status == "ok"
        assert result.ok
        assert result.text == "Nursing is a great fit."

    def test_request_body(self, client, session):
        """Test the JSON body carries history, query and program context."""
        session.post.return_value = _response(200, {"text": "ok"})
        history = [{"role": "user", "parts": [{"text": "hi"}]}]
        client.dispatch(history, "nursing")

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == ("http://chat.test/api/chat",)
        assert kwargs["timeout"] == 5
        body = kwargs["json"]
        assert body["chatHistory"] == history
        assert body["userQuery"] == "nursing"
        assert [c["program_name"] for c in body["programContext"]] == ["Nursing"]

    def test_success_without_text(self, client, session):
        """Test the fallback when the reply has no text."""
        session.post.return_value = _response(200, {})
        assert client.dispatch([], "nursing").text == EMPTY_REPLY_MESSAGE

    def test_rate_limited_with_server_message(self, client, session):
        """Test that a 429 passes the server's message through."""
        session.post.return_value = _response(429, {"error": "Daily limit hit."})
        result = client.dispatch([], "nursing")
        assert result.status == "rate_limited"
        assert result.text == "Daily limit hit."
        assert not result.ok

    def test_rate_limited_default_message(self, client, session):
        """Test the fixed rate-limit message when the body isn't JSON."""
        session.post.return_value = _response(429, text="Too Many Requests")
        result = client.dispatch([], "nursing")
        assert result.status == "rate_limited"
        assert result.text == RATE_LIMITED_MESSAGE

    def test_server_error_detail(self, client, session):
        """Test that other failures carry the server's error string."""
        session.post.return_value = _response(500, {"error": "Model overloaded"})
        result = client.dispatch([], "nursing")
        assert result.status == "server_error"
        assert result.text == "Model overloaded"

    def test_server_error_without_detail(self, client, session):
        """Test the status-code message when the server gives no error field."""
        session.post.return_value = _response(502, text="<html>Bad Gateway</html>")
        result = client.dispatch([], "nursing")
        assert result.status == "server_error"
        assert result.text == "Server responded with status: 502"

    def test_transport_error(self, client, session):
        """Test that connection failures become the generic message."""
        session.post.side_effect = requests.ConnectionError("refused")
        result = client.dispatch([], "nursing")
        assert result.status == "transport_error"
        assert result.text == CONNECTION_ERROR_MESSAGE

    def test_timeout_not_retried(self, client, session):
        """Test that a timeout is reported once with no retry."""
        session.post.side_effect = requests.Timeout("slow")
        result = client.dispatch([], "nursing")
        assert result.status == "transport_error"
        assert session.post.call_count == 1

    def test_undecodable_success_body(self, client, session):
        """Test that a 200 with a non-JSON body is treated as a connection failure."""
        session.post.return_value = _response(200, text="not json")
        result = client.dispatch([], "nursing")
        assert result.status == "transport_error"
        assert result.text == CONNECTION_ERROR_MESSAGE
