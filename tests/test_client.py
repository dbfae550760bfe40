import pytest

from copilot_endpoint.llm import client
from copilot_endpoint.llm.errors import ConversationStartError, MessageRetrievalError, TokenGenerationError
from fakes import BASE_URL, FakeResponse, FakeSession


def test_generate_token_posts_secret_as_bearer():
    session = FakeSession()

    assert client.generate_token(session, BASE_URL, "S") == "T"

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", f"{BASE_URL}/tokens/generate")
    assert kwargs["headers"]["Authorization"] == "Bearer S"
    assert kwargs["timeout"] == client.REQUEST_TIMEOUT


@pytest.mark.parametrize("body", [None, {}, {"access": "T"}])
def test_generate_token_rejects_malformed_body(body):
    session = FakeSession(token=FakeResponse(body=body))

    with pytest.raises(TokenGenerationError):
        client.generate_token(session, BASE_URL, "S")


def test_start_conversation_requires_identifier():
    with pytest.raises(ConversationStartError):
        client.start_conversation(FakeSession(conversation=FakeResponse(body={"token": "T"})), BASE_URL, "T")

    assert client.start_conversation(FakeSession(), BASE_URL, "T") == "C"


def test_post_user_message_reports_transport_failure(connection_error):
    session = FakeSession(send=connection_error)

    assert client.post_user_message(session, BASE_URL, "T", "C", "hi") is False


def test_list_activities_requires_list():
    session = FakeSession(polls=[FakeResponse(body={"activities": None})])

    with pytest.raises(MessageRetrievalError):
        client.list_activities(session, BASE_URL, "T", "C")


def test_list_activities_wraps_transport_error(connection_error):
    session = FakeSession(polls=[connection_error])

    with pytest.raises(MessageRetrievalError) as info:
        client.list_activities(session, BASE_URL, "T", "C")

    assert info.value.__cause__ is connection_error


@pytest.mark.parametrize(
    "activity, expected",
    [
        ({"from": {"id": "user"}}, False),
        ({"from": {"id": "copilot-bot"}}, True),
        ({"from": {}}, True),
        ({}, True),
    ],
)
def test_is_bot_activity(activity, expected):
    assert client.is_bot_activity(activity) is expected
