"""Direct Line transport client.

Architectural role:
    Executes the four HTTP calls of one adapter invocation against the Direct
    Line REST surface and maps failures to the adapter's error kinds.

Remote surface (base = configured `url`):
    - `POST {url}/tokens/generate`                     bearer = secret
    - `POST {url}/conversations`                       bearer = session token
    - `POST {url}/conversations/{id}/activities`       bearer = session token
    - `GET  {url}/conversations/{id}/activities`       bearer = session token

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with
    timeout=120s.

Failure handling model:
    Non-success responses, transport exceptions and success bodies missing the
    expected field raise the phase's `DirectLineError` subclass. Turn
    submission reports success as a boolean instead of raising.

Security considerations:
    Authorization headers and secrets are never logged.
"""

import logging

import requests

from copilot_endpoint.llm.errors import (
    ConversationStartError,
    MessageRetrievalError,
    TokenGenerationError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 120

USER_ID = "user"


def _headers(bearer: str) -> dict:
    return {
        "Authorization": f"Bearer {bearer}",
        "Content-Type": "application/json",
    }


def generate_token(session: requests.Session, url: str, secret: str) -> str:
    """Exchange the long-lived secret for a short-lived session token.

    Raises:
        TokenGenerationError: on transport failure, non-success status or a
            body without `token`.
    """
    try:
        response = session.post(
            f"{url}/tokens/generate",
            headers=_headers(secret),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as err:
        raise TokenGenerationError() from err

    if not response.ok:
        logger.warning("Token endpoint returned HTTP %s", response.status_code)
        raise TokenGenerationError()

    try:
        token = response.json()["token"]
    except (ValueError, KeyError, TypeError) as err:
        raise TokenGenerationError() from err

    return token


def start_conversation(session: requests.Session, url: str, token: str) -> str:
    """Open a new conversation and return its identifier.

    Raises:
        ConversationStartError: on transport failure, non-success status or a
            body without `conversationId`.
    """
    try:
        response = session.post(
            f"{url}/conversations",
            headers=_headers(token),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as err:
        raise ConversationStartError() from err

    if not response.ok:
        logger.warning("Conversation endpoint returned HTTP %s", response.status_code)
        raise ConversationStartError()

    try:
        conversation_id = response.json()["conversationId"]
    except (ValueError, KeyError, TypeError) as err:
        raise ConversationStartError() from err

    return conversation_id


def post_user_message(session: requests.Session, url: str, token: str, conversation_id: str, text: str) -> bool:
    """Post `text` into the conversation as a user-origin message activity.

    Returns:
        True when the service accepted the activity, False otherwise. Failures
        are logged and never raised.
    """
    payload = {
        "type": "message",
        "from": {"id": USER_ID},
        "text": text,
    }

    try:
        response = session.post(
            f"{url}/conversations/{conversation_id}/activities",
            headers=_headers(token),
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException:
        logger.warning(
            "Sending user message to conversation %s failed", conversation_id, exc_info=True
        )
        return False

    if not response.ok:
        logger.warning(
            "Sending user message to conversation %s returned HTTP %s",
            conversation_id,
            response.status_code,
        )
        return False

    return True


def list_activities(session: requests.Session, url: str, token: str, conversation_id: str) -> list:
    """Return every activity currently recorded in the conversation.

    Raises:
        MessageRetrievalError: on transport failure, non-success status or a
            body without an `activities` list.
    """
    try:
        response = session.get(
            f"{url}/conversations/{conversation_id}/activities",
            headers=_headers(token),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as err:
        raise MessageRetrievalError() from err

    if not response.ok:
        logger.warning("Activity listing returned HTTP %s", response.status_code)
        raise MessageRetrievalError()

    try:
        activities = response.json()["activities"]
    except (ValueError, KeyError, TypeError) as err:
        raise MessageRetrievalError() from err

    if not isinstance(activities, list):
        raise MessageRetrievalError()

    return activities


def is_bot_activity(activity: dict) -> bool:
    """True for activities not originated by the user."""
    sender = activity.get("from") or {}
    return sender.get("id") != USER_ID
