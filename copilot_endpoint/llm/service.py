"""Copilot Studio endpoint: chat messages in, streamed text units out.

Architectural role:
    Adapts the turn-based, poll-for-reply Direct Line conversation protocol to
    the incremental text-generation interface consumed by the chat layers
    (`copilot_endpoint.api`).

Invocation flow:
    `endpoint_copilot(params)` -> `endpoint(messages, ...)`:
        1. credential exchange  (`client.generate_token`)
        2. conversation start   (`client.start_conversation`)
        3. turn submission      (`client.post_user_message`)
        4. reply polling        (`client.list_activities`, lazily, per pull)

    Phases 1-3 run when the endpoint is called, so credential and conversation
    failures raise before any output exists. The returned generator runs the
    polling loop on demand and is single-pass.

Polling:
    Polls until at least one non-user activity appears, sleeping
    `poll_interval` seconds after each empty poll. `max_polls` bounds the loop
    (`0` means unbounded). The loop ends after the first non-empty poll, so no
    activity can be emitted twice within an invocation.

Concurrency:
    Every invocation owns its own `requests.Session`, token and conversation
    id. Nothing is shared between invocations.
"""

import logging
import time

import requests

from copilot_endpoint.llm import client
from copilot_endpoint.llm.errors import ReplyTimeoutError
from copilot_endpoint.llm.provider_config import EndpointCopilotParameters
from copilot_endpoint.llm.stream_types import TextGenerationStreamOutput, TextGenerationToken

logger = logging.getLogger(__name__)


def build_prompt(messages) -> str:
    """Join message contents with newlines, in caller order."""
    return "\n".join(_message_content(m) for m in messages)


def _message_content(message) -> str:
    if isinstance(message, dict):
        content = message.get("content")
    else:
        content = getattr(message, "content", None)
    return "" if content is None else str(content)


def poll_replies(session, url, token, conversation_id, poll_interval=1.0, max_polls=0):
    """Yield output units for the first non-empty set of bot activities.

    Raises:
        MessageRetrievalError: when an activity listing fails; units already
            yielded are not repeated or completed.
        ReplyTimeoutError: when `max_polls` polls returned no bot activity.
    """
    token_id = 0
    generated_text = ""
    polls = 0

    while True:
        activities = client.list_activities(session, url, token, conversation_id)
        polls += 1

        bot_messages = [a for a in activities if client.is_bot_activity(a)]

        if not bot_messages:
            if max_polls and polls >= max_polls:
                raise ReplyTimeoutError(polls)
            if poll_interval:
                time.sleep(poll_interval)
            continue

        logger.debug(
            "Conversation %s answered after %d polls with %d messages",
            conversation_id,
            polls,
            len(bot_messages),
        )

        for bot_message in bot_messages:
            text = bot_message.get("text") or ""
            generated_text += text

            yield TextGenerationStreamOutput(
                token=TextGenerationToken(id=token_id, text=text, special=False),
            )
            token_id += 1

        yield TextGenerationStreamOutput(
            token=TextGenerationToken(id=token_id, text=generated_text, special=True),
            generated_text=generated_text,
        )
        return


def endpoint_copilot(params, session_factory=requests.Session):
    """Build a Copilot Studio endpoint from raw or validated parameters.

    Args:
        params: Parameter dict (validated here) or `EndpointCopilotParameters`.
        session_factory: Zero-argument callable returning a fresh HTTP session
            for each invocation.

    Returns:
        Callable `endpoint(messages, continue_message=False, preprompt=None)`
        returning a generator of `TextGenerationStreamOutput`.
    """
    if not isinstance(params, EndpointCopilotParameters):
        params = EndpointCopilotParameters.model_validate(params)

    url = params.base_url
    secret = params.direct_line_secret

    def endpoint(messages, continue_message=False, preprompt=None):
        # Accepted for interface compatibility, not sent to the service.
        if continue_message or preprompt:
            logger.debug("Ignoring continue_message/preprompt for Copilot endpoint")

        session = session_factory()
        try:
            token = client.generate_token(session, url, secret)
            conversation_id = client.start_conversation(session, url, token)
            logger.debug("Started conversation %s", conversation_id)

            prompt = build_prompt(messages)
            client.post_user_message(session, url, token, conversation_id, prompt)
        except Exception:
            session.close()
            raise

        return _closing(
            poll_replies(
                session,
                url,
                token,
                conversation_id,
                poll_interval=params.poll_interval,
                max_polls=params.max_polls,
            ),
            session,
        )

    endpoint.parameters = params
    return endpoint


def _closing(units, session):
    try:
        yield from units
    finally:
        session.close()
