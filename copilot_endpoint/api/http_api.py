"""
HTTP API adapter for Copilot Studio endpoints.

Architectural role:
- Expose OpenAI-compatible HTTP interfaces.
- Enforce adapter-level input validation and endpoint selection.
- Delegate generation to `copilot_endpoint.llm.service` endpoints.
- Normalize streamed output units to response contracts (JSON or SSE).

Endpoint responsibilities:
- `GET /v1/models`: expose configured endpoints as model entries.
- `POST /v1/chat/completions`: validate input, select an endpoint, run it and
  format completion output.

API request lifecycle (`POST /v1/chat/completions`):
1. Parse request JSON (`messages`, optional `model`, optional `stream`).
2. Validate required fields and requested model.
3. Split `system` messages off as preprompt; forward the rest to the endpoint.
4. Format the endpoint's units for non-stream or streaming response contracts.

Model selection:
- `copilot` or no model -> weighted selection across configured endpoints.
- `copilot-<n>` -> that configured endpoint.
- Anything else -> HTTP 400.

Error handling strategy:
- Missing `messages` or unknown model -> HTTP 400 JSON.
- Invalid endpoint settings in the environment -> HTTP 500 JSON.
- Adapter failures before any output -> HTTP 502 JSON with the error message.
- Adapter failures mid-stream are logged; the stream ends without a `stop`
  frame or `[DONE]` sentinel.

Side effects:
- Builds the endpoint list from the environment on first use.
- Emits request debug output only when `DEBUG == "true"`.
"""

import asyncio
import json
import logging
import os
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse

from copilot_endpoint.core.selection import build_endpoints, select_endpoint
from copilot_endpoint.llm.errors import DirectLineError
from copilot_endpoint.llm.provider_config import DEBUG, LOG_LEVEL

logger = logging.getLogger(__name__)

app = FastAPI()

DEFAULT_MODEL = "copilot"

_endpoints = None


def get_endpoints():
    """Return configured endpoints, building them from the environment once."""
    global _endpoints
    if _endpoints is None:
        _endpoints = build_endpoints()
    return _endpoints


def resolve_endpoint(model_name):
    """Return the endpoint for `model_name`, or `None` when it is unknown."""
    endpoints = get_endpoints()

    if not model_name or model_name == DEFAULT_MODEL:
        return select_endpoint(endpoints)

    for endpoint in endpoints:
        if endpoint.name == model_name:
            return endpoint

    return None


def configuration_error(err):
    """JSON 500 response for endpoint settings that fail validation."""
    logger.error("Endpoint configuration error: %s", err)
    return JSONResponse(status_code=500, content={"error": f"Endpoint configuration error: {err}"})


def split_messages(messages):
    """Separate system messages (joined as preprompt) from chat messages."""
    system_parts = []
    chat_messages = []

    for msg in messages:
        content = msg.get("content")
        content = "" if content is None else str(content)
        if msg.get("role") == "system":
            system_parts.append(content)
        else:
            chat_messages.append({"role": msg.get("role"), "content": content})

    preprompt = "\n".join(system_parts) or None
    return chat_messages, preprompt


def collect_final_text(units):
    """Drain `units` and return the terminal unit's aggregated text."""
    final_text = ""
    for unit in units:
        if unit.is_final:
            final_text = unit.generated_text
    return final_text


# ============================================================
# Model Listing
# ============================================================

@app.get("/v1/models")
def list_models():
    """
    Return configured endpoints as OpenAI-style model metadata.

    The `copilot` alias (weighted selection) is listed first.
    """
    try:
        endpoints = get_endpoints()
    except ValueError as err:
        return configuration_error(err)

    created = int(time.time())
    names = [DEFAULT_MODEL] + [endpoint.name for endpoint in endpoints]

    return {
        "object": "list",
        "data": [
            {
                "id": name,
                "object": "model",
                "created": created,
                "owned_by": "copilot-studio"
            }
            for name in names
        ]
    }


# ============================================================
# OpenAI-Compatible Chat Completions
# ============================================================

@app.post("/v1/chat/completions")
async def chat_completions(request: Request):
    """
    OpenAI-compatible chat completions endpoint.

    Phases that may block (credential exchange, conversation start, turn
    submission, polling) run in worker threads.
    """

    body = await request.json()

    messages = body.get("messages", [])
    stream = body.get("stream", False)
    model_name = body.get("model") or DEFAULT_MODEL

    if DEBUG:
        print("Incoming messages:", messages)
        print("Stream:", stream)
        print("Model:", model_name)

    if not messages:
        return JSONResponse(status_code=400, content={"error": "No messages provided"})

    try:
        endpoint = resolve_endpoint(model_name)
    except DirectLineError as err:
        return JSONResponse(status_code=502, content={"error": str(err)})
    except ValueError as err:
        return configuration_error(err)

    if endpoint is None:
        return JSONResponse(status_code=400, content={"error": "Unknown model requested"})

    chat_messages, preprompt = split_messages(messages)

    try:
        units = await asyncio.to_thread(endpoint.generate, chat_messages, False, preprompt)
    except DirectLineError as err:
        logger.exception("Copilot endpoint %s failed before streaming", endpoint.name)
        return JSONResponse(status_code=502, content={"error": str(err)})

    completion_id = f"chatcmpl-{uuid.uuid4().hex}"
    created = int(time.time())

    if stream:

        def chunk(delta, finish_reason=None):
            data = {
                "id": completion_id,
                "object": "chat.completion.chunk",
                "created": created,
                "model": model_name,
                "choices": [
                    {
                        "index": 0,
                        "delta": delta,
                        "finish_reason": finish_reason
                    }
                ]
            }
            return f"data: {json.dumps(data)}\n\n"

        def event_generator():
            """
            Yield SSE frames matching OpenAI chunk semantics.

            - Each non-terminal unit becomes one `delta.content` chunk.
            - The terminal unit becomes a `finish_reason: "stop"` chunk,
              followed by the `[DONE]` sentinel.
            """
            try:
                for unit in units:
                    if unit.is_final:
                        yield chunk({}, finish_reason="stop")
                        yield "data: [DONE]\n\n"
                        return
                    yield chunk({"content": unit.token.text})
            except DirectLineError:
                logger.exception("Copilot endpoint %s failed mid-stream", endpoint.name)
            finally:
                units.close()

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    try:
        result = await asyncio.to_thread(collect_final_text, units)
    except DirectLineError as err:
        logger.exception("Copilot endpoint %s failed while polling", endpoint.name)
        return JSONResponse(status_code=502, content={"error": str(err)})

    return {
        "id": completion_id,
        "object": "chat.completion",
        "created": created,
        "model": model_name,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": result},
                "finish_reason": "stop"
            }
        ]
    }


def serve():
    """Run the API with uvicorn on `API_HOST`/`API_PORT` (default 127.0.0.1:8000)."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL)
    uvicorn.run(app, host=os.getenv("API_HOST", "127.0.0.1"), port=int(os.getenv("API_PORT", "8000")))
