"""Endpoint configuration for the Copilot Studio adapter.

Architectural role:
    Centralizes endpoint parameters, secret lookup and process-level settings
    for `copilot_endpoint.llm.service` and `copilot_endpoint.core.selection`.

Configuration sources:
    - Explicit parameter dicts validated by `EndpointCopilotParameters`.
    - `COPILOT_ENDPOINTS`: JSON list (or single object) of parameter dicts.
    - Single-endpoint fallback: `COPILOT_URL`, `DIRECT_LINE_SECRET`,
      `COPILOT_WEIGHT`, `COPILOT_POLL_INTERVAL`, `COPILOT_MAX_POLLS`.
    - Key file `config/directline.key` for the secret.

Determinism:
    Deterministic for a fixed process environment and key files. Process-level
    flags are resolved at import time; endpoint lists are resolved per call to
    `load_endpoint_configs`.

Failure behavior:
    Invalid parameters raise `pydantic.ValidationError`. Malformed
    `COPILOT_ENDPOINTS` JSON raises `ValueError`.
"""

import json
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, StrictInt

load_dotenv()

# Process-level logging switches consumed by the API and CLI entrypoints.
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = os.getenv("DEBUG") == "true"

DEFAULT_URL = "https://directline.botframework.com/v3/directline"
DEFAULT_SECRET = "<direct line secret>"
DIRECT_LINE_KEY_FILE = "config/directline.key"


class EndpointCopilotParameters(BaseModel):
    """Validated parameters of one Copilot Studio endpoint.

    Attributes:
        weight: Selection weight among configured endpoints.
        type: Discriminator, always `"copilot"`.
        direct_line_secret: Long-lived Direct Line secret (`directLineSecret`).
        url: Direct Line base URL.
        poll_interval: Seconds to wait after an empty activity poll (`pollInterval`).
        max_polls: Poll budget per invocation, `0` for unbounded (`maxPolls`).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    weight: StrictInt = Field(default=1, gt=0)
    type: Literal["copilot"]
    direct_line_secret: str = Field(default=DEFAULT_SECRET, alias="directLineSecret")
    url: AnyHttpUrl = Field(default=DEFAULT_URL, validate_default=True)
    poll_interval: float = Field(default=1.0, ge=0, alias="pollInterval")
    max_polls: StrictInt = Field(default=60, ge=0, alias="maxPolls")

    @property
    def base_url(self) -> str:
        """Base URL without a trailing slash, ready for path concatenation."""
        return str(self.url).rstrip("/")


def load_key(path, env_name=None):
    """Load a secret from environment override or key file.

    Resolution order:
        1. `env_name` when given, otherwise an environment variable inferred from
           the file stem (`config/directline.key` -> `DIRECTLINE_API_KEY`).
        2. Raw file contents at `path`.

    Returns:
        Key string or `None` when not available.
    """
    if not path:
        return None
    key_name = env_name or os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def resolve_secret(explicit=None):
    """Return the Direct Line secret from explicit value, env, key file or default."""
    if explicit:
        return explicit
    return load_key(DIRECT_LINE_KEY_FILE, env_name="DIRECT_LINE_SECRET") or DEFAULT_SECRET


def load_endpoint_configs() -> list[EndpointCopilotParameters]:
    """Build validated endpoint parameters from the process environment.

    `COPILOT_ENDPOINTS` wins when set. Entries without a `directLineSecret`
    receive the resolved default secret. Otherwise a single endpoint is built
    from the scalar environment variables.
    """
    raw = os.getenv("COPILOT_ENDPOINTS")

    if raw:
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as err:
            raise ValueError("COPILOT_ENDPOINTS is not valid JSON") from err

        if isinstance(entries, dict):
            entries = [entries]

        configs = []
        for entry in entries:
            entry = dict(entry)
            entry.setdefault("type", "copilot")
            if not entry.get("directLineSecret"):
                entry["directLineSecret"] = resolve_secret()
            configs.append(EndpointCopilotParameters.model_validate(entry))
        return configs

    single = {
        "type": "copilot",
        "url": os.getenv("COPILOT_URL", DEFAULT_URL),
        "directLineSecret": resolve_secret(),
        "weight": int(os.getenv("COPILOT_WEIGHT", "1")),
        "pollInterval": float(os.getenv("COPILOT_POLL_INTERVAL", "1.0")),
        "maxPolls": int(os.getenv("COPILOT_MAX_POLLS", "60")),
    }
    return [EndpointCopilotParameters.model_validate(single)]
