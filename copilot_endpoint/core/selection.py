"""Weighted selection among configured Copilot endpoints.

Architectural role:
    Consumes the `weight` parameter of each configured endpoint. The API and
    CLI entrypoints build the endpoint list once and pick one endpoint per
    chat turn.

Determinism:
    Selection is random unless a seeded `random.Random` is supplied.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable

from copilot_endpoint.llm.errors import NoEndpointConfiguredError
from copilot_endpoint.llm.provider_config import EndpointCopilotParameters, load_endpoint_configs
from copilot_endpoint.llm.service import endpoint_copilot

logger = logging.getLogger(__name__)


@dataclass
class ConfiguredEndpoint:
    """Endpoint callable paired with the parameters it was built from."""

    name: str
    parameters: EndpointCopilotParameters
    generate: Callable

    @property
    def weight(self) -> int:
        return self.parameters.weight


def build_endpoints(configs=None, **endpoint_kwargs) -> list[ConfiguredEndpoint]:
    """Build endpoints from parameter objects/dicts, or from the environment.

    Extra keyword arguments are forwarded to `endpoint_copilot`.
    """
    if configs is None:
        configs = load_endpoint_configs()

    endpoints = []
    for index, config in enumerate(configs):
        generate = endpoint_copilot(config, **endpoint_kwargs)
        endpoints.append(
            ConfiguredEndpoint(
                name=f"copilot-{index}",
                parameters=generate.parameters,
                generate=generate,
            )
        )

    logger.info("Configured %d Copilot endpoint(s)", len(endpoints))
    return endpoints


def select_endpoint(endpoints, rng=None) -> ConfiguredEndpoint:
    """Pick one endpoint with probability proportional to its weight."""
    if not endpoints:
        raise NoEndpointConfiguredError()

    if len(endpoints) == 1:
        return endpoints[0]

    chooser = rng or random
    return chooser.choices(endpoints, weights=[e.weight for e in endpoints], k=1)[0]
