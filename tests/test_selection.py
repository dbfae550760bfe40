import random

import pytest

from copilot_endpoint.core.selection import build_endpoints, select_endpoint
from copilot_endpoint.llm.errors import NoEndpointConfiguredError
from fakes import FakeSession, activities


def test_build_endpoints_names_and_weights():
    endpoints = build_endpoints([
        {"type": "copilot", "weight": 1},
        {"type": "copilot", "weight": 5},
    ])

    assert [e.name for e in endpoints] == ["copilot-0", "copilot-1"]
    assert [e.weight for e in endpoints] == [1, 5]


def test_build_endpoints_forwards_session_factory():
    session = FakeSession(polls=[activities(("bot", "hey"))])
    (endpoint,) = build_endpoints(
        [{"type": "copilot", "directLineSecret": "S", "pollInterval": 0}],
        session_factory=lambda: session,
    )

    units = list(endpoint.generate([{"content": "hi"}]))

    assert units[-1].generated_text == "hey"


def test_select_endpoint_requires_endpoints():
    with pytest.raises(NoEndpointConfiguredError):
        select_endpoint([])


def test_select_endpoint_follows_weights():
    endpoints = build_endpoints([
        {"type": "copilot", "weight": 1},
        {"type": "copilot", "weight": 9},
    ])
    rng = random.Random(7)

    picks = [select_endpoint(endpoints, rng=rng).name for _ in range(2000)]

    share = picks.count("copilot-1") / len(picks)
    assert 0.85 < share < 0.95
