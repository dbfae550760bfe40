"""Copilot Studio endpoint package.

Architectural role:
    Provides endpoint configuration, the Direct Line transport and the adapter
    that turns a polled conversation into streamed text-generation units.

Module split:
    - `provider_config`: validated endpoint parameters and environment lookup.
    - `client`: Direct Line HTTP transport and error mapping.
    - `service`: endpoint factory and reply polling loop.
    - `stream_types`: streamed output unit contracts.
    - `errors`: adapter failure kinds.
"""
