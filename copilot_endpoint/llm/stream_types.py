"""Streamed output contracts produced by `copilot_endpoint.llm.service`.

Every invocation yields zero or more non-terminal units followed by exactly one
terminal unit. Non-terminal units carry their own fragment and no aggregate;
the terminal unit is flagged `special` and carries the full accumulated text in
both `token.text` and `generated_text`.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextGenerationToken:
    """One emitted fragment.

    Attributes:
        id: Per-invocation identifier, starting at 0 and strictly increasing.
        text: Fragment text (or the full text on the terminal unit).
        logprob: Always 0; the remote service exposes no likelihoods.
        special: True only on the terminal unit.
    """

    id: int
    text: str
    logprob: float = 0.0
    special: bool = False


@dataclass(frozen=True)
class TextGenerationStreamOutput:
    token: TextGenerationToken
    generated_text: str | None = None
    details: dict | None = None

    @property
    def is_final(self) -> bool:
        return self.generated_text is not None
