"""Stage execution against the completion provider."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from fridge_planner.domain.errors import NoResponse

_logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Interface for a chat-style completion provider."""

    async def complete(
        self,
        *,
        system_instruction: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Return the response text, or None when the provider sent no content.

        Transport failures raise ``ProviderTransportError``.
        """


@dataclass
class StageExecutor:
    """Sends one prompt per stage and returns the raw response text."""

    client: CompletionClient
    temperature: float = 0.7
    max_tokens: dict[str, int] = field(default_factory=dict)
    default_max_tokens: int = 1000

    async def run(self, stage: str, system_instruction: str, prompt: str) -> str:
        """Run a single stage call; no retries are attempted."""
        max_tokens = self.max_tokens.get(stage, self.default_max_tokens)
        _logger.info(
            "Running stage %s (prompt_chars=%s, max_tokens=%s)",
            stage,
            len(prompt),
            max_tokens,
        )
        text = await self.client.complete(
            system_instruction=system_instruction,
            user_prompt=prompt,
            temperature=self.temperature,
            max_tokens=max_tokens,
        )
        if text is None or not text.strip():
            raise NoResponse("The completion provider returned no content", stage=stage)
        return text
