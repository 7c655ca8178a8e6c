"""OpenAI Chat Completions client for stage execution."""

from dataclasses import dataclass

from openai import APIError, AsyncOpenAI

from fridge_planner.domain.errors import ProviderTransportError
from fridge_planner.services.completion import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by OpenAI chat completions."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAICompletionClient":
        """Create an OpenAI completion client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def complete(
        self,
        *,
        system_instruction: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Call OpenAI asking for a JSON object response."""
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except APIError as exc:
            raise ProviderTransportError(f"OpenAI request failed: {exc}") from exc
        if not completion.choices:
            return None
        return completion.choices[0].message.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
