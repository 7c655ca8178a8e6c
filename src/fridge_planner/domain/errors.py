"""Error taxonomy for the generation workflow."""

from typing import ClassVar


class GenerationError(Exception):
    """Base class for stage failures; every one is terminal for its run."""

    kind: ClassVar[str] = "generation_error"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class NoResponse(GenerationError):
    """The completion provider returned no content."""

    kind = "no_response"


class MalformedResponse(GenerationError):
    """The response text could not be parsed as JSON."""

    kind = "malformed_response"

    def __init__(
        self, message: str, *, raw_text: str, stage: str | None = None
    ) -> None:
        super().__init__(message, stage=stage)
        self.raw_text = raw_text


class SchemaMismatch(GenerationError):
    """Parsed JSON is missing a required key or has the wrong shape."""

    kind = "schema_mismatch"

    def __init__(
        self,
        message: str,
        *,
        field: str,
        index: int | None = None,
        path: str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.field = field
        self.index = index
        self.path = path


class ProviderTransportError(GenerationError):
    """The network call to the completion provider failed."""

    kind = "provider_transport_error"


class InvalidTransition(Exception):
    """A workflow transition was attempted from an incompatible state."""


class GenerationInProgress(Exception):
    """A generation run is already in flight for the user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"A meal plan is already being generated for {user_id}")
        self.user_id = user_id


class RunNotFound(LookupError):
    """No generation run exists for the given id."""


class RecipeNotFound(LookupError):
    """A run has no generated recipe with the given name."""
