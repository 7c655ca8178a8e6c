"""Supabase-backed repository for generation runs."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from fridge_planner.domain.workflow import GenerationRun, WorkflowState
from fridge_planner.services.meal_plans import GenerationRunRepository

_COLUMNS = "id, user_id, status, stage_index, state_json, retry_of, created_at"


@dataclass
class SupabaseRunRepository(GenerationRunRepository):
    """Persists every workflow transition to the generation_runs table."""

    client: Client

    def create_run(
        self, user_id: str, state: WorkflowState, retry_of: UUID | None = None
    ) -> GenerationRun:
        """Create a run row and return it."""
        response = (
            self.client.table("generation_runs")
            .insert(
                {
                    "user_id": user_id,
                    "status": state.status.value,
                    "stage_index": state.stage_index,
                    "state_json": state.model_dump(mode="json"),
                    "retry_of": str(retry_of) if retry_of else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create generation run")
        return _parse_run(response.data[0])

    def get_run(self, run_id: UUID) -> GenerationRun | None:
        """Return a run by id, if present."""
        response = (
            self.client.table("generation_runs")
            .select(_COLUMNS)
            .eq("id", str(run_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_run(response.data[0])

    def update_run(self, run_id: UUID, state: WorkflowState) -> None:
        """Persist the latest state of a run."""
        self.client.table("generation_runs").update(
            {
                "status": state.status.value,
                "stage_index": state.stage_index,
                "state_json": state.model_dump(mode="json"),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(run_id)).execute()


def _parse_run(row: dict[str, object]) -> GenerationRun:
    """Parse a run row into a domain record."""
    created_raw = row.get("created_at")
    return GenerationRun(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        state=WorkflowState.model_validate(row["state_json"]),
        retry_of=UUID(str(row["retry_of"])) if row.get("retry_of") else None,
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
