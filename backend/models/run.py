"""Pydantic models for scheduled runs."""

from pydantic import BaseModel, Field

from models.types import RunID


class RunDetails(BaseModel):
    """Run fields embedded in run-specific notification emails."""

    run_title: str
    run_date: str
    run_time: str
    meeting_point: str = ""
    approximate_distance: str | None = None


class RunRequiringLirf(RunDetails):
    """Scheduled run with unfilled LIRF (run leader) slots."""

    id: RunID
    lirfs_required: int = Field(..., ge=0)
    assigned_lirf_count: int = Field(..., ge=0)

    @property
    def lirf_vacancies(self) -> int:
        return self.lirfs_required - self.assigned_lirf_count

    @classmethod
    def from_row(cls, run: dict) -> "RunRequiringLirf":
        """Build from a scheduled_runs row, counting the assigned_lirf_* slots."""
        assigned = sum(
            1
            for slot in ("assigned_lirf_1", "assigned_lirf_2", "assigned_lirf_3")
            if run.get(slot)
        )
        return cls(
            id=run["id"],
            run_title=run.get("run_title") or "Untitled run",
            run_date=run["run_date"],
            run_time=run.get("run_time") or "",
            meeting_point=run.get("meeting_point") or "",
            approximate_distance=run.get("approximate_distance"),
            lirfs_required=run.get("lirfs_required") or 0,
            assigned_lirf_count=assigned,
        )


class DigestResult(BaseModel):
    """Outcome of one LIRF digest send cycle."""

    success: bool
    recipient_count: int = 0
    runs_requiring_lirf: int = 0
    errors: list[str] = Field(default_factory=list)
