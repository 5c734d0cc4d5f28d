"""League state, remote row and view models."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class LeagueState(BaseModel):
    """Participant count and completion state of one league."""

    pair_count: int = Field(..., alias="pairCount")
    completed_map: Dict[str, bool] = Field(default_factory=dict, alias="completedMap")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @property
    def completed_keys(self) -> List[str]:
        """Keys currently marked complete."""
        return [key for key, done in self.completed_map.items() if done]

    def is_completed(self, match_key: str) -> bool:
        return bool(self.completed_map.get(match_key))

    def to_json(self) -> str:
        """Serialize in the persisted camelCase shape."""
        return self.model_dump_json(by_alias=True)


class MatchRow(BaseModel):
    """Row of the remote per-match completion table."""

    league: str
    match_key: str
    completed: bool = False


class LeagueSettingsRow(BaseModel):
    """Row of the remote per-league settings table."""

    league: str
    pair_count: int


class ChangeEvent(BaseModel):
    """
    Change notification delivered by a remote store subscription.

    `record` holds the new row for inserts and updates; `old_record` holds
    whatever the backend reports about the previous row (often only the
    primary key for deletes).
    """

    type: str  # INSERT, UPDATE, DELETE
    table: str
    record: Dict[str, Any] = Field(default_factory=dict)
    old_record: Dict[str, Any] = Field(default_factory=dict)

    @property
    def row(self) -> Dict[str, Any]:
        """The new row, falling back to the old one."""
        return self.record or self.old_record

    @property
    def is_delete(self) -> bool:
        return self.type.upper() == "DELETE"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChangeEvent":
        """
        Build an event from a realtime postgres_changes payload.

        Accepts both the nested (``{"data": {...}}``) and the flat payload
        shapes, with either ``record``/``old_record`` or ``new``/``old`` keys.
        """
        data = payload.get("data") or payload
        return cls(
            type=str(data.get("type") or data.get("eventType") or "UPDATE"),
            table=str(data.get("table") or ""),
            record=data.get("record") or data.get("new") or {},
            old_record=data.get("old_record") or data.get("old") or {},
        )


class MatchView(BaseModel):
    """One line of the fixture list shown to the user."""

    number: int
    key: str
    pair_a: int
    pair_b: int
    round: Optional[int] = None
    completed: bool = False


class LeagueView(BaseModel):
    """Everything the presentation layer needs for the active league."""

    league: str
    pair_count: int
    min_pair_count: int
    max_pair_count: int
    algorithm: str
    matches: List[MatchView] = []
    completed_count: int = 0
    total_matches: int = 0
    progress: int = 0
    edit_locked: bool = False
