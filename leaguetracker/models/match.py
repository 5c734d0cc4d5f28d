"""Match data model."""

from typing import Optional
from pydantic import BaseModel


class Match(BaseModel):
    """A required fixture between two pairs."""

    id: str
    pair_a: int
    pair_b: int
    round: Optional[int] = None  # Only set by the circle method

    class Config:
        """Pydantic configuration."""

        frozen = True

    def get_title(self) -> str:
        """Get display title."""
        return f"Pair {self.pair_a} vs Pair {self.pair_b}"


class MatchRound(BaseModel):
    """Matches of one circle-method round, playable concurrently."""

    index: int
    matches: tuple[Match, ...] = ()
    bye: Optional[int] = None  # Pair sitting out this round

    class Config:
        """Pydantic configuration."""

        frozen = True
