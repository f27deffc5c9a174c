"""Team directory models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from dynastykeeper.models.base import RecordModel


class Team(RecordModel):
    """A school as listed in the team directory."""

    name: str
    conference: str = ""
    nick_name: str | None = None
    city: str | None = None
    state: str | None = None
    stadium: str | None = None
    abbrev: str | None = None


class CustomTeamConfig(RecordModel):
    """A user-created school that takes over an existing school's slot.

    The custom team inherits the replaced team's conference and state.
    """

    id: str = Field(default_factory=lambda: str(int(datetime.now(UTC).timestamp() * 1000)))
    replaced_team: str
    custom_name: str
    custom_nick_name: str | None = None
    custom_location: str | None = None
    custom_stadium: str | None = None
    custom_abbrev: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
