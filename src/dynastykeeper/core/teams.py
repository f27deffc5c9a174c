"""Team directory and effective team identity.

A dynasty can replace a real school with a custom one. Everything that asks
"which conference is this team in" must go through ``effective_team`` so the
replacement keeps the original school's conference.

Custom mappings live under the global ``customTeams`` record: they belong to
the installation, not to a single dynasty, and are not part of snapshots.
Conference membership is always resolved from the *current* mappings, so
recalculating an old season after changing a mapping can move games in or
out of conference play.
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from dynastykeeper.models.teams import CustomTeamConfig, Team

if TYPE_CHECKING:
    from dynastykeeper.db.repository import Repository

logger = logging.getLogger(__name__)

CUSTOM_TEAMS_KEY = "customTeams"

_teams_adapter = TypeAdapter(list[Team])
_custom_adapter = TypeAdapter(list[CustomTeamConfig])


class TeamDirectory:
    """Known schools plus any active custom replacements."""

    def __init__(
        self,
        teams: list[Team] | None = None,
        custom_teams: list[CustomTeamConfig] | None = None,
    ) -> None:
        self._teams: dict[str, Team] = {t.name: t for t in teams or []}
        self.custom_teams: list[CustomTeamConfig] = list(custom_teams or [])

    def __len__(self) -> int:
        return len(self._teams)

    def get_team(self, name: str) -> Team | None:
        """Directory lookup by exact name, ignoring custom mappings."""
        return self._teams.get(name)

    def effective_team(self, name: str) -> Team | None:
        """Resolve *name* through the custom mappings.

        - A custom name resolves to the custom identity in the replaced
          school's conference.
        - A replaced school's own name resolves to its replacement.
        - Anything else is a plain directory lookup; unknown names are None.
        """
        if not name:
            return None
        for custom in self.custom_teams:
            if custom.custom_name == name:
                return self._as_team(custom)
        for custom in self.custom_teams:
            if custom.replaced_team == name:
                return self._as_team(custom)
        return self._teams.get(name)

    def conference_of(self, name: str) -> str | None:
        team = self.effective_team(name)
        if team is None or not team.conference:
            return None
        return team.conference

    def same_conference(self, a: str, b: str) -> bool:
        conf_a = self.conference_of(a)
        return conf_a is not None and conf_a == self.conference_of(b)

    def is_custom_team(self, name: str) -> bool:
        return any(c.custom_name == name for c in self.custom_teams)

    def original_team_name(self, custom_name: str) -> str | None:
        for custom in self.custom_teams:
            if custom.custom_name == custom_name:
                return custom.replaced_team
        return None

    def all_available_teams(self) -> list[Team]:
        """Originals that have not been replaced, plus the custom teams, by name."""
        replaced = {c.replaced_team for c in self.custom_teams}
        available = [t.model_copy() for t in self._teams.values() if t.name not in replaced]
        for custom in self.custom_teams:
            team = self._as_team(custom)
            if team is not None:
                available.append(team)
        return sorted(available, key=lambda t: t.name)

    def with_custom_teams(self, custom_teams: list[CustomTeamConfig]) -> TeamDirectory:
        return TeamDirectory(list(self._teams.values()), custom_teams)

    def _as_team(self, custom: CustomTeamConfig) -> Team | None:
        original = self._teams.get(custom.replaced_team)
        if original is None:
            return None
        return Team(
            name=custom.custom_name,
            nick_name=custom.custom_nick_name,
            city=custom.custom_location,
            state=original.state,
            conference=original.conference,
            stadium=custom.custom_stadium,
            abbrev=custom.custom_abbrev,
        )


def load_team_directory(path: str | pathlib.Path) -> TeamDirectory:
    """Load a directory file: a JSON list of ``{"name", "conference", ...}``.

    A missing or unreadable file yields an empty directory; conference
    records then stay at zero but nothing else is affected.
    """
    path = pathlib.Path(path)
    try:
        teams = _teams_adapter.validate_json(path.read_bytes())
    except FileNotFoundError:
        logger.warning("team_directory_missing path=%s", path)
        return TeamDirectory()
    except ValidationError as exc:
        logger.warning("team_directory_invalid path=%s error=%s", path, exc)
        return TeamDirectory()
    logger.info("team_directory_loaded path=%s teams=%d", path, len(teams))
    return TeamDirectory(teams)


# --- Custom team persistence ---


async def load_custom_teams(repo: Repository) -> list[CustomTeamConfig]:
    raw = await repo.get_record(CUSTOM_TEAMS_KEY)
    if raw is None:
        return []
    try:
        return _custom_adapter.validate_json(raw)
    except ValidationError as exc:
        logger.warning("record_discarded key=%s reason=%s", CUSTOM_TEAMS_KEY, exc)
        await repo.delete_record(CUSTOM_TEAMS_KEY)
        return []


async def save_custom_teams(repo: Repository, custom_teams: list[CustomTeamConfig]) -> None:
    payload = [c.to_record() for c in custom_teams]
    await repo.set_record(CUSTOM_TEAMS_KEY, json.dumps(payload))


async def create_custom_team(
    repo: Repository,
    replaced_team: str,
    custom_name: str,
    **details: str | None,
) -> CustomTeamConfig:
    """Add a custom team, replacing any earlier custom team for the same school."""
    config = CustomTeamConfig(replaced_team=replaced_team, custom_name=custom_name, **details)
    custom_teams = [c for c in await load_custom_teams(repo) if c.replaced_team != replaced_team]
    custom_teams.append(config)
    await save_custom_teams(repo, custom_teams)
    logger.info("custom_team_created replaced=%s custom=%s", replaced_team, custom_name)
    return config


async def remove_custom_team(repo: Repository, replaced_team: str) -> bool:
    """Restore the original school. Returns False if nothing was replaced."""
    custom_teams = await load_custom_teams(repo)
    remaining = [c for c in custom_teams if c.replaced_team != replaced_team]
    if len(remaining) == len(custom_teams):
        return False
    await save_custom_teams(repo, remaining)
    logger.info("custom_team_removed replaced=%s", replaced_team)
    return True
