"""
Team directory

A team is a manager plus a set of ICs. Membership lives on the IC
(`User.team_id`), so adding an IC to a team moves it out of any other team.
"""
import logging
from typing import Iterable, List, Optional

from app.core.errors import NotFoundError, ValidationError, ensure_uuid, storage_guard
from app.models.team import Team
from app.models.user import MANAGER_ROLES, Role, User

logger = logging.getLogger("uvicorn.error")


def _unique(ids: Iterable[str]) -> List[str]:
    seen, out = set(), []
    for raw in ids:
        key = str(ensure_uuid(raw, "IC user"))
        if key not in seen:
            seen.add(key)
            out.append(key)
    return out


class TeamService:

    async def _hydrate(self, team: Team) -> Team:
        """Attach `manager` and `members` so the team can be serialized."""
        await team.fetch_related("manager")
        team.members = await User.filter(team_id=team.id).order_by("email")
        return team

    async def _get_team(self, team_id: str) -> Team:
        tid = ensure_uuid(team_id, "Team")
        team = await Team.get_or_none(id=tid)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def _check_manager(self, manager_id: str) -> User:
        manager = await User.get_or_none(id=ensure_uuid(manager_id, "Manager"))
        if manager is None:
            raise NotFoundError("Manager not found")
        if manager.role not in MANAGER_ROLES:
            raise ValidationError("User must have manager or admin role to be assigned as team manager")
        return manager

    async def _check_ics(self, ic_ids: List[str]) -> None:
        if not ic_ids:
            return
        ics = await User.filter(id__in=ic_ids)
        if len(ics) != len(ic_ids):
            raise NotFoundError("One or more IC users not found")
        if any(u.role != Role.IC for u in ics):
            raise ValidationError("All team members must have IC role")

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------
    async def list(self) -> List[Team]:
        with storage_guard("Database error while listing teams"):
            teams = await Team.all().order_by("name")
            return [await self._hydrate(t) for t in teams]

    async def get(self, team_id: str) -> Team:
        with storage_guard("Database error while getting team"):
            return await self._hydrate(await self._get_team(team_id))

    async def get_by_manager(self, manager_id: str) -> List[Team]:
        mid = ensure_uuid(manager_id, "Manager")
        with storage_guard("Database error while getting teams by manager"):
            teams = await Team.filter(manager_id=mid).order_by("name")
            return [await self._hydrate(t) for t in teams]

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------
    async def create(self, name: str, manager_id: str, ic_ids: Optional[List[str]] = None) -> Team:
        if not name:
            raise ValidationError("Team name is required")
        if not manager_id:
            raise ValidationError("Manager ID is required")
        members = _unique(ic_ids or [])

        with storage_guard("Database error while creating team"):
            manager = await self._check_manager(manager_id)
            await self._check_ics(members)
            team = await Team.create(name=name, manager=manager)
            if members:
                await User.filter(id__in=members).update(team_id=team.id)
            logger.info("[teams] Created team %s (%s) with %d ICs", team.name, team.id, len(members))
            return await self._hydrate(team)

    async def update(
        self,
        team_id: str,
        name: Optional[str] = None,
        manager_id: Optional[str] = None,
        ic_ids: Optional[List[str]] = None,
    ) -> Team:
        """
        Change only the supplied fields.

        When `ic_ids` is given it replaces the member list: ICs missing from it
        leave the team, listed ICs join it.
        """
        with storage_guard("Database error while updating team"):
            team = await self._get_team(team_id)
            if manager_id:
                team.manager = await self._check_manager(manager_id)
            if ic_ids is not None:
                members = _unique(ic_ids)
                await self._check_ics(members)
                await User.filter(team_id=team.id).exclude(id__in=members).update(team_id=None)
                if members:
                    await User.filter(id__in=members).update(team_id=team.id)
            if name:
                team.name = name
            await team.save()
            logger.info("[teams] Updated team %s", team.id)
            return await self._hydrate(team)

    async def delete(self, team_id: str) -> None:
        with storage_guard("Database error while deleting team"):
            team = await self._get_team(team_id)
            await User.filter(team_id=team.id).update(team_id=None)
            await team.delete()
        logger.info("[teams] Deleted team %s", team.id)


team_service = TeamService()
