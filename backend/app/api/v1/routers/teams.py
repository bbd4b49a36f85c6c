# app/api/v1/routers/teams.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.deps import require_admin, require_manager
from app.api.v1.serializers import team_to_dict
from app.models.user import Role, User
from app.schemas.team import TeamCreateIn, TeamUpdateIn
from app.services.teams import team_service

router = APIRouter(prefix="/teams", tags=["teams"])
logger = logging.getLogger("uvicorn.error")


@router.get("")
async def list_teams(current: User = Depends(require_manager)):
    """
    List teams.

    Admins see every team; managers see the teams they manage.
    """
    if current.role == Role.ADMIN:
        teams = await team_service.list()
    else:
        teams = await team_service.get_by_manager(str(current.id))
    return {"teams": [team_to_dict(t) for t in teams]}


@router.get("/manager/{manager_id}")
async def list_manager_teams(manager_id: str, current: User = Depends(require_manager)):
    if current.role == Role.MANAGER and str(current.id) != manager_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    teams = await team_service.get_by_manager(manager_id)
    return {"teams": [team_to_dict(t) for t in teams]}


@router.get("/{team_id}")
async def get_team(team_id: str, current: User = Depends(require_manager)):
    """
    Get one team with its manager and members.

    Raises:
        NotFoundError (404): Team not found
        HTTPException (403): Manager reading a team they do not manage
    """
    team = await team_service.get(team_id)
    if current.role == Role.MANAGER and str(team.manager_id) != str(current.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return {"team": team_to_dict(team)}


@router.post("")
async def create_team(body: TeamCreateIn, admin: User = Depends(require_admin)):
    logger.info("[teams] Admin %s creating team %s", admin.email, body.name)
    team = await team_service.create(body.name, body.managerId, body.icIds)
    return {"success": True, "message": "Team created successfully", "team": team_to_dict(team)}


@router.put("/{team_id}")
async def update_team(team_id: str, body: TeamUpdateIn, admin: User = Depends(require_admin)):
    logger.info("[teams] Admin %s updating team %s", admin.email, team_id)
    team = await team_service.update(team_id, name=body.name, manager_id=body.managerId, ic_ids=body.icIds)
    return {"success": True, "message": "Team updated successfully", "team": team_to_dict(team)}


@router.delete("/{team_id}")
async def delete_team(team_id: str, admin: User = Depends(require_admin)):
    logger.info("[teams] Admin %s deleting team %s", admin.email, team_id)
    await team_service.delete(team_id)
    return {"success": True, "message": "Team deleted successfully"}
