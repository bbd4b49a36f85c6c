# app/api/v1/routers/goals.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.deps import get_current_user, require_roles
from app.api.v1.serializers import comment_to_dict, goal_to_dict, reply_to_dict
from app.models.user import MANAGER_ROLES, Role, User
from app.schemas.goal import CommentIn, ReplyIn, SaveGoalsIn, SubmitResultsIn
from app.services.goals import goal_service

router = APIRouter(prefix="/goals", tags=["goals"])


def _ensure_self(current: User, user_id: str, message: str) -> None:
    """Reject bodies that act on behalf of another user."""
    if str(current.id) != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


@router.get("/user/{user_id}")
async def list_user_goals(user_id: str, current: User = Depends(get_current_user)):
    """
    Get all weekly goals of a user, newest week first.

    ICs may only read their own goals; managers and admins may read anyone's.

    Returns:
        dict: {"goals": [Goal, ...]}

    Raises:
        HTTPException (403): IC reading another user's goals
    """
    if current.role not in MANAGER_ROLES and str(current.id) != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized to view these goals")
    goals = await goal_service.get_goals_by_user(user_id)
    return {"goals": [goal_to_dict(g) for g in goals]}


@router.get("/{goal_id}")
async def get_goal(goal_id: str, current: User = Depends(get_current_user)):
    """
    Get one goal by id.

    Raises:
        NotFoundError (404): Goal not found
        HTTPException (403): IC reading another user's goal
    """
    goal = await goal_service.get_goal_by_id(goal_id)
    if current.role not in MANAGER_ROLES and str(goal.user_id) != str(current.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized to view this goal")
    return {"goal": goal_to_dict(goal)}


@router.post("")
async def save_goals(body: SaveGoalsIn, current: User = Depends(get_current_user)):
    """
    Create or update the goals for one week.

    Args:
        body: userId (must be the caller), weekStart, weekEnd (= weekStart + 6 days), goalsContent

    Raises:
        HTTPException (403): userId is not the caller
        ConflictError (409): Concurrent first save of the same week
    """
    _ensure_self(current, body.userId, "Unauthorized to save goals for this user")
    goal = await goal_service.save_goals(body.userId, body.weekStart, body.weekEnd, body.goalsContent)
    return {"success": True, "message": "Goals saved successfully", "goal": goal_to_dict(goal)}


@router.post("/{goal_id}/submit")
async def submit_goals(goal_id: str, current: User = Depends(require_roles(Role.IC))):
    """Mark the goals as submitted and notify the IC's manager."""
    goal = await goal_service.submit_goals(goal_id, str(current.id))
    return {"success": True, "message": "Goals submitted successfully", "goal": goal_to_dict(goal)}


@router.post("/{goal_id}/results")
async def submit_results(goal_id: str, body: SubmitResultsIn, current: User = Depends(get_current_user)):
    goal = await goal_service.submit_results(goal_id, str(current.id), body.resultsContent)
    return {"success": True, "message": "Results submitted successfully", "goal": goal_to_dict(goal)}


@router.post("/{goal_id}/comments")
async def add_comment(goal_id: str, body: CommentIn, current: User = Depends(get_current_user)):
    """
    Add a comment anchored to highlighted goals text.

    The goal owner is notified when someone else comments; the owner's
    manager is notified when the owner comments on their own goal.
    """
    _ensure_self(current, body.userId, "Unauthorized to add comment as this user")
    comment = await goal_service.add_comment(
        goal_id,
        body.userId,
        body.userName,
        body.userRole,
        body.text,
        body.highlightedText,
        body.position,
    )
    return {"success": True, "message": "Comment added successfully", "comment": comment_to_dict(comment)}


@router.post("/{goal_id}/comments/{comment_id}/replies")
async def reply_to_comment(goal_id: str, comment_id: str, body: ReplyIn, current: User = Depends(get_current_user)):
    _ensure_self(current, body.userId, "Unauthorized to add reply as this user")
    reply = await goal_service.reply_to_comment(goal_id, comment_id, body.userId, body.userName, body.text)
    return {"success": True, "message": "Reply added successfully", "reply": reply_to_dict(reply)}


@router.put("/{goal_id}/comments/{comment_id}/resolve")
async def resolve_comment(goal_id: str, comment_id: str, current: User = Depends(get_current_user)):
    await goal_service.resolve_comment(goal_id, comment_id)
    return {"success": True, "message": "Comment resolved successfully"}
