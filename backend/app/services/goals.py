"""
Goal Aggregate Service

Owns the weekly goal lifecycle: saving and submitting goals, submitting
results, and the comment/reply threads embedded in each goal.

Every mutation loads the goal, changes an in-memory copy and writes it back
with a compare-and-set on `Goal.version`. A lost race is retried from a fresh
load; when retries run out the caller gets a ConflictError.

Notifications are sent after the write has committed. Each one runs in its
own failure boundary, so a recipient lookup or email failure is logged and
never reported as a failure of the mutation itself.
"""
import datetime as dt
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ensure_uuid,
    storage_guard,
)
from app.models.goal import Comment, Goal, Reply, utc_now
from app.models.team import Team
from app.models.user import Role, User
from . import mailer

logger = logging.getLogger("uvicorn.error")

# Extra attempts after a lost compare-and-set
MAX_COMMIT_RETRIES = 3

# A mutator receives a freshly loaded goal and returns (field changes, result)
Mutator = Callable[[Goal], Tuple[Dict[str, Any], Any]]


class GoalService:

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------
    async def get_goals_by_user(self, user_id: str) -> List[Goal]:
        """All goals of one user, newest week first."""
        uid = ensure_uuid(user_id, "User")
        with storage_guard("Failed to fetch goals"):
            goals = await Goal.filter(user_id=uid).order_by("-week_start")
        logger.info("[goals] Found %d goals for user %s", len(goals), uid)
        return goals

    async def get_goal_by_id(self, goal_id: str) -> Goal:
        return await self._load(goal_id)

    async def _load(self, goal_id: str) -> Goal:
        gid = ensure_uuid(goal_id, "Goal")
        with storage_guard("Failed to fetch goal"):
            goal = await Goal.get_or_none(id=gid)
        if goal is None:
            raise NotFoundError("Goal not found")
        return goal

    # ---------------------------------------------------------------------
    # Persistence
    # ---------------------------------------------------------------------
    async def _commit(self, goal: Goal, context: str, **changes) -> bool:
        """
        Write `changes` only if nobody else wrote the goal since it was loaded.

        Returns:
        - True when the row was updated (the in-memory goal then reflects the write)
        - False when the version moved on (caller should reload and retry)
        """
        changes["updated_at"] = utc_now()
        changes["version"] = goal.version + 1
        with storage_guard(context):
            updated = await Goal.filter(id=goal.id, version=goal.version).update(**changes)
        if not updated:
            return False
        for key, value in changes.items():
            setattr(goal, key, value)
        return True

    async def _mutate(self, goal_id: str, context: str, mutator: Mutator) -> Tuple[Goal, Any]:
        """Load-mutate-commit loop shared by every aggregate mutation."""
        for attempt in range(MAX_COMMIT_RETRIES + 1):
            goal = await self._load(goal_id)
            changes, result = mutator(goal)
            if await self._commit(goal, context, **changes):
                return goal, result
            logger.warning("[goals] Version conflict on goal %s (attempt %d)", goal.id, attempt + 1)
        raise ConflictError(f"{context}: goal was modified concurrently, please retry")

    # ---------------------------------------------------------------------
    # Goals and results
    # ---------------------------------------------------------------------
    async def save_goals(self, user_id: str, week_start: dt.date, week_end: dt.date, goals_content: str) -> Goal:
        """
        Create the goal for (user, week_start), or replace its goals content.

        Raises:
        - ConflictError: a concurrent first save created the same week, or
          concurrent edits kept winning the compare-and-set
        """
        uid = ensure_uuid(user_id, "User")
        context = "Failed to save goals"
        logger.info("[goals] Saving goals for user %s, week %s", uid, week_start)

        for _ in range(MAX_COMMIT_RETRIES + 1):
            with storage_guard(context):
                goal = await Goal.get_or_none(user_id=uid, week_start=week_start)
            if goal is None:
                with storage_guard(context):
                    goal = await Goal.create(
                        user_id=uid,
                        week_start=week_start,
                        week_end=week_end,
                        goals_content=goals_content,
                        comments=[],
                    )
                logger.info("[goals] Created goal %s", goal.id)
                return goal
            if await self._commit(goal, context, goals_content=goals_content):
                logger.info("[goals] Updated goal %s", goal.id)
                return goal
        raise ConflictError(f"{context}: goal was modified concurrently, please retry")

    async def submit_goals(self, goal_id: str, user_id: str) -> Goal:
        owner_id = str(ensure_uuid(user_id, "User"))

        def mutate(goal: Goal):
            self._check_owner(goal, owner_id, "Unauthorized to submit this goal")
            return {"goals_submitted_at": utc_now()}, None

        goal, _ = await self._mutate(goal_id, "Failed to submit goals", mutate)
        logger.info("[goals] Goals submitted: %s", goal.id)
        await self._isolated("goals submitted", self._notify_submitted(goal, "goals"))
        return goal

    async def submit_results(self, goal_id: str, user_id: str, results_content: str) -> Goal:
        owner_id = str(ensure_uuid(user_id, "User"))

        def mutate(goal: Goal):
            self._check_owner(goal, owner_id, "Unauthorized to submit results for this goal")
            return {"results_content": results_content, "results_submitted_at": utc_now()}, None

        goal, _ = await self._mutate(goal_id, "Failed to submit results", mutate)
        logger.info("[goals] Results submitted: %s", goal.id)
        await self._isolated("results submitted", self._notify_submitted(goal, "results"))
        return goal

    @staticmethod
    def _check_owner(goal: Goal, user_id: str, message: str) -> None:
        if str(goal.user_id) != user_id:
            raise UnauthorizedError(message)

    # ---------------------------------------------------------------------
    # Comment threads
    # ---------------------------------------------------------------------
    async def add_comment(
        self,
        goal_id: str,
        user_id: str,
        user_name: str,
        user_role: Role,
        text: str,
        highlighted_text: str,
        position: int,
    ) -> Comment:
        commenter_id = str(ensure_uuid(user_id, "User"))

        def mutate(goal: Goal):
            comments = goal.get_comments()
            now = utc_now()
            comment = Comment(
                userId=commenter_id,
                userName=user_name,
                userRole=user_role,
                text=text,
                highlightedText=highlighted_text,
                position=position,
                createdAt=now,
                updatedAt=now,
            )
            comments.append(comment)
            return {"comments": Goal.dump_comments(comments)}, comment

        goal, comment = await self._mutate(goal_id, "Failed to add comment", mutate)
        logger.info("[goals] Comment %s added to goal %s", comment.id, goal.id)
        await self._isolated("comment", self._notify_comment(goal, comment))
        return comment

    async def reply_to_comment(self, goal_id: str, comment_id: str, user_id: str, user_name: str, text: str) -> Reply:
        replier_id = str(ensure_uuid(user_id, "User"))

        def mutate(goal: Goal):
            comments = goal.get_comments()
            comment = goal.find_comment(comments, comment_id)
            if comment is None:
                raise NotFoundError("Comment not found")
            now = utc_now()
            reply = Reply(userId=replier_id, userName=user_name, text=text, createdAt=now)
            comment.replies.append(reply)
            comment.updatedAt = now
            return {"comments": Goal.dump_comments(comments)}, (comment, reply)

        goal, (comment, reply) = await self._mutate(goal_id, "Failed to add reply", mutate)
        logger.info("[goals] Reply %s added to comment %s", reply.id, comment.id)
        if comment.userId != replier_id:
            await self._isolated("reply", self._notify_reply(goal, comment, reply))
        return reply

    async def resolve_comment(self, goal_id: str, comment_id: str) -> None:
        """Mark a comment resolved. Resolving twice is a no-op."""
        goal = await self._load(goal_id)
        comment = goal.find_comment(goal.get_comments(), comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.resolved:
            return

        def mutate(goal: Goal):
            comments = goal.get_comments()
            comment = goal.find_comment(comments, comment_id)
            if comment is None:
                raise NotFoundError("Comment not found")
            comment.resolved = True
            comment.updatedAt = utc_now()
            return {"comments": Goal.dump_comments(comments)}, None

        await self._mutate(goal_id, "Failed to resolve comment", mutate)
        logger.info("[goals] Comment %s resolved", comment_id)

    # ---------------------------------------------------------------------
    # Notifications
    # ---------------------------------------------------------------------
    async def _isolated(self, what: str, notification: Awaitable[None]) -> None:
        try:
            await notification
        except Exception:
            logger.exception("[goals] Failed to send %s notification", what)

    async def _team_manager(self, user: Optional[User]) -> Optional[User]:
        if user is None or user.team_id is None:
            return None
        team = await Team.get_or_none(id=user.team_id)
        if team is None:
            return None
        return await User.get_or_none(id=team.manager_id)

    async def _notify_submitted(self, goal: Goal, kind: str) -> None:
        owner = await User.get_or_none(id=goal.user_id)
        manager = await self._team_manager(owner)
        if manager is None:
            logger.info("[goals] No manager to notify for goal %s", goal.id)
            return
        logger.info("[goals] Sending %s submission email to manager %s", kind, manager.email)
        await mailer.send_submitted_email(manager, owner, goal, kind)

    async def _notify_comment(self, goal: Goal, comment: Comment) -> None:
        owner = await User.get_or_none(id=goal.user_id)
        if owner is None:
            return
        if comment.userId != str(goal.user_id):
            commenter = await User.get_or_none(id=comment.userId)
            name = commenter.display_name if commenter else comment.userName
            logger.info("[goals] Sending comment email to goal owner %s", owner.email)
            await mailer.send_comment_email(owner, name, comment.text, goal)
            return
        manager = await self._team_manager(owner)
        if manager is None:
            return
        logger.info("[goals] Sending comment email to manager %s", manager.email)
        await mailer.send_comment_email(manager, comment.userName, comment.text, goal)

    async def _notify_reply(self, goal: Goal, comment: Comment, reply: Reply) -> None:
        author = await User.get_or_none(id=comment.userId)
        if author is None:
            return
        replier = await User.get_or_none(id=reply.userId)
        name = replier.display_name if replier else reply.userName
        logger.info("[goals] Sending reply email to %s", author.email)
        await mailer.send_reply_email(author, name, reply.text, comment.text, goal)


goal_service = GoalService()
