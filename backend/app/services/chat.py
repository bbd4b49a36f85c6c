"""
Goal chat

Lets a user ask questions about one week's goals and results. The whole
conversation so far, together with the plain-text goals and results, is
packed into a single prompt for the configured chat provider.
"""
import logging
import re
from typing import List

from app.core.errors import NotFoundError, ensure_uuid, storage_guard
from app.models.chat_message import ChatMessage, ChatRole
from app.models.goal import Goal
from ..config import settings
from .llm import send_llm_request
from .mailer import format_day

logger = logging.getLogger("uvicorn.error")

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")

NOT_SUBMITTED = "Not submitted yet"

PREAMBLE = (
    "You are an AI assistant helping to analyze weekly goals and results "
    "for an OKR (Objectives and Key Results) tracking system."
)

CLOSING = """Please provide a helpful, insightful response based on the goals and results provided. Focus on:
- Analyzing progress and achievements
- Identifying patterns or areas for improvement
- Providing constructive feedback
- Answering specific questions about the data

Keep your response concise and actionable."""


def strip_html(text: str) -> str:
    """Replace tags with spaces and collapse whitespace."""
    return _SPACE_RE.sub(" ", _TAG_RE.sub(" ", text or "")).strip()


def build_prompt(goal: Goal, history: List[ChatMessage], question: str) -> str:
    goals_text = strip_html(goal.goals_content)
    results_text = strip_html(goal.results_content) if goal.results_content else NOT_SUBMITTED

    prompt = (
        f"{PREAMBLE}\n\n"
        f"Week Period: {format_day(goal.week_start)} to {format_day(goal.week_end)}\n\n"
        f"Goals for this week:\n{goals_text}\n\n"
        f"Results submitted:\n{results_text}\n\n"
    )
    if history:
        prompt += "\nPrevious conversation:\n"
        for msg in history:
            speaker = "User" if msg.role == ChatRole.USER else "Assistant"
            prompt += f"{speaker}: {msg.content}\n"

    prompt += f"\nUser's current question: {question}\n\n{CLOSING}"
    return prompt


class ChatService:

    async def get_chat_history(self, goal_id: str) -> List[ChatMessage]:
        """Messages for a goal, oldest first."""
        gid = ensure_uuid(goal_id, "Goal")
        with storage_guard("Failed to fetch chat history"):
            messages = await ChatMessage.filter(goal_id=gid).order_by("created_at", "id")
        logger.info("[chat] Found %d chat messages for goal %s", len(messages), gid)
        return messages

    async def send_chat_message(self, goal_id: str, user_id: str, message: str) -> ChatMessage:
        """
        Store the question, ask the chat provider and store its answer.

        Returns:
        - The assistant ChatMessage

        Raises:
        - NotFoundError: goal does not exist
        - UpstreamError: the provider failed on every attempt (the question stays stored)
        """
        gid = ensure_uuid(goal_id, "Goal")
        uid = ensure_uuid(user_id, "User")
        logger.info("[chat] Processing chat message for goal %s", gid)

        with storage_guard("Failed to process chat message"):
            goal = await Goal.get_or_none(id=gid)
        if goal is None:
            raise NotFoundError("Goal not found")

        with storage_guard("Failed to process chat message"):
            user_message = await ChatMessage.create(goal_id=gid, user_id=uid, role=ChatRole.USER, content=message)
        logger.info("[chat] User message saved: %s", user_message.id)

        history = await self.get_chat_history(str(gid))
        prompt = build_prompt(goal, history, message)

        answer = await send_llm_request(settings.llm_provider, settings.llm_model, prompt)

        with storage_guard("Failed to process chat message"):
            reply = await ChatMessage.create(goal_id=gid, user_id=uid, role=ChatRole.ASSISTANT, content=answer)
        logger.info("[chat] AI response saved: %s", reply.id)
        return reply


chat_service = ChatService()
