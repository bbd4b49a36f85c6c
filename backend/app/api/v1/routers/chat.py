# app/api/v1/routers/chat.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.deps import get_current_user
from app.api.v1.serializers import chat_message_to_dict
from app.models.user import User
from app.schemas.chat import ChatMessageIn
from app.services.chat import chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/results")
async def send_message(body: ChatMessageIn, current: User = Depends(get_current_user)):
    """
    Ask the assistant about one week's goals and results.

    Returns:
        dict: {"success": True, "message": ChatMessage} with the assistant's answer

    Raises:
        HTTPException (403): userId is not the caller
        NotFoundError (404): Goal not found
        UpstreamError (502): Chat provider failed on every attempt
    """
    if str(current.id) != body.userId:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized to send messages as this user")
    answer = await chat_service.send_chat_message(body.goalId, body.userId, body.message)
    return {"success": True, "message": chat_message_to_dict(answer)}


@router.get("/results/{goal_id}")
async def chat_history(goal_id: str, current: User = Depends(get_current_user)):
    messages = await chat_service.get_chat_history(goal_id)
    return {"messages": [chat_message_to_dict(m) for m in messages]}
