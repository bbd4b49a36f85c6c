from enum import Enum
from tortoise import fields, models


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(models.Model):
    """
    One turn of the goal Q&A chat. Append-only, scoped to a goal.
    The integer primary key breaks ties between messages created in the same instant.
    """
    id = fields.IntField(pk=True)
    goal = fields.ForeignKeyField("models.Goal", related_name="chat_messages", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="chat_messages", on_delete=fields.CASCADE)
    role = fields.CharEnumField(ChatRole, max_length=16)
    content = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "chat_messages"
