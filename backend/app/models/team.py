import uuid
from tortoise import fields, models


class Team(models.Model):
    """
    A manager's team of ICs.
    Members are the IC users whose `team_id` points here.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128)
    manager = fields.ForeignKeyField(
        "models.User",
        related_name="managed_teams",
        on_delete=fields.RESTRICT,
    )  # Must be a user with role manager or admin
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "teams"
