from tortoise import fields, models

# Well-known primary key of the single settings row
SINGLETON_ID = 1

DEFAULT_DAY_OF_WEEK = 1  # Monday (0 = Sunday ... 6 = Saturday)
DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0
DEFAULT_TIMEZONE = "UTC"


class AutomationSettings(models.Model):
    """
    Global schedule used by the weekly reminder job.
    Exactly one row exists, always with id = SINGLETON_ID.
    """
    id = fields.IntField(pk=True)
    day_of_week = fields.IntField(default=DEFAULT_DAY_OF_WEEK)  # 0-6
    hour = fields.IntField(default=DEFAULT_HOUR)  # 0-23
    minute = fields.IntField(default=DEFAULT_MINUTE)  # 0-59
    timezone = fields.CharField(max_length=64, default=DEFAULT_TIMEZONE)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "settings"
