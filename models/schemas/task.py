from datetime import timezone

from marshmallow import Schema, fields, validate, validates, ValidationError, EXCLUDE

from models.schemas.common import UTCDateTime, validate_not_past
from models.task import TASK_STATUSES, TASK_PRIORITIES


class TaskCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(allow_none=True)
    status = fields.String(load_default="todo", validate=validate.OneOf(TASK_STATUSES))
    priority = fields.String(load_default="medium", validate=validate.OneOf(TASK_PRIORITIES))
    due_date = fields.AwareDateTime(allow_none=True, default_timezone=timezone.utc)

    @validates("title")
    def _validate_title(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("title cannot be blank.")

    @validates("due_date")
    def _validate_due_date(self, value, **kwargs):
        validate_not_past(value)


class TaskUpdateSchema(TaskCreateSchema):
    # All optional, but validate if present
    title = fields.String(validate=validate.Length(min=1, max=255))
    status = fields.String(validate=validate.OneOf(TASK_STATUSES))
    priority = fields.String(validate=validate.OneOf(TASK_PRIORITIES))


class TaskOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    status = fields.String()
    priority = fields.String()
    due_date = UTCDateTime(allow_none=True)
    completed_at = UTCDateTime(allow_none=True)
    created_at = UTCDateTime()
    updated_at = UTCDateTime()
