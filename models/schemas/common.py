from datetime import datetime

from marshmallow import ValidationError, fields

from models.base_model import as_utc, utcnow


def validate_not_past(d: datetime) -> None:
    if d and as_utc(d) < utcnow():
        raise ValidationError("Date cannot be in the past.")


class UTCDateTime(fields.DateTime):
    """ISO 8601 output that always carries the UTC offset, whatever the backend returns."""

    def _serialize(self, value, attr, obj, **kwargs):
        return super()._serialize(as_utc(value), attr, obj, **kwargs)
