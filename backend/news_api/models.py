from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, field_serializer

class CustomModel(BaseModel):
    """
    Common base for every pydantic schema in the project.
    Keeps the API data policy in one place.
    """
    model_config = ConfigDict(
        # Allow assignment by field name as well as by alias.
        populate_by_name=True,

        # Build schemas straight from SQLAlchemy objects.
        from_attributes=True,

        extra="forbid",
    )

    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """Render datetimes as ISO-8601 strings in UTC."""
        if isinstance(value, datetime):
            # Naive values come from the database in UTC.
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                value = value.astimezone(timezone.utc)
            return value.isoformat()
        return value


class MessageResponse(CustomModel):
    success: bool = True
    message: str
