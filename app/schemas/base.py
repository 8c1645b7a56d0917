from datetime import datetime
from typing import Annotated, Optional

from email_validator import validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for every payload: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Message(APIModel):
    message: str


def check_email(value: str) -> str:
    """Reject malformed addresses but keep the submitted spelling; uniqueness is case-sensitive."""
    validate_email(value, check_deliverability=False)
    return value


Email = Annotated[str, AfterValidator(check_email)]


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive local time; convert aware values on the way in."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value
