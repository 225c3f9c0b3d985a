from datetime import datetime
from typing import Optional

from pydantic import BaseModel, StrictStr


def format_rfc3339(moment: datetime) -> str:
    """RFC 3339 at second precision; UTC is written as "Z"."""
    text = moment.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def now_rfc3339() -> str:
    return format_rfc3339(datetime.now().astimezone())


# Inbound body for POST/PUT. Client-supplied id/created are ignored.
class UserPayload(BaseModel):
    name: Optional[StrictStr] = None
    email: Optional[StrictStr] = None


# Stored record and wire shape: {"id", "name", "email", "created"}
class User(BaseModel):
    id: int
    name: str
    email: str
    created: str
