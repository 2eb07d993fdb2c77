from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """The authenticated caller, resolved once per request from the session cookie."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
