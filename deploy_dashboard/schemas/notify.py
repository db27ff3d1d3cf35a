from typing import Optional

from pydantic import BaseModel


class NotifyRequest(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


class NotifyResponse(BaseModel):
    ok: bool
    text: str
