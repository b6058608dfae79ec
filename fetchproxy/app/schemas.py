from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class FetchRequest(BaseModel):
    """POST body. ``url`` stays untyped so a non-string is reported as a bad URL."""
    model_config = ConfigDict(extra="ignore")

    url: Any = None


class FetchSuccess(BaseModel):
    html: str
    size: int
    cached: bool


class HealthResponse(BaseModel):
    ok: bool
    rate_limit_entries: Optional[int] = None
    cache_entries: Optional[int] = None
