from typing import Optional

from pydantic import BaseModel


class ProbeResultSchema(BaseModel):
    url: str
    ok: bool
    status: Optional[int] = None
    status_text: Optional[str] = None
    error: Optional[str] = None


class MonitorRunResponse(BaseModel):
    ok: bool
    checked: int
    failures: int
    results: list[ProbeResultSchema]
