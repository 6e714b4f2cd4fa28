from app.schemas.line import LineEvent, LineMessageContent, LineSource, LineWebhookPayload
from app.schemas.monitor import MonitorRunResponse, ProbeResultSchema

__all__ = [
    "LineEvent",
    "LineMessageContent",
    "LineSource",
    "LineWebhookPayload",
    "MonitorRunResponse",
    "ProbeResultSchema",
]
