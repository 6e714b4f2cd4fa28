from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LineSource(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = "user"  # user, group, room
    user_id: Optional[str] = Field(default=None, alias="userId")
    group_id: Optional[str] = Field(default=None, alias="groupId")
    room_id: Optional[str] = Field(default=None, alias="roomId")


class LineMessageContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str  # text, image, sticker, ...
    text: Optional[str] = None


class LineEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str  # message, follow, unfollow, postback, ...
    reply_token: Optional[str] = Field(default=None, alias="replyToken")
    source: Optional[LineSource] = None
    message: Optional[LineMessageContent] = None
    timestamp: Optional[int] = None
    webhook_event_id: Optional[str] = Field(default=None, alias="webhookEventId")

    @property
    def user_id(self) -> Optional[str]:
        return self.source.user_id if self.source else None


class LineWebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    destination: Optional[str] = None
    events: list[LineEvent] = Field(default_factory=list)
