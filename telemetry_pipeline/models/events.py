"""
Event models.

Wire format keys follow the collection endpoint's JSON (camelCase); Python
attributes are snake_case and mapped through aliases.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Viewport(BaseModel):
    """Visible viewport size in CSS pixels."""
    width: int = Field(default=0, description="Viewport width")
    height: int = Field(default=0, description="Viewport height")


class EventContext(BaseModel):
    """Environment the event was observed in."""
    url: str = Field(default="", description="Current page URL")
    user_agent: str = Field(default="", alias="userAgent", description="Host user agent string")
    viewport: Viewport = Field(default_factory=Viewport, description="Viewport dimensions")
    referrer: Optional[str] = Field(default=None, description="Referring URL, if any")

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "url": self.url,
            "userAgent": self.user_agent,
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
        }
        if self.referrer is not None:
            data["referrer"] = self.referrer
        return data


class Event(BaseModel):
    """A timestamped record of an observed action."""
    name: str = Field(description="Event name")
    properties: Dict[str, Any] = Field(default_factory=dict, description="String-keyed property map")
    user_id: Optional[int] = Field(default=None, alias="userId", description="User id snapshot at emission")
    session_id: str = Field(alias="sessionId", description="Pipeline session id")
    timestamp: int = Field(description="Milliseconds since epoch")
    context: Optional[EventContext] = Field(default=None, description="Environment context")

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON body posted to the collection endpoint."""
        data = {
            "name": self.name,
            "properties": dict(self.properties),
            "sessionId": self.session_id,
            "timestamp": self.timestamp,
        }
        if self.user_id is not None:
            data["userId"] = self.user_id
        if self.context is not None:
            data["context"] = self.context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Create Event from a wire-format dictionary."""
        return cls.model_validate(data)
