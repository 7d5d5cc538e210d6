"""Pydantic models for notifications and their actions."""

from typing import Iterator, List, Optional

from pydantic import BaseModel, Field, field_validator

from notimenu.menu.urls import extract_urls


class ActionEntry(BaseModel):
    """One action offered by a notification."""

    identifier: str = Field(..., description="Opaque token passed back to the client")
    name: str = Field(..., description="Human-readable label shown in the menu")


class NotificationActions(BaseModel):
    """Actions of a notification, as sent by the client."""

    actions: List[str] = Field(
        default_factory=list, description="Flat identifier/name pairs in client order"
    )
    display_block: str = Field(default="", description="Menu lines for these actions")

    @field_validator("actions")
    @classmethod
    def _pairs_only(cls, value: List[str]) -> List[str]:
        if len(value) % 2:
            raise ValueError("actions must be identifier/name pairs")
        return value

    def entries(self) -> Iterator[ActionEntry]:
        """Iterate over identifier/name pairs in order."""
        for i in range(0, len(self.actions), 2):
            yield ActionEntry(identifier=self.actions[i], name=self.actions[i + 1])

    @classmethod
    def build(cls, appname: str, actions: List[str]) -> "NotificationActions":
        """Create actions with their precomputed display block.

        Args:
            appname: Application that sent the notification
            actions: Flat identifier/name list

        Returns:
            NotificationActions instance
        """
        instance = cls(actions=list(actions))
        instance.display_block = "\n".join(
            format_action_line(appname, entry.name) for entry in instance.entries()
        )
        return instance


class Notification(BaseModel):
    """A displayed notification, read-only from the menu's point of view."""

    id: int = Field(..., description="Notification id assigned by the daemon")
    appname: str = Field(..., description="Name of the sending application")
    summary: str = Field(default="", description="Notification summary")
    body: str = Field(default="", description="Notification body")
    urls: str = Field(default="", description="Newline-joined URLs found in the text")
    actions: Optional[NotificationActions] = Field(None, description="Offered actions")

    @classmethod
    def create(
        cls,
        id: int,
        appname: str,
        summary: str = "",
        body: str = "",
        actions: Optional[List[str]] = None,
    ) -> "Notification":
        """Create notification with URLs and action display block filled in."""
        urls = extract_urls(f"{summary}\n{body}") or ""
        return cls(
            id=id,
            appname=appname,
            summary=summary,
            body=body,
            urls=urls,
            actions=NotificationActions.build(appname, actions) if actions else None,
        )


class ActionInvocation(BaseModel):
    """Record of an action chosen from the menu."""

    notification_id: int = Field(..., description="Id of the owning notification")
    appname: str = Field(..., description="Name of the sending application")
    action: str = Field(..., description="Action identifier")


def format_action_line(appname: str, name: str) -> str:
    """Render one action as a menu line."""
    return f"{appname} ({name})"
