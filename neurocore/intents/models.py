"""Core data models for intent routing."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class Intent:
    """A namespaced action request routed to exactly one plugin."""

    action: str                        # "chat:send"
    data: Any = None                   # Opaque payload for the handler

    @property
    def namespace(self) -> str:
        """Namespace segment of the action ("chat" for "chat:send")."""
        return self.action.split(":", 1)[0]

    @property
    def verb(self) -> str:
        """Verb segment of the action, empty when the action has no namespace."""
        parts = self.action.split(":", 1)
        return parts[1] if len(parts) == 2 else ""


def action_namespace(action: str) -> str:
    """Extract the namespace segment from an action string."""
    return action.split(":", 1)[0]


@dataclass
class RequestContext:
    """Per-request information handed to a plugin alongside the intent."""

    request_id: str
    user_id: str = "system"
    session_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, user_id: str = "system", session_id: Optional[str] = None, **extras: Any) -> "RequestContext":
        """Create a context with a fresh request id."""
        return cls(request_id=str(uuid.uuid4()), user_id=user_id, session_id=session_id, extras=extras)


@dataclass
class PluginResult:
    """Result of executing an intent: a success/data/error triple."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "PluginResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str, data: Any = None) -> "PluginResult":
        return cls(success=False, data=data, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary form, omitting unset optional fields."""
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result
