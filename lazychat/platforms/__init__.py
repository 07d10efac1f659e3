"""Platform client protocol and the in-memory demo client."""

from __future__ import annotations

from .demo import DEMO_USER, DemoPlatformClient
from .types import CurrentUser, OutgoingAttachment, PlatformClient, SendMessageOptions

__all__ = [
    "CurrentUser",
    "DEMO_USER",
    "DemoPlatformClient",
    "OutgoingAttachment",
    "PlatformClient",
    "SendMessageOptions",
]
