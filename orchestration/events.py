"""Orchestration events - Event, EventMetadata."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class EventMetadata:
    """Metadata for an event."""

    goal: str
    repo: str
    sha: str
    team_id: str
    timestamp: datetime


@dataclass
class Event:
    """Goal lifecycle event."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
