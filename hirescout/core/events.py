"""
Event hook for scrape and discovery progress.

The core only calls the injected callback; pushing events to a UI, SSE stream
or websocket is the caller's job.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    START = "start"
    PROGRESS = "progress"
    SUCCESS = "success"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass
class ScrapeEvent:
    """A single lifecycle notification."""

    type: EventType
    source: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventCallback = Callable[[ScrapeEvent], None]


def emit_event(
    callback: Optional[EventCallback], event_type: EventType, source: str, **payload: Any
) -> None:
    """Deliver an event, logging (not raising) if the callback fails."""
    if callback is None:
        return
    try:
        callback(ScrapeEvent(type=event_type, source=source, payload=payload))
    except Exception as e:
        logger.warning(f"Event callback failed for {source} {event_type.value}: {e}")
