"""
Regulation change notifications for the upload service.

The upload service caches project regulations; every create/update/delete
is announced so it can drop its copy. Delivery is best effort: one POST,
short timeout, failures are logged and never reach the caller.

Request handlers use ``notify_later``: the POST runs as a tracked task on
the event loop, so a slow upload service never delays the response. The
app lifespan drains pending deliveries on shutdown.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

EVENTS_PATH = "/api/v1/regulation-events"


class RegulationChangeKind(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass
class RegulationChangedEvent:
    kind: RegulationChangeKind
    project_id: int
    regulation_name: str
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    def to_payload(self) -> dict:
        return {
            "event_type": "RegulationChanged",
            "kind": self.kind.value,
            "project_id": self.project_id,
            "regulation_name": self.regulation_name,
            "occurred_at": self.occurred_at.isoformat(),
        }


class RegulationChangeNotifier:
    """Posts RegulationChanged events to the upload service."""

    def __init__(self, endpoint: str, timeout: float = 2.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def is_enabled(self) -> bool:
        return bool(self.endpoint)

    async def notify(self, event: RegulationChangedEvent) -> bool:
        """Deliver one event. Returns True on a 2xx answer, False otherwise."""
        if not self.is_enabled:
            logger.debug("Upload service URL not set, skipping %s event for '%s'",
                         event.kind.value, event.regulation_name)
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.endpoint}{EVENTS_PATH}", json=event.to_payload())
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to deliver regulation %s event (project=%s, regulation=%s): %s",
                event.kind.value, event.project_id, event.regulation_name, exc,
            )
            return False
        except Exception:
            logger.exception("Unexpected error delivering regulation %s event", event.kind.value)
            return False

        logger.debug("Regulation %s event delivered for project %s",
                     event.kind.value, event.project_id)
        return True

    def notify_later(self, event: RegulationChangedEvent) -> asyncio.Task:
        """Schedule delivery on the running loop and return without waiting for it."""
        task = asyncio.get_running_loop().create_task(self.notify(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for deliveries still in flight."""
        if self._pending:
            logger.info("Waiting for %d pending regulation event(s)", len(self._pending))
            await asyncio.gather(*self._pending, return_exceptions=True)


@lru_cache(maxsize=1)
def get_notifier() -> RegulationChangeNotifier:
    """FastAPI dependency, one shared instance per process (overridden in tests)."""
    return RegulationChangeNotifier(settings.UPLOAD_SERVICE_URL, settings.NOTIFY_TIMEOUT_SECONDS)
