"""
Subscriber persistence.

SubscriberStore talks to the Supabase ``subscribers`` table, InMemorySubscriberStore
keeps the same records in a dict for local runs and tests. Both raise the error
kinds from app.core.exceptions instead of leaking client specific errors.
"""
from app.core.config import settings
from app.core.database import get_supabase_service
from app.core.exceptions import DuplicateKeyError, StoreUnavailableError, SubscriptionError
from app.models.subscriber import Subscriber
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"

def _is_duplicate_key(error: Exception) -> bool:
    return getattr(error, "code", None) == UNIQUE_VIOLATION or "duplicate key" in str(error)

def _parse_created_at(value) -> Optional[datetime]:
    """PostgREST timestamptz, "Z" or offset suffixed; naive values are taken as UTC."""
    if not value:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def _to_subscriber(row: Dict[str, Any]) -> Subscriber:
    return Subscriber(
        email=row["email"],
        is_coming_soon=row.get("is_coming_soon") is not False,
        follow_up_sent=bool(row.get("follow_up_sent") or False),
        created_at=_parse_created_at(row.get("created_at")),
    )

class SubscriberStore:
    """Subscriber records in Supabase, unique on email."""

    def __init__(self, client=None, table_name: Optional[str] = None):
        self._client = client
        self.table_name = table_name or settings.SUBSCRIBERS_TABLE

    @property
    def supabase(self):
        if self._client is not None:
            return self._client
        return get_supabase_service()

    def _execute(self, action: str, build_query):
        try:
            return build_query(self.supabase.table(self.table_name)).execute()
        except SubscriptionError:
            raise
        except Exception as e:
            if _is_duplicate_key(e):
                raise DuplicateKeyError() from e
            logger.error(f"Error during subscriber {action}: {e}")
            raise StoreUnavailableError(f"Failed to {action} subscriber") from e

    async def create(self, email: str) -> Subscriber:
        """Insert a new subscriber awaiting launch; DuplicateKeyError if the email exists."""
        subscriber = Subscriber(email=email)
        response = self._execute("create", lambda t: t.insert(subscriber.to_row()))
        if not response.data:
            raise StoreUnavailableError("Failed to insert subscriber")
        logger.info(f"Subscriber created: {email}")
        return _to_subscriber(response.data[0])

    async def find_awaiting_launch(self) -> List[Subscriber]:
        response = self._execute("lookup", lambda t: t.select('*').eq('is_coming_soon', True))
        return [_to_subscriber(row) for row in (response.data or [])]

    async def find_by_email(self, email: str) -> Optional[Subscriber]:
        response = self._execute("lookup", lambda t: t.select('*').eq('email', email))
        return _to_subscriber(response.data[0]) if response.data else None

    async def mark_active(self, email: str) -> bool:
        """Flip to active and record the follow-up in one update. Returns whether the row exists."""
        response = self._execute(
            "update",
            lambda t: t.update({'is_coming_soon': False, 'follow_up_sent': True}).eq('email', email)
        )
        return bool(response.data)

    async def delete(self, email: str) -> bool:
        response = self._execute("delete", lambda t: t.delete().eq('email', email))
        return bool(response.data)

    async def count_active(self) -> int:
        response = self._execute(
            "count",
            lambda t: t.select('email', count='exact').eq('is_coming_soon', False)
        )
        return response.count or 0

    async def is_site_live(self) -> bool:
        """The site is live once any subscriber has been activated."""
        return await self.count_active() > 0

    async def ping(self) -> bool:
        self._execute("ping", lambda t: t.select('email').limit(1))
        return True

class InMemorySubscriberStore:
    """Dict backed store with the same semantics as SubscriberStore."""

    def __init__(self):
        self._records: Dict[str, Subscriber] = {}

    async def create(self, email: str) -> Subscriber:
        if email in self._records:
            raise DuplicateKeyError()
        subscriber = Subscriber(email=email)
        self._records[email] = subscriber
        logger.info(f"Subscriber created: {email}")
        return subscriber.model_copy()

    async def find_awaiting_launch(self) -> List[Subscriber]:
        return [s.model_copy() for s in self._records.values() if s.is_awaiting_launch]

    async def find_by_email(self, email: str) -> Optional[Subscriber]:
        subscriber = self._records.get(email)
        return subscriber.model_copy() if subscriber else None

    async def mark_active(self, email: str) -> bool:
        subscriber = self._records.get(email)
        if subscriber is None:
            return False
        subscriber.is_awaiting_launch = False
        subscriber.follow_up_sent = True
        return True

    async def delete(self, email: str) -> bool:
        return self._records.pop(email, None) is not None

    async def count_active(self) -> int:
        return sum(1 for s in self._records.values() if not s.is_awaiting_launch)

    async def is_site_live(self) -> bool:
        return await self.count_active() > 0

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._records)

_store_instance = None

def get_subscriber_store():
    """Get the configured store (lazy initialization)."""
    global _store_instance
    if _store_instance is None:
        if settings.STORE_BACKEND == "memory":
            _store_instance = InMemorySubscriberStore()
        else:
            _store_instance = SubscriberStore()
    return _store_instance
