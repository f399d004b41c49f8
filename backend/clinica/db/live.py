"""
Live queries over the SQLAlchemy store.

A ``ChangeNotifier`` is attached to a session factory. During flushes it
collects the names of the tables touched by the session; when the session
commits it publishes them, and when it rolls back it drops them. A
``LiveQuery`` pairs a table scope with a loader; each subscriber receives the
initial snapshot and then a fresh snapshot after every commit that touches its
scope.
"""

import logging
import threading
from typing import Callable, Dict, Generic, Iterable, List, Optional, Set, Tuple, TypeVar

from sqlalchemy import MetaData, event
from sqlalchemy.orm import Session, sessionmaker

from .session import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")

Loader = Callable[[Session], List[T]]
ChangeCallback = Callable[[List[T]], None]

_PENDING_KEY = "clinica_changed_tables"


def cascade_map(metadata: MetaData) -> Dict[str, Set[str]]:
    """Map each table to every table whose rows disappear with it.

    Follows ``ON DELETE CASCADE`` foreign keys transitively, so deleting a
    user also reports ``appointments``, ``purchases`` and ``purchase_items``.
    """
    direct: Dict[str, Set[str]] = {name: set() for name in metadata.tables}
    for table in metadata.tables.values():
        for fk in table.foreign_keys:
            if (fk.ondelete or "").upper() == "CASCADE":
                direct.setdefault(fk.column.table.name, set()).add(table.name)

    expanded: Dict[str, Set[str]] = {}
    for name in direct:
        seen: Set[str] = set()
        stack = list(direct[name])
        while stack:
            child = stack.pop()
            if child in seen:
                continue
            seen.add(child)
            stack.extend(direct.get(child, ()))
        expanded[name] = seen
    return expanded


class Subscription:
    """Handle returned by ``LiveQuery.subscribe``."""

    def __init__(self, notifier: "ChangeNotifier", live_query: "LiveQuery", on_change):
        self._notifier = notifier
        self._live_query = live_query
        self._on_change = on_change
        self._active = True
        # Held while delivering so cancel() waits for an in-flight emission
        self._delivery_lock = threading.RLock()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def scope(self) -> Set[str]:
        return self._live_query.scope

    def cancel(self) -> None:
        """Stop receiving emissions. Nothing is delivered after this returns."""
        with self._delivery_lock:
            self._active = False
        self._notifier._remove(self)

    def _deliver(self) -> None:
        with self._delivery_lock:
            if not self._active:
                return
            snapshot = self._live_query.snapshot()
            try:
                self._on_change(snapshot)
            except Exception:
                logger.error(
                    "Live query subscriber failed",
                    extra={"context": {"scope": sorted(self.scope)}},
                    exc_info=True,
                )


class ChangeNotifier:
    """Publishes committed table changes of one session factory."""

    def __init__(self, session_factory: sessionmaker, metadata: Optional[MetaData] = None):
        self.session_factory = session_factory
        self._metadata = metadata if metadata is not None else Base.metadata
        self._cascades: Optional[Dict[str, Set[str]]] = None
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

        event.listen(session_factory, "after_flush", self._after_flush)
        event.listen(session_factory, "after_commit", self._after_commit)
        event.listen(session_factory, "after_soft_rollback", self._after_rollback)

    def subscribe(self, live_query: "LiveQuery", on_change) -> Subscription:
        subscription = Subscription(self, live_query, on_change)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, tables: Iterable[str]) -> None:
        """Re-run every subscription whose scope intersects ``tables``."""
        changed = set(tables)
        if not changed:
            return
        with self._lock:
            targets = [s for s in self._subscriptions if s.scope & changed]
        logger.debug(
            "Publishing committed changes",
            extra={"context": {"tables": sorted(changed), "subscribers": len(targets)}},
        )
        for subscription in targets:
            subscription._deliver()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _cascade_targets(self, table_name: str) -> Set[str]:
        if self._cascades is None:
            self._cascades = cascade_map(self._metadata)
        return self._cascades.get(table_name, set())

    # Session event hooks

    def _after_flush(self, session: Session, flush_context) -> None:
        pending: Set[str] = session.info.setdefault(_PENDING_KEY, set())
        for obj in session.new:
            pending.add(obj.__table__.name)
        for obj in session.dirty:
            if session.is_modified(obj, include_collections=False):
                pending.add(obj.__table__.name)
        for obj in session.deleted:
            name = obj.__table__.name
            pending.add(name)
            pending.update(self._cascade_targets(name))

    def _after_commit(self, session: Session) -> None:
        tables = session.info.pop(_PENDING_KEY, None)
        if tables:
            self.publish(tables)

    def _after_rollback(self, session: Session, previous_transaction) -> None:
        session.info.pop(_PENDING_KEY, None)


class LiveQuery(Generic[T]):
    """A query that re-emits its result whenever its tables change."""

    def __init__(self, notifier: ChangeNotifier, scope: Iterable[str], loader: Loader):
        self._notifier = notifier
        self.scope: Set[str] = set(scope)
        self._loader = loader

    def snapshot(self) -> List[T]:
        """Load the current result in a fresh session."""
        session = self._notifier.session_factory()
        try:
            return self._loader(session)
        finally:
            session.close()

    def subscribe(self, on_change: ChangeCallback) -> Tuple[List[T], Subscription]:
        """Register ``on_change``; returns the initial snapshot and the handle."""
        subscription = self._notifier.subscribe(self, on_change)
        return self.snapshot(), subscription


class LiveFeed(Generic[T]):
    """Keeps exactly one active subscription and swaps it when the scope changes.

    Used where a screen switches filters: the old subscription is cancelled
    before the new one starts, so a stale scope never emits.
    """

    def __init__(self, on_change: ChangeCallback):
        self._on_change = on_change
        self._subscription: Optional[Subscription] = None
        self._lock = threading.Lock()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    def switch(self, live_query: LiveQuery[T]) -> List[T]:
        with self._lock:
            self._cancel_current()
            snapshot, self._subscription = live_query.subscribe(self._on_change)
        return snapshot

    def close(self) -> None:
        with self._lock:
            self._cancel_current()

    def _cancel_current(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
