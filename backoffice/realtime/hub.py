"""
In-process change notification hub.

Resource writes publish a ``ChangeEvent`` per committed insert, update or
delete; list views hold a ``Subscription`` to the table they display. Each
subscriber owns a bounded queue so one slow reader never blocks a writer.
"""
import logging
import queue
import threading
from datetime import datetime

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'
EVENT_TYPES = (INSERT, UPDATE, DELETE)


class ChangeEvent:
    """A single insert/update/delete on one table"""

    def __init__(self, table, event_type, new=None, old=None, origin=None):
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown change type: {event_type}")
        self.table = table
        self.event_type = event_type
        self.new = new or {}
        self.old = old or {}
        self.origin = origin
        self.commit_timestamp = datetime.utcnow().isoformat()

    @property
    def record_id(self):
        source = self.old if self.event_type == DELETE else self.new
        return source.get('id')

    def to_dict(self):
        return {
            'table': self.table,
            'eventType': self.event_type,
            'new': self.new,
            'old': self.old,
            'origin': self.origin,
            'commit_timestamp': self.commit_timestamp,
        }

    def __repr__(self):
        return f'<ChangeEvent {self.event_type} {self.table}:{self.record_id}>'


class Subscription:
    """
    A registered reader on one table's change stream.

    Use as a context manager so the channel is always released:

        with hub.subscribe('blogs') as sub:
            event = sub.get(timeout=1)
    """

    def __init__(self, hub, table, maxsize):
        self.hub = hub
        self.table = table
        self._queue = queue.Queue(maxsize=maxsize)
        self.closed = False

    def deliver(self, event):
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.warning(f"Dropping {event!r}: subscriber queue for '{self.table}' is full")

    def get(self, timeout=None):
        """Next event, or None when nothing arrived within ``timeout`` seconds"""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self):
        if not self.closed:
            self.closed = True
            self.hub._remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ChangeHub:
    def __init__(self, queue_size=100):
        self.queue_size = queue_size
        self._channels = {}
        self._lock = threading.Lock()

    def init_app(self, app):
        self.queue_size = app.config.get('REALTIME_QUEUE_SIZE', self.queue_size)
        app.extensions['change_hub'] = self

    def subscribe(self, table):
        subscription = Subscription(self, table, self.queue_size)
        with self._lock:
            self._channels.setdefault(table, set()).add(subscription)
        logger.debug(f"Subscribed to '{table}' changes ({self.subscriber_count(table)} open)")
        return subscription

    def publish(self, event):
        with self._lock:
            subscribers = list(self._channels.get(event.table, ()))
        for subscription in subscribers:
            subscription.deliver(event)
        return len(subscribers)

    def subscriber_count(self, table):
        return len(self._channels.get(table, ()))

    def _remove(self, subscription):
        with self._lock:
            subscribers = self._channels.get(subscription.table)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._channels[subscription.table]
        logger.debug(f"Released '{subscription.table}' subscription")
