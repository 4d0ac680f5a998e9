"""
List view state for one resource: search, sort, optimistic delete, and the
live merge of change notifications.
"""
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime

from ..errors import BackofficeError, StoreError
from ..realtime.hub import INSERT, UPDATE, DELETE
from .optimistic import OptimisticMutation

logger = logging.getLogger(__name__)

ASC = 'asc'
DESC = 'desc'
DEFAULT_SORT_FIELD = 'created_at'


class Notice:
    """Transient message shown above the table"""

    def __init__(self, kind, message, expires_at):
        self.kind = kind
        self.message = message
        self.expires_at = expires_at

    def to_dict(self):
        return {'type': self.kind, 'message': self.message}

    def __repr__(self):
        return f'<Notice {self.kind}: {self.message}>'


class TableState:
    def __init__(self, resource, notice_ttl=3, clock=time.monotonic, origin=None):
        self.resource = resource
        # identifies this session's writes in published change events
        self.origin = origin or uuid.uuid4().hex
        self.schema = resource.schema
        self.notice_ttl = notice_ttl
        self.clock = clock
        self.records = None
        self.search_term = ''
        self.sort_field = DEFAULT_SORT_FIELD
        self.sort_direction = DESC
        self.deleting = None
        self.error = None
        self.subscription = None
        self._notice = None
        self._own_deletes = set()

    # Loading

    @property
    def loading(self):
        return self.records is None

    @property
    def is_empty(self):
        return not self.loading and not self.rows()

    def load(self):
        self.records = self.resource.list_or_empty()
        return self.records

    def _get_records(self):
        return self.records or []

    def _set_records(self, records):
        self.records = records

    # Search and sort

    def set_search(self, term):
        self.search_term = (term or '').strip()

    def sort_by(self, field):
        """Repeat selection of the same field toggles direction, a new field starts ascending"""
        if field == self.sort_field:
            self.sort_direction = ASC if self.sort_direction == DESC else DESC
        else:
            self.sort_field = field
            self.sort_direction = ASC

    def matches(self, record, term=None):
        term = (self.search_term if term is None else term).lower()
        if not term:
            return True
        for field in self.schema.search_fields:
            value = record.get(field)
            if value is not None and term in str(value).lower():
                return True
        for field in self.schema.search_list_fields:
            for item in record.get(field) or []:
                if isinstance(item, str) and term in item.lower():
                    return True
        return False

    def rows(self):
        filtered = [record for record in self._get_records() if self.matches(record)]
        present, missing = [], []
        for record in filtered:
            key = self._sort_key(record.get(self.sort_field))
            (missing if key is None else present).append((key, record))
        present.sort(key=lambda pair: pair[0], reverse=self.sort_direction == DESC)
        return [record for _, record in present] + [record for _, record in missing]

    def _sort_key(self, value):
        if value is None or value == '':
            return None
        field = self.sort_field
        if field in self.schema.date_fields:
            try:
                return datetime.fromisoformat(str(value)).timestamp()
            except ValueError:
                return None
        if field == 'id' or field in self.schema.numeric_fields:
            try:
                return float(value)
            except (TypeError, ValueError):
                return None
        return str(value).lower()

    # Notices

    @property
    def notice(self):
        if self._notice is not None and self.clock() >= self._notice.expires_at:
            self._notice = None
        return self._notice

    def notify(self, kind, message):
        self._notice = Notice(kind, message, self.clock() + self.notice_ttl)
        return self._notice

    # Delete

    def delete(self, record_id, confirm=False):
        """Remove a record; the row disappears locally before the store answers"""
        if not confirm:
            return False
        label = self.schema.label
        self.deleting = record_id
        self._own_deletes.add(record_id)
        try:
            with OptimisticMutation(self._get_records, self._set_records,
                                    lambda rows: [r for r in rows if r.get('id') != record_id]):
                self.resource.delete(record_id, origin=self.origin)
        except BackofficeError as e:
            self._own_deletes.discard(record_id)
            logger.error(f"Error deleting {self.resource.table} {record_id}: {e.message}")
            self.error = e.message
            self._refetch()
            self.notify('error', f'Failed to delete {label.lower()}. Please try again.')
            return False
        finally:
            self.deleting = None
        self.error = None
        self.notify('success', f'{label} successfully deleted')
        return True

    def _refetch(self):
        try:
            self.records = self.resource.list()
        except StoreError as e:
            logger.error(f"Could not refresh {self.resource.table} after failed delete: {e.message}")

    # Live sync

    def apply_change(self, event):
        if event.table != self.resource.table or self.records is None:
            return
        if event.event_type == INSERT:
            rows = [r for r in self.records if r.get('id') != event.new.get('id')]
            self.records = [event.new] + rows
        elif event.event_type == UPDATE:
            self.records = [event.new if r.get('id') == event.new.get('id') else r
                            for r in self.records]
        elif event.event_type == DELETE:
            record_id = event.record_id
            self.records = [r for r in self.records if r.get('id') != record_id]
            own = event.origin is not None and event.origin == self.origin
            if own or record_id == self.deleting or record_id in self._own_deletes:
                self._own_deletes.discard(record_id)
            else:
                self.notify('info', f'{self.schema.label} was deleted by another admin')

    @contextmanager
    def live(self):
        """Hold a subscription to the resource's change stream for the block's duration"""
        self.subscription = self.resource.subscribe()
        try:
            yield self
        finally:
            self.subscription.close()
            self.subscription = None

    def sync(self):
        """Apply every change notification received since the last sync"""
        if self.subscription is None:
            return 0
        events = self.subscription.drain()
        for event in events:
            self.apply_change(event)
        return len(events)

    def to_dict(self):
        notice = self.notice
        return {
            'loading': self.loading,
            'empty': self.is_empty,
            'search': self.search_term,
            'sort': {'field': self.sort_field, 'direction': self.sort_direction},
            'rows': self.rows(),
            'total': len(self._get_records()),
            'notice': notice.to_dict() if notice else None,
        }
