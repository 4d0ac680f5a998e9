import copy
import logging

from sqlalchemy.exc import SQLAlchemyError

from .. import db, hub
from ..errors import NotFoundError, StoreError, ValidationError
from ..realtime.hub import ChangeEvent, INSERT, UPDATE, DELETE
from .normalize import normalize_array, normalize_container

logger = logging.getLogger(__name__)


class ResourceSchema:
    """Describes one admin-managed table and how its records are written and searched"""

    def __init__(self, model, slug, label, fields, required=(), array_fields=(),
                 container_fields=None, numeric_fields=None, search_fields=(),
                 search_list_fields=(), date_fields=('created_at',),
                 partial_update=False, not_found_message=None):
        self.model = model
        self.slug = slug
        self.label = label
        self.fields = tuple(fields)
        self.required = tuple(required)
        self.array_fields = tuple(array_fields)
        self.container_fields = dict(container_fields or {})
        self.numeric_fields = dict(numeric_fields or {})
        self.search_fields = tuple(search_fields)
        self.search_list_fields = tuple(search_list_fields)
        self.date_fields = tuple(date_fields)
        self.partial_update = partial_update
        self.not_found_message = not_found_message or f'{label} not found'

    @property
    def table(self):
        return self.model.__tablename__


class Resource:
    """List/get/create/update/delete/subscribe for one table"""

    def __init__(self, schema):
        self.schema = schema

    @property
    def table(self):
        return self.schema.table

    def __repr__(self):
        return f'<Resource {self.table}>'

    # Reads

    def list(self):
        """All records, newest first"""
        model = self.schema.model
        try:
            rows = model.query.order_by(model.created_at.desc(), model.id.desc()).all()
        except SQLAlchemyError as e:
            raise self._store_error('list', e)
        return [row.to_dict() for row in rows]

    def list_or_empty(self):
        try:
            return self.list()
        except StoreError as e:
            logger.error(f"Error fetching {self.table}: {e.message}")
            return []

    def count(self):
        try:
            return self.schema.model.query.count()
        except SQLAlchemyError as e:
            raise self._store_error('count', e)

    def get(self, record_id):
        return self._get_row(record_id).to_dict()

    def _get_row(self, record_id):
        try:
            row = db.session.get(self.schema.model, int(record_id))
        except (TypeError, ValueError):
            raise NotFoundError(self.schema.not_found_message)
        except SQLAlchemyError as e:
            raise self._store_error('fetch', e)
        if row is None:
            raise NotFoundError(self.schema.not_found_message)
        return row

    # Writes

    def save(self, draft, origin=None):
        """Update when the draft carries an id, insert otherwise"""
        draft = dict(draft)
        record_id = draft.pop('id', None)
        if record_id:
            return self.update(record_id, draft, origin=origin)
        return self.create(draft, origin=origin)

    def create(self, data, origin=None):
        values = self.prepare(data, partial=False)
        row = self.schema.model(**values)
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise self._store_error('create', e)
        record = row.to_dict()
        logger.info(f"Created {self.table} record {row.id}")
        hub.publish(ChangeEvent(self.table, INSERT, new=copy.deepcopy(record), origin=origin))
        return record

    def update(self, record_id, data, partial=None, origin=None):
        if partial is None:
            partial = self.schema.partial_update
        row = self._get_row(record_id)
        old = row.to_dict()
        values = self.prepare(data, partial=partial)
        for key, value in values.items():
            setattr(row, key, value)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise self._store_error('update', e)
        record = row.to_dict()
        logger.info(f"Updated {self.table} record {row.id} ({', '.join(sorted(values))})")
        hub.publish(ChangeEvent(self.table, UPDATE, new=copy.deepcopy(record), old=old, origin=origin))
        return record

    def delete(self, record_id, origin=None):
        row = self._get_row(record_id)
        old = row.to_dict()
        try:
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise self._store_error('delete', e)
        logger.info(f"Deleted {self.table} record {old['id']}")
        hub.publish(ChangeEvent(self.table, DELETE, old=copy.deepcopy(old), origin=origin))
        return old

    def subscribe(self):
        return hub.subscribe(self.table)

    # Shaping

    def validate(self, data, partial=False):
        for field in self.schema.required:
            if partial and field not in data:
                continue
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                label = 'Title' if field == 'title' else field
                raise ValidationError(f'{label} is required', field=field)

    def prepare(self, data, partial=False):
        """Validate and normalize a payload into column values"""
        if not isinstance(data, dict):
            raise ValidationError('Record must be an object')
        values = {key: value for key, value in data.items() if key in self.schema.fields}
        ignored = set(data) - set(values) - {'id', 'created_at', 'updated_at'}
        if ignored:
            logger.debug(f"Ignoring unknown {self.table} fields: {sorted(ignored)}")

        if partial and not values:
            raise ValidationError('No fields to update')
        self.validate(values, partial=partial)

        for field, number_type in self.schema.numeric_fields.items():
            if field in values:
                values[field] = _coerce_number(field, values[field], number_type)

        for field in self.schema.array_fields:
            if not partial or field in values:
                values[field] = normalize_array(values.get(field))

        for field, container_type in self.schema.container_fields.items():
            if not partial or field in values:
                values[field] = normalize_container(values.get(field), container_type)
        return values

    def _store_error(self, action, error):
        message = str(getattr(error, 'orig', None) or error)
        logger.error(f"Error trying to {action} {self.table}: {message}")
        return StoreError(message)


def _coerce_number(field, value, number_type):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number', field=field)
    try:
        return number_type(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number', field=field)
