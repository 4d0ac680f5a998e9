"""
Draft records edited by the dashboard forms.

A draft is a plain dict of column values. ``submit`` validates it, shapes it
for the store and issues a single insert-or-update; on failure the draft is
kept and ``error`` holds the message for the form.
"""
import copy
import logging
import uuid

from ..errors import BackofficeError, ValidationError
from ..resources.normalize import EMPTY_LIST, compact, derive_discount_percentage, trim_course_syllabus

logger = logging.getLogger(__name__)


class DraftForm:
    defaults = {}
    image_bucket = None

    def __init__(self, resource, record=None, origin=None):
        self.resource = resource
        self.origin = origin
        self.data = copy.deepcopy(self.defaults)
        if record:
            self.data.update(copy.deepcopy(record))
        self.error = None
        self.upload_error = None
        self.submitting = False

    @classmethod
    def edit(cls, resource, record_id, origin=None):
        """Draft pre-filled with the stored record"""
        return cls(resource, resource.get(record_id), origin=origin)

    @property
    def record_id(self):
        return self.data.get('id')

    @property
    def is_edit(self):
        return bool(self.record_id)

    def set_field(self, name, value):
        self.data[name] = value

    # List fields

    def _list(self, name):
        items = self.data.get(name)
        if not isinstance(items, list):
            items = normalize_items(items)
            self.data[name] = items
        return items

    def add_item(self, name, value=''):
        self._list(name).append(value)

    def set_item(self, name, index, value):
        self._list(name)[index] = value

    def remove_item(self, name, index):
        items = self._list(name)
        del items[index]
        if not items:
            items.append('')

    # Submission

    def validate(self):
        title = self.data.get('title')
        if not title or not str(title).strip():
            raise ValidationError('Title is required', field='title')

    def to_payload(self):
        return copy.deepcopy(self.data)

    def submit(self):
        """Insert or update; returns the stored record, or None with ``error`` set"""
        self.error = None
        try:
            self.validate()
        except ValidationError as e:
            self.error = e.message
            return None

        self.submitting = True
        try:
            saved = self.resource.save(self.to_payload(), origin=self.origin)
        except BackofficeError as e:
            logger.error(f"Error saving {self.resource.table}: {e.message}")
            self.error = e.message
            return None
        finally:
            self.submitting = False
        self.data = copy.deepcopy(saved)
        return saved

    # Images

    def attach_image(self, storage, filename, data, content_type=None, field='image'):
        """Upload a selected file; a failed upload leaves the rest of the form usable"""
        self.upload_error = None
        try:
            result = storage.upload_image(self.image_bucket, filename, data, content_type=content_type)
        except BackofficeError as e:
            logger.error(f"Error uploading {field}: {e.message}")
            self.upload_error = e.message
            return None
        self.apply_upload(field, result)
        return result

    def apply_upload(self, field, result):
        self.data[field] = result.url


def normalize_items(value):
    if isinstance(value, (list, tuple)):
        return list(value) or list(EMPTY_LIST)
    if value:
        return [value]
    return list(EMPTY_LIST)


class BlogDraft(DraftForm):
    defaults = {'title': '', 'text': '', 'image': '', 'tags': []}
    image_bucket = 'blog-images'

    def add_tag(self, tag):
        tag = (tag or '').strip()
        tags = self.data.setdefault('tags', [])
        if tag and tag not in tags:
            tags.append(tag)
            return True
        return False

    def remove_tag(self, tag):
        self.data['tags'] = [t for t in self.data.get('tags') or [] if t != tag]

    def apply_upload(self, field, result):
        self.data[field] = result.url
        self.data['image_file_path'] = result.path
        self.data['image_file_name'] = result.filename

    def to_payload(self):
        payload = super().to_payload()
        payload['tags'] = compact(payload.get('tags'))
        return payload


class CourseDraft(DraftForm):
    defaults = {
        'title': '',
        'course_details': [''],
        'image': '',
        'courseIcon': '',
        'syllabus_title': [''],
        'syllabus_content': [['']],
    }
    image_bucket = 'course-images'

    def add_syllabus_section(self, title=''):
        self._list('syllabus_title').append(title)
        self.data.setdefault('syllabus_content', []).append([''])

    def remove_syllabus_section(self, index):
        del self._list('syllabus_title')[index]
        contents = self.data.setdefault('syllabus_content', [])
        if index < len(contents):
            del contents[index]
        if not self.data['syllabus_title']:
            self.data['syllabus_title'].append('')
            contents.append([''])

    def add_syllabus_item(self, section, value=''):
        contents = self.data.setdefault('syllabus_content', [])
        while len(contents) <= section:
            contents.append([])
        contents[section].append(value)

    def set_syllabus_item(self, section, index, value):
        self.data['syllabus_content'][section][index] = value

    def apply_upload(self, field, result):
        self.data[field] = result.url
        self.data[f'{field}_file_path'] = result.path

    def to_payload(self):
        payload = super().to_payload()
        payload.pop('image_file_path', None)
        payload.pop('courseIcon_file_path', None)
        payload['course_details'] = compact(payload.get('course_details'))
        payload['syllabus_title'], payload['syllabus_content'] = trim_course_syllabus(
            payload.get('syllabus_title'), payload.get('syllabus_content'))
        return payload


class LecturerDraft(DraftForm):
    defaults = {'fullName': '', 'field': '', 'lecturer_text': '', 'lecturer_image': ''}
    image_bucket = 'lecturers'

    def validate(self):
        name = self.data.get('fullName')
        if not name or not str(name).strip():
            raise ValidationError('fullName is required', field='fullName')

    def to_payload(self):
        payload = super().to_payload()
        payload.pop('updated_at', None)
        return payload


DEFAULT_SYLLABUS_TITLE = 'სილაბუსი'
TITLE_REQUIRED = 'სათაური აუცილებელია'


class SyllabusSection:
    """One syllabus block; ``id`` is stable while ``title`` is freely editable"""

    def __init__(self, title='', items=None, section_id=None):
        self.id = section_id or uuid.uuid4().hex
        self.title = title
        self.items = list(items) if items else ['']

    def to_dict(self):
        return {'id': self.id, 'title': self.title, 'items': list(self.items)}

    def __repr__(self):
        return f'<SyllabusSection {self.title!r} ({len(self.items)} items)>'


class OfferedCourseDraft(DraftForm):
    defaults = {
        'title': '',
        'text': '',
        'image': '',
        'courseIcon': '',
        'lecturers': [''],
        'lecturers_details': [''],
        'course_details': [''],
        'course_category': [''],
        'quantity_of_lessons': '',
        'quantity_of_students': '',
        'price': 0,
        'old_price': 0,
        'discount_percentage': '',
        'syllabus_title': [''],
        'syllabus_content': {},
    }
    image_bucket = 'public'
    required_lists = ('course_details', 'lecturers', 'lecturers_details', 'syllabus_title', 'course_category')

    def __init__(self, resource, record=None, origin=None):
        super().__init__(resource, record, origin=origin)
        self.orphaned_keys = []
        self.sections = self._load_sections(self.data.pop('syllabus_title', None),
                                            self.data.pop('syllabus_content', None))
        self._recompute_discount()

    def _load_sections(self, titles, content):
        """
        Convert the stored by-title-text shape into sections with stable ids.

        Content keys that match no current title (left behind by an earlier
        rename) are collected in ``orphaned_keys`` instead of being carried on.
        """
        titles = titles if isinstance(titles, list) else normalize_items(titles)
        content = content if isinstance(content, dict) else {}
        sections = []
        for title in titles:
            items = content.get(title)
            if isinstance(items, dict):
                values = [items[key] for key in sorted(items, key=_item_order)]
            else:
                values = None
            sections.append(SyllabusSection(title, values))
        self.orphaned_keys = [key for key in content if key not in titles]
        if self.orphaned_keys:
            logger.warning(f"Offered course {self.record_id} has syllabus content for missing titles: {self.orphaned_keys}")
        return sections or [SyllabusSection()]

    # Pricing

    def set_price(self, value):
        self.data['price'] = _to_number(value)
        self._recompute_discount()

    def set_old_price(self, value):
        self.data['old_price'] = _to_number(value)
        self._recompute_discount()

    def set_field(self, name, value):
        if name == 'price':
            self.set_price(value)
        elif name == 'old_price':
            self.set_old_price(value)
        else:
            super().set_field(name, value)

    def _recompute_discount(self):
        self.data['discount_percentage'] = derive_discount_percentage(
            self.data.get('price'), self.data.get('old_price'), self.data.get('discount_percentage'))

    # Syllabus

    def section(self, section_id):
        for section in self.sections:
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def add_section(self, title=''):
        section = SyllabusSection(title)
        self.sections.append(section)
        return section

    def rename_section(self, section_id, title):
        self.section(section_id).title = title

    def remove_section(self, section_id):
        self.sections = [s for s in self.sections if s.id != section_id]
        if not self.sections:
            self.sections.append(SyllabusSection())

    def add_section_item(self, section_id, value=''):
        self.section(section_id).items.append(value)

    def set_section_item(self, section_id, index, value):
        self.section(section_id).items[index] = value

    def remove_section_item(self, section_id, index):
        items = self.section(section_id).items
        del items[index]
        if not items:
            items.append('')

    def syllabus_payload(self):
        """
        Stored shape: a title list plus {title: {item_1: ..., item_2: ...}}.

        A repeated title stays in the list but its content comes from the
        first section carrying it.
        """
        titles, content = [], {}
        for section in self.sections:
            title = (section.title or '').strip()
            if not title:
                continue
            titles.append(title)
            if title in content:
                continue
            content[title] = {f'item_{n}': item for n, item in enumerate(section.items, 1)}
        if not titles:
            titles = [DEFAULT_SYLLABUS_TITLE]
            content = {DEFAULT_SYLLABUS_TITLE: {'item_1': ''}}
        return titles, content

    # Submission

    def validate(self):
        title = self.data.get('title')
        if not title or not str(title).strip():
            raise ValidationError(TITLE_REQUIRED, field='title')
        lists = dict(self.data, syllabus_title=[s.title for s in self.sections])
        for field in self.required_lists:
            items = lists.get(field)
            if not isinstance(items, list) or not any(items):
                raise ValidationError(f'{field} არის აუცილებელი', field=field)

    def to_payload(self):
        payload = super().to_payload()
        payload['syllabus_title'], payload['syllabus_content'] = self.syllabus_payload()
        for field in ('lecturers', 'lecturers_details', 'course_details', 'course_category'):
            payload[field] = normalize_items(payload.get(field))
        if not payload.get('image'):
            logger.warning("Submitting offered course without a main image")
        return payload

    def submit(self):
        saved = super().submit()
        if saved is not None:
            self.sections = self._load_sections(self.data.pop('syllabus_title', None),
                                                self.data.pop('syllabus_content', None))
        return saved

    def attach_image(self, storage, filename, data, content_type=None, field='image'):
        """Uploads under offers/ in the public bucket, embedding the file inline if storage fails"""
        self.upload_error = None
        try:
            result = storage.upload_with_inline_fallback(self.image_bucket, filename, data,
                                                         content_type=content_type)
        except BackofficeError as e:
            logger.error(f"Error uploading {field}: {e.message}")
            self.upload_error = f'Failed to upload {field}. Please try again. Error: {e.message}'
            return None
        self.apply_upload(field, result)
        return result


def _item_order(key):
    number = key.rsplit('_', 1)[-1]
    return (0, int(number), key) if number.isdigit() else (1, 0, key)


def _to_number(value):
    if value in (None, ''):
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError('Price must be a number', field='price')
