from flask import Blueprint, abort, current_app, jsonify, request, session
import logging
import uuid

from .. import object_storage
from ..auth.guard import require_admin
from ..errors import StoreError
from ..resources.registry import RESOURCES, blogs, user_forms, get_resource
from ..state.forms import BlogDraft, CourseDraft, LecturerDraft, OfferedCourseDraft, SyllabusSection
from ..state.table import ASC, DESC, TableState
from .api import get_json_body

logger = logging.getLogger(__name__)

dashboard_bp = require_admin(Blueprint('dashboard', __name__))

FORMS = {
    'blogs': BlogDraft,
    'courses': CourseDraft,
    'offered-courses': OfferedCourseDraft,
    'lecturers': LecturerDraft,
}


def _resource_or_404(slug):
    resource = get_resource(slug)
    if resource is None:
        abort(404, description=f'Unknown resource: {slug}')
    return resource


def _origin():
    """Per-login id stamped on this admin's writes so other sessions can tell them apart"""
    if 'origin' not in session:
        session['origin'] = uuid.uuid4().hex
    return session['origin']


def _table(resource):
    state = TableState(resource, notice_ttl=current_app.config['NOTICE_TTL_SECONDS'], origin=_origin())
    state.load()
    state.set_search(request.args.get('q'))
    field = request.args.get('sort')
    if field:
        state.sort_field = field
        state.sort_direction = ASC if request.args.get('direction') == ASC else DESC
    return state


def _form_dict(form):
    data = {'record': form.data, 'error': form.error, 'upload_error': form.upload_error}
    if isinstance(form, OfferedCourseDraft):
        data['sections'] = [section.to_dict() for section in form.sections]
        data['orphaned_keys'] = form.orphaned_keys
    return data


@dashboard_bp.route('/')
def index():
    """Dashboard home: counts per resource and the latest intake submissions"""
    counts = {}
    for slug, resource in RESOURCES.items():
        try:
            counts[slug] = resource.count()
        except StoreError as e:
            logger.error(f"Error counting {resource.table}: {e.message}")
            counts[slug] = 0
    return jsonify({
        'blog_count': counts.get(blogs.schema.slug, 0),
        'counts': counts,
        'submissions': user_forms.list_or_empty(),
    })


@dashboard_bp.route('/<slug>')
def table(slug):
    """Table view with client-style search (?q=) and sort (?sort=&direction=)"""
    return jsonify(_table(_resource_or_404(slug)).to_dict())


@dashboard_bp.route('/<slug>/<int:record_id>/delete', methods=['POST'])
def delete(slug, record_id):
    resource = _resource_or_404(slug)
    state = _table(resource)
    confirmed = request.values.get('confirm') in ('true', '1', 'yes')
    if not confirmed and request.is_json:
        confirmed = (request.get_json(silent=True) or {}).get('confirm') is True
    if not confirmed:
        return jsonify({'error': 'Deletion must be confirmed'}), 400
    deleted = state.delete(record_id, confirm=True)
    return jsonify(state.to_dict()), 200 if deleted else 500


@dashboard_bp.route('/<slug>/<int:record_id>')
def edit(slug, record_id):
    """Record as the edit form sees it"""
    resource = _resource_or_404(slug)
    form_class = FORMS.get(slug)
    if form_class is None:
        return jsonify({'record': resource.get(record_id)})
    return jsonify(_form_dict(form_class.edit(resource, record_id, origin=_origin())))


@dashboard_bp.route('/<slug>/save', methods=['POST'])
def save(slug):
    """Submit a draft: update when it carries an id, insert otherwise"""
    resource = _resource_or_404(slug)
    form_class = FORMS.get(slug)
    if form_class is None:
        abort(405, description=f'{resource.schema.label} records are read-only here')
    body = get_json_body()
    sections = body.pop('sections', None)
    form = form_class(resource, body, origin=_origin())
    if sections is not None and isinstance(form, OfferedCourseDraft):
        form.sections = [SyllabusSection(s.get('title', ''), s.get('items'), s.get('id'))
                         for s in sections if isinstance(s, dict)] or form.sections
    saved = form.submit()
    if saved is None:
        return jsonify(_form_dict(form)), 400
    return jsonify(_form_dict(form)), 200 if body.get('id') else 201


@dashboard_bp.route('/<slug>/image', methods=['POST'])
def attach_image(slug):
    """Upload an image for a draft; the form stays editable when the upload fails"""
    resource = _resource_or_404(slug)
    form_class = FORMS.get(slug)
    upload = request.files.get('file')
    if form_class is None or upload is None:
        return jsonify({'error': 'No file selected'}), 400
    data = upload.read()
    object_storage.check_image(upload.filename, data, upload.mimetype)
    field = request.form.get('field', 'image')
    form = form_class(resource, {}, origin=_origin())
    result = form.attach_image(object_storage, upload.filename, data,
                               content_type=upload.mimetype, field=field)
    if result is None:
        return jsonify({'error': form.upload_error}), 502
    return jsonify(dict(result.to_dict(), field=field))
