from flask import Blueprint, jsonify, request
import logging

from ..auth.guard import require_admin
from ..errors import InvalidBodyError, ValidationError
from ..resources.registry import get_resource, lecturers, offered_courses

logger = logging.getLogger(__name__)

api_bp = require_admin(Blueprint('api', __name__))

READABLE = '<any(blogs, courses, "offered-courses", lecturers, "users-form"):slug>'
WRITABLE = '<any(blogs, courses, "offered-courses", lecturers):slug>'


def get_json_body():
    """Parsed JSON object from the request, or a 400 for anything else"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidBodyError()
    return body


@api_bp.route(f'/{READABLE}', methods=['GET'])
def list_records(slug):
    """List records newest first; courses and lecturers also accept ?id="""
    resource = get_resource(slug)
    record_id = request.args.get('id')
    if record_id and slug in ('courses', 'lecturers'):
        return jsonify(resource.get(record_id))
    return jsonify(resource.list())


@api_bp.route(f'/{WRITABLE}', methods=['POST'])
def create_record(slug):
    resource = get_resource(slug)
    body = get_json_body()
    if slug == 'offered-courses':
        logger.info(f"Attempting to create offered course: title={body.get('title')!r}, "
                    f"has_image={bool(body.get('image'))}, has_icon={bool(body.get('courseIcon'))}")
    record = resource.create(body)
    return jsonify(record), 201


@api_bp.route(f'/{READABLE}/<int:record_id>', methods=['GET'])
def get_record(slug, record_id):
    return jsonify(get_resource(slug).get(record_id))


@api_bp.route(f'/{WRITABLE}/<int:record_id>', methods=['PUT'])
def update_record(slug, record_id):
    resource = get_resource(slug)
    body = get_json_body()
    logger.info(f"Attempting to update {resource.table} ID {record_id}")
    return jsonify(resource.update(record_id, body))


@api_bp.route(f'/{READABLE}/<int:record_id>', methods=['DELETE'])
def delete_record(slug, record_id):
    resource = get_resource(slug)
    resource.delete(record_id)
    if resource is offered_courses:
        return jsonify({'message': 'Offered course deleted successfully'})
    return jsonify({'success': True})


# Lecturer routes also address a record through the body or the query string

@api_bp.route('/lecturers', methods=['PUT'])
def update_lecturer():
    body = get_json_body()
    record_id = body.pop('id', None)
    if not record_id:
        raise ValidationError('Lecturer ID is required', field='id')
    return jsonify(lecturers.update(record_id, body))


@api_bp.route('/lecturers', methods=['DELETE'])
def delete_lecturer():
    record_id = request.args.get('id')
    if not record_id:
        raise ValidationError('Lecturer ID is required', field='id')
    lecturers.delete(record_id)
    return jsonify({'success': True})

