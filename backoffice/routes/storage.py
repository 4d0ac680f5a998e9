from flask import Blueprint, jsonify, request
import logging

from .. import object_storage
from ..auth.guard import require_admin

logger = logging.getLogger(__name__)

storage_bp = require_admin(Blueprint('storage', __name__))


@storage_bp.route('/<bucket>', methods=['POST'])
def upload(bucket):
    """Upload one file to a bucket under a random key; ?fallback=inline embeds it on failure"""
    if not object_storage.has_bucket(bucket):
        return jsonify({'error': f'Unknown bucket: {bucket}'}), 404

    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'You must select an image to upload.'}), 400

    data = upload.read()
    if request.args.get('fallback') == 'inline':
        result = object_storage.upload_with_inline_fallback(bucket, upload.filename, data, content_type=upload.mimetype)
    else:
        result = object_storage.upload_image(bucket, upload.filename, data, content_type=upload.mimetype)
    return jsonify(result.to_dict()), 201
