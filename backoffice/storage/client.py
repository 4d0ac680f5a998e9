import base64
import logging
import mimetypes
import os
import uuid

import requests

from ..errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


class UploadResult:
    """Where an attached image ended up"""

    def __init__(self, url, path=None, filename=None, inline=False):
        self.url = url
        self.path = path
        self.filename = filename
        self.inline = inline

    def to_dict(self):
        return {
            'url': self.url,
            'path': self.path,
            'filename': self.filename,
            'inline': self.inline,
        }


class StorageClient:
    """Client for the hosted object storage REST API"""

    def __init__(self, base_url=None, api_key=None, buckets=None, timeout=30,
                 inline_max_bytes=1024 * 1024, image_max_bytes=2 * 1024 * 1024):
        self.base_url = (base_url or '').rstrip('/')
        self.api_key = api_key
        self.buckets = dict(buckets or {})
        self.timeout = timeout
        self.inline_max_bytes = inline_max_bytes
        self.image_max_bytes = image_max_bytes
        self.session = requests.Session()

    def init_app(self, app):
        self.base_url = app.config['STORAGE_URL'].rstrip('/')
        self.api_key = app.config.get('STORAGE_API_KEY')
        self.buckets = dict(app.config.get('STORAGE_BUCKETS', {}))
        self.timeout = app.config.get('STORAGE_TIMEOUT', self.timeout)
        self.inline_max_bytes = app.config.get('INLINE_UPLOAD_MAX_BYTES', self.inline_max_bytes)
        self.image_max_bytes = app.config.get('IMAGE_MAX_BYTES', self.image_max_bytes)
        app.extensions['storage'] = self
        logger.info(f"Initialized StorageClient with base_url: {self.base_url}")
        logger.info(f"API key set: {bool(self.api_key)}")

    def _get_auth_headers(self, content_type=None):
        headers = {
            'Accept': 'application/json',
            'User-Agent': 'Backoffice/1.0',
        }
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
            headers['apikey'] = self.api_key
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def has_bucket(self, bucket):
        return bucket in self.buckets

    def generate_key(self, bucket, filename):
        """Random object key, kept under the bucket's folder prefix"""
        ext = os.path.splitext(filename or '')[1].lstrip('.').lower()
        name = uuid.uuid4().hex
        if ext:
            name = f'{name}.{ext}'
        return f'{self.buckets.get(bucket, "")}{name}'

    def public_url(self, bucket, key):
        return f'{self.base_url}/storage/v1/object/public/{bucket}/{key}'

    def upload(self, bucket, key, data, content_type=None, upsert=False):
        """Store raw bytes under bucket/key and return the key"""
        if not self.has_bucket(bucket):
            raise StorageError(f"Unknown bucket: {bucket}")

        upload_url = f'{self.base_url}/storage/v1/object/{bucket}/{key}'
        headers = self._get_auth_headers(content_type or 'application/octet-stream')
        headers['Cache-Control'] = 'max-age=3600'
        headers['x-upsert'] = 'true' if upsert else 'false'

        logger.info(f"Uploading {len(data)} bytes to {bucket}/{key}")
        try:
            response = self.session.post(upload_url, headers=headers, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Upload to {bucket}/{key} failed: {str(e)}")
            raise StorageError(f"Upload failed: {str(e)}")

        logger.info(f"Upload response status: {response.status_code}")
        if response.status_code not in (200, 201):
            message = response.text
            try:
                message = response.json().get('message') or response.json().get('error') or message
            except ValueError:
                pass
            logger.error(f"Upload to {bucket}/{key} rejected: {message}")
            raise StorageError(f"Upload failed: {message}")

        return key

    def check_image(self, filename, data, content_type=None):
        """Reject anything that is not an image or is over ``image_max_bytes``; returns the content type"""
        content_type = content_type or mimetypes.guess_type(filename or '')[0]
        if not content_type or not content_type.startswith('image/'):
            raise ValidationError('File must be an image.', field='file')
        if len(data) > self.image_max_bytes:
            raise ValidationError(
                f'Image size should be less than {_format_size(self.image_max_bytes)}.', field='file')
        return content_type

    def upload_image(self, bucket, filename, data, content_type=None):
        """Upload under a random key and return the public URL with its storage path"""
        content_type = self.check_image(filename, data, content_type)
        key = self.generate_key(bucket, filename)
        self.upload(bucket, key, data, content_type=content_type)
        return UploadResult(self.public_url(bucket, key), path=key, filename=filename)

    def upload_with_inline_fallback(self, bucket, filename, data, content_type=None):
        """
        Upload an image, embedding it as a base64 data URI when storage fails.

        The inline copy is stored directly on the record, so it is only used
        for files up to ``inline_max_bytes``; larger files re-raise the
        storage error.
        """
        try:
            return self.upload_image(bucket, filename, data, content_type=content_type)
        except StorageError as e:
            if len(data) > self.inline_max_bytes:
                logger.error(
                    f"Storage upload failed and {filename} ({len(data)} bytes) exceeds the "
                    f"inline limit of {self.inline_max_bytes} bytes"
                )
                raise
            logger.warning(f"Storage upload failed, embedding {filename} as base64: {e.message}")
            return UploadResult(to_data_uri(data, filename, content_type), filename=filename, inline=True)


def to_data_uri(data, filename=None, content_type=None):
    mime = content_type or mimetypes.guess_type(filename or '')[0] or 'application/octet-stream'
    encoded = base64.b64encode(data).decode('ascii')
    return f'data:{mime};base64,{encoded}'


def _format_size(size):
    if size % (1024 * 1024) == 0:
        return f'{size // (1024 * 1024)}MB'
    if size % 1024 == 0:
        return f'{size // 1024}KB'
    return f'{size} bytes'
