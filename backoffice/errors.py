"""
Error types shared by the resource layer, the storage client and the routes.

Every error carries the HTTP status it maps to; the app factory renders them
as ``{"error": message}``.
"""


class BackofficeError(Exception):
    """Base exception for back-office failures"""
    status_code = 500

    def __init__(self, message, status_code=None):
        self.message = message
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(BackofficeError):
    """Raised before any store call when a draft is missing required data."""
    status_code = 400

    def __init__(self, message='Invalid data', field=None):
        self.field = field
        super().__init__(message, self.status_code)


class InvalidBodyError(BackofficeError):
    status_code = 400

    def __init__(self, message='Invalid request body'):
        super().__init__(message, self.status_code)


class NotFoundError(BackofficeError):
    status_code = 404

    def __init__(self, message='Resource not found'):
        super().__init__(message, self.status_code)


class StoreError(BackofficeError):
    """Raised when the relational store rejects a query or write."""
    status_code = 500

    def __init__(self, message='Store request failed'):
        super().__init__(message, self.status_code)


class StorageError(BackofficeError):
    """Raised when the object storage service rejects an upload."""
    status_code = 502

    def __init__(self, message='Upload failed'):
        super().__init__(message, self.status_code)
