"""
Errors raised by the key store.

Each error carries the HTTP status code and message the transport layer
renders, so handlers never need to know which subclass they caught.
"""


class KeyStoreError(Exception):
    """Base class for key store failures"""

    status_code = 500
    message = "Key store error"
    reason = "error"

    def __init__(self, key_id: str = None, message: str = None):
        self.key_id = key_id
        if message is not None:
            self.message = message
        super().__init__(self.message)


class KeyNotFound(KeyStoreError):
    """No record exists for the id"""

    status_code = 404
    message = "Key not found"
    reason = "not_found"


class KeyForbidden(KeyStoreError):
    """Record exists but is blocked or its lease has lapsed"""

    status_code = 403
    message = "Key is blocked or expired"
    reason = "forbidden"


class InvalidArgument(KeyStoreError):
    """Malformed input to a mutating operation"""

    status_code = 400
    message = 'Invalid request. "blocked" field must be a boolean'
    reason = "invalid_argument"
