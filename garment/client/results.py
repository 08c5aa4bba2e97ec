"""
Uniform result of every client call.

Calls never raise for transport or HTTP failures; they return an
``ApiResult`` and callers branch on ``success``.
"""
from enum import Enum
from typing import Any, Dict, Optional

import requests


class ErrorKind(str, Enum):
    NETWORK = 'network'
    CLIENT_ERROR = 'client_error'
    UNAUTHORIZED = 'unauthorized'
    SERVER_ERROR = 'server_error'


def classify_status(status_code: int) -> Optional[ErrorKind]:
    if status_code < 400:
        return None
    if status_code == 401:
        return ErrorKind.UNAUTHORIZED
    if status_code >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.CLIENT_ERROR


class ApiResult:
    """Success with ``data``, or failure with ``message`` and an ``ErrorKind``"""

    def __init__(self, success: bool, data: Optional[Dict] = None, message: str = '',
                 errors: Any = None, status_code: Optional[int] = None, kind: Optional[ErrorKind] = None):
        self.success = success
        self.data = data if data is not None else {}
        self.message = message
        self.errors = errors
        self.status_code = status_code
        self.kind = kind

    @classmethod
    def ok(cls, data=None, status_code=200, message=''):
        return cls(True, data=data, message=message, status_code=status_code)

    @classmethod
    def fail(cls, message, kind=ErrorKind.CLIENT_ERROR, status_code=None, errors=None, data=None):
        return cls(False, data=data, message=message, errors=errors, status_code=status_code, kind=kind)

    @classmethod
    def from_response(cls, response: requests.Response, default_message: str) -> 'ApiResult':
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        kind = classify_status(response.status_code)
        if kind is None:
            return cls.ok(body, status_code=response.status_code, message=body.get('message', ''))

        message = body.get('message') or body.get('error') or body.get('detail') or default_message
        return cls.fail(
            str(message),
            kind=kind,
            status_code=response.status_code,
            errors=body.get('errors'),
        )

    @classmethod
    def from_exception(cls, exc: Exception, default_message: str) -> 'ApiResult':
        return cls.fail(f"{default_message}: {exc}", kind=ErrorKind.NETWORK)

    @property
    def is_unauthorized(self):
        return self.kind == ErrorKind.UNAUTHORIZED

    def get(self, key, default=None):
        return self.data.get(key, default)

    def __getitem__(self, key):
        return self.data[key]

    def __bool__(self):
        return self.success

    def __repr__(self):
        if self.success:
            return f"<ApiResult ok status={self.status_code}>"
        return f"<ApiResult {self.kind.value if self.kind else 'error'} status={self.status_code} message={self.message!r}>"
