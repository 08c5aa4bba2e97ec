"""
Thin HTTP client for the garment API.

One ``requests.Session`` per client carries the bearer token. The API
origin comes from the constructor or ``GARMENT_BACKEND_URL``; nothing else
in the client builds absolute URLs.
"""
import logging
import os
from typing import Callable, List, Optional

import requests

from .results import ApiResult, ErrorKind

logger = logging.getLogger('garment.client')

DEFAULT_BACKEND_URL = 'http://localhost:8000'
DEFAULT_TIMEOUT = 10


def backend_url(base_url: Optional[str] = None) -> str:
    return (base_url or os.environ.get('GARMENT_BACKEND_URL') or DEFAULT_BACKEND_URL).rstrip('/')


class ApiClient:
    """
    Sends requests and converts every outcome into an ``ApiResult``.

    A 401 sets ``last_unauthorized`` and notifies ``on_unauthorized``
    listeners; deciding where to redirect is left to the caller. Requests
    are never retried.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = backend_url(base_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        self.access_token = None
        self.refresh_token = None
        self.last_unauthorized = False
        self._unauthorized_listeners: List[Callable] = []

    def url(self, path: str) -> str:
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def set_tokens(self, access: Optional[str], refresh: Optional[str] = None):
        self.access_token = access
        self.refresh_token = refresh
        if access:
            self.session.headers['Authorization'] = f'Bearer {access}'
        else:
            self.session.headers.pop('Authorization', None)

    def clear_tokens(self):
        self.set_tokens(None)

    def on_unauthorized(self, listener: Callable):
        """Register ``listener(result)`` to be called on every 401"""
        self._unauthorized_listeners.append(listener)
        return listener

    def request(self, method: str, path: str, default_message: str = 'Request failed', **kwargs) -> ApiResult:
        kwargs.setdefault('timeout', self.timeout)
        url = self.url(path)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} failed: {str(e)}")
            return ApiResult.from_exception(e, default_message)

        result = ApiResult.from_response(response, default_message)
        if result.kind == ErrorKind.UNAUTHORIZED:
            self.last_unauthorized = True
            for listener in list(self._unauthorized_listeners):
                listener(result)
        elif result.success:
            self.last_unauthorized = False

        if not result.success:
            logger.info(f"{method} {url} -> {result.status_code}: {result.message}")
        return result

    def get(self, path, default_message='Request failed', **kwargs):
        return self.request('GET', path, default_message, **kwargs)

    def post(self, path, default_message='Request failed', **kwargs):
        return self.request('POST', path, default_message, **kwargs)

    def put(self, path, default_message='Request failed', **kwargs):
        return self.request('PUT', path, default_message, **kwargs)

    def patch(self, path, default_message='Request failed', **kwargs):
        return self.request('PATCH', path, default_message, **kwargs)

    def delete(self, path, default_message='Request failed', **kwargs):
        return self.request('DELETE', path, default_message, **kwargs)
