"""
Process-wide auth state, passed explicitly to whatever needs it.

``AuthSession`` owns the login flags, the current user and backend
reachability. Every state change notifies the registered listeners.
"""
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from garment.core.roles import has_capability, role_from_value

from .http import ApiClient
from .results import ApiResult, ErrorKind

logger = logging.getLogger('garment.client')

HEALTH_TIMEOUT = 5
AUTH_TIMEOUT = 8


class BackendStatus(str, Enum):
    UNKNOWN = 'unknown'
    ONLINE = 'online'
    OFFLINE = 'offline'
    ERROR = 'error'


class AuthSession:

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()
        self.is_logged_in = False
        self.user = None
        self.role = None
        self.is_loading = False
        self.backend_status = BackendStatus.UNKNOWN
        self._listeners: List[Callable] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: Callable):
        """Register ``listener(session)``; returns a callable that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def _set_user(self, user):
        with self._lock:
            self.is_logged_in = True
            self.user = user
            self.role = role_from_value(user.get('role')) if user else None
        self._notify()

    def clear(self):
        with self._lock:
            self.is_logged_in = False
            self.user = None
            self.role = None
        self._notify()

    def _set_loading(self, value):
        with self._lock:
            self.is_loading = value
        self._notify()

    def check_backend(self) -> bool:
        result = self.client.get('/', 'Cannot connect to the server', timeout=HEALTH_TIMEOUT)
        if result.kind == ErrorKind.NETWORK:
            status = BackendStatus.OFFLINE
        elif result.kind == ErrorKind.SERVER_ERROR:
            status = BackendStatus.ERROR
        else:
            status = BackendStatus.ONLINE

        with self._lock:
            self.backend_status = status
        self._notify()
        if status != BackendStatus.ONLINE:
            logger.warning(f"Backend at {self.client.base_url} is {status.value}: {result.message}")
        return status == BackendStatus.ONLINE

    def _fetch_current_user(self) -> ApiResult:
        result = self.client.get('/api/auth/is-auth/', 'Auth check failed', timeout=AUTH_TIMEOUT)
        if result.status_code == 404:
            logger.info("is-auth endpoint not found, trying profile endpoint")
            result = self.client.get('/api/auth/profile/', 'Profile check failed', timeout=AUTH_TIMEOUT)
        return result

    def refresh(self) -> bool:
        """
        Re-establish the auth state: health check first, then the current
        user. Anything but a successful user lookup leaves the session
        logged out.
        """
        self._set_loading(True)
        try:
            if not self.check_backend():
                self.clear()
                return False

            result = self._fetch_current_user()
            if result.success and result.get('user'):
                self._set_user(result['user'])
                return True

            self.clear()
            return False
        finally:
            self._set_loading(False)

    def login(self, email, password) -> ApiResult:
        result = self.client.post('/api/auth/login/', 'Login failed', json={'email': email, 'password': password})
        if result.success:
            self.client.set_tokens(result.get('access'), result.get('refresh'))
            self._set_user(result.get('user') or {'email': email, 'role': result.get('role')})
        return result

    def logout(self) -> ApiResult:
        """Tell the server, then drop local state whatever it answered"""
        result = self.client.post('/api/auth/logout/', 'Logout failed')
        self.client.clear_tokens()
        self.clear()
        return result

    def has_capability(self, capability) -> bool:
        return self.is_logged_in and has_capability(self.role, capability)
