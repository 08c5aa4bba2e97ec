"""
Route guards: decide whether a route renders, waits or redirects.

Each guard reads only the ``AuthSession`` it is given and returns a
``GuardDecision``; rendering and navigation belong to the caller.
"""
from collections import namedtuple
from enum import Enum

from garment.core.roles import Capability

LOGIN_PATH = '/login'
HOME_PATH = '/home'
ADMIN_DASHBOARD_PATH = '/admin-dashboard'


class GuardKind(str, Enum):
    LOADING = 'loading'
    REDIRECT = 'redirect'
    RENDER = 'render'


class GuardDecision(namedtuple('GuardDecision', ['kind', 'target', 'from_path'])):
    __slots__ = ()

    @property
    def is_redirect(self):
        return self.kind == GuardKind.REDIRECT

    @property
    def renders(self):
        return self.kind == GuardKind.RENDER


LOADING = GuardDecision(GuardKind.LOADING, None, None)
RENDER = GuardDecision(GuardKind.RENDER, None, None)


def redirect(target, from_path=None):
    return GuardDecision(GuardKind.REDIRECT, target, from_path)


def login_redirect(path):
    return redirect(LOGIN_PATH, from_path=path)


def protected_route(session, path):
    if session.is_loading:
        return LOADING
    if not session.is_logged_in:
        return login_redirect(path)
    return RENDER


def admin_route(session, path, capability=Capability.ACCESS_ADMIN_DASHBOARD):
    if session.is_loading:
        return LOADING
    if not session.is_logged_in:
        return login_redirect(path)
    if not session.has_capability(capability):
        return redirect(HOME_PATH)
    return RENDER


def public_route(session, from_path=None):
    """Login and registration pages: signed-in users are sent on"""
    if session.is_loading:
        return LOADING
    if session.is_logged_in:
        if session.has_capability(Capability.ACCESS_ADMIN_DASHBOARD):
            return redirect(ADMIN_DASHBOARD_PATH)
        return redirect(from_path or HOME_PATH)
    return RENDER


def guard_for_result(session, result, path):
    """A call that came back 401 ends the session and sends the user to log in"""
    if result.is_unauthorized:
        session.clear()
        return login_redirect(path)
    return None
