from fastapi import Depends, Request

from artify.core.config import config
from artify.core.errors import Forbidden, NotAuthenticated, RedirectRequired
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.models.schemas import RequestContext, Role
from artify.services.authorization import LOGIN_PATH, home_path
from artify.services.identity import resolve_session

SAFE_METHODS = ("GET", "HEAD")


def get_request_context(
    request: Request,
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
) -> RequestContext:
    """Resolve the session cookie into the caller's (principal_id, role)."""
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    return resolve_session(firestore_ops, token)


def require_area(role: Role):
    """
    Guard for the routes of one role's area.

    Browsers navigating (GET) into the wrong area are redirected to their own
    home, or to the login page when signed out. Other methods get 401/403.
    """
    def guard(request: Request, ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if ctx.role == role and not ctx.is_anonymous:
            return ctx
        if request.method in SAFE_METHODS:
            raise RedirectRequired(LOGIN_PATH if ctx.is_anonymous else home_path(ctx.role))
        if ctx.is_anonymous:
            raise NotAuthenticated()
        raise Forbidden(f"This area is reserved for {role.value} accounts")

    return guard


require_admin_area = require_area(Role.ADMIN)
require_customer_area = require_area(Role.CUSTOMER)
require_editor_area = require_area(Role.EDITOR)
