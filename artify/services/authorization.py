"""
Role gating and ownership checks.

Every service takes the caller's ``RequestContext`` explicitly; nothing here
reads cookies or globals.
"""
from artify.core.errors import Forbidden, NotAuthenticated
from artify.models.schemas import Post, Project, RequestContext, Role

ROLE_HOME = {
    Role.ADMIN: "/admin",
    Role.CUSTOMER: "/customer",
    Role.EDITOR: "/editor",
}

LOGIN_PATH = "/login"


def home_path(role: Role) -> str:
    try:
        return ROLE_HOME[Role(role)]
    except (KeyError, ValueError):
        raise ValueError(f"No home area for role {role!r}")


def require_role(ctx: RequestContext, *roles: Role) -> str:
    """Return the caller's principal id if their role is one of ``roles``."""
    if ctx.is_anonymous:
        raise NotAuthenticated()
    if ctx.role not in roles:
        allowed = " or ".join(r.value for r in roles)
        raise Forbidden(f"Only {allowed} accounts can do that")
    return ctx.principal_id


def require_post_owner(ctx: RequestContext, post: Post) -> str:
    customer_id = require_role(ctx, Role.CUSTOMER)
    if post.customer_id != customer_id:
        raise Forbidden("You do not own this post")
    return customer_id


def require_project_party(ctx: RequestContext, project: Project) -> str:
    """The project's customer or its editor."""
    principal_id = require_role(ctx, Role.CUSTOMER, Role.EDITOR)
    owner_id = project.customer_id if ctx.role == Role.CUSTOMER else project.editor_id
    if owner_id != principal_id:
        raise Forbidden("You are not part of this project")
    return principal_id


def require_project_customer(ctx: RequestContext, project: Project) -> str:
    customer_id = require_role(ctx, Role.CUSTOMER)
    if project.customer_id != customer_id:
        raise Forbidden("Only the project's customer can do that")
    return customer_id
