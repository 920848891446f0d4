from fastapi import APIRouter, Depends, Request, Response, status

from artify.core.config import config
from artify.core.dependencies import get_request_context
from artify.core.errors import NotAuthenticated, NotFound, ValidationError
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.models.schemas import LoginRequest, Principal, RegisterRequest, RequestContext, Role
from artify.services import identity
from artify.services.authorization import home_path

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.is_production,
    )


def _signed_in(response: Response, firestore_ops: FirestoreBaseModel, principal, remember: bool) -> dict:
    token, max_age = identity.establish_session(firestore_ops, principal.id, Role(principal.role), remember)
    _set_session_cookie(response, token, max_age)
    return {"user": principal.model_dump(mode="json"), "redirect_to": home_path(Role(principal.role))}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    response: Response,
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    if body.role == Role.CUSTOMER:
        principal = identity.register_customer(firestore_ops, body.name, body.email, body.password)
    elif body.role == Role.EDITOR:
        principal = identity.register_editor(
            firestore_ops,
            body.name,
            body.email,
            body.password,
            body.experience,
            body.portfolio,
            body.skills,
            body.awards,
        )
    else:
        # Admins are created by the seed command only
        raise ValidationError.for_field("role", "Role is required")

    # Registration signs the new account straight in
    return _signed_in(response, firestore_ops, principal, body.remember)


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    principal = identity.authenticate(firestore_ops, body.role, body.email, body.password)
    return _signed_in(response, firestore_ops, principal, body.remember)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    identity.end_session(firestore_ops, request.cookies.get(config.SESSION_COOKIE_NAME))
    response.delete_cookie(key=config.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logout successful", "redirect_to": "/"}


@router.get("/me", response_model=Principal)
async def read_me(
    ctx: RequestContext = Depends(get_request_context),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    if ctx.is_anonymous:
        raise NotAuthenticated()
    principal = identity.get_principal(firestore_ops, ctx.role, ctx.principal_id)
    if not principal:
        raise NotFound("User not found")
    return principal
