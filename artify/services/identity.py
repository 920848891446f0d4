"""
Registration, login and sessions for customers, editors and admins.

Each principal kind lives in its own collection, so the same email may be
registered once as a customer and once as an editor.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from artify.core.config import config
from artify.core.errors import EmailTaken, InvalidCredentials, ValidationError
from artify.core.logging import get_logger
from artify.core.security import (
    create_session_token,
    decode_session_token,
    get_password_hash,
    verify_password,
)
from artify.db.firebase_ops import FirestoreBaseModel
from artify.models.schemas import (
    PRINCIPAL_COLLECTIONS,
    PRINCIPAL_MODELS,
    Admin,
    Customer,
    Editor,
    RequestContext,
    Role,
    Session,
    new_id,
)

logger = get_logger("identity")

MIN_PASSWORD_LENGTH = 8
# bcrypt only hashes the first 72 bytes
MAX_PASSWORD_BYTES = 72
SESSIONS = "sessions"

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _validate_credentials(name: str, email: str, password: str) -> Dict[str, str]:
    errors = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    try:
        _email_adapter.validate_python(email)
    except PydanticValidationError:
        errors["email"] = "Email is invalid"
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = "Password is too short"
    elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors["password"] = "Password is too long"
    return errors


def get_principal_by_email(firestore_ops: FirestoreBaseModel, kind: Role, email: str) -> Optional[dict]:
    """Raw principal record, including its password hash."""
    found = firestore_ops.query(
        collection_name=PRINCIPAL_COLLECTIONS[kind],
        field="email",
        operator="==",
        value=normalize_email(email),
    )
    return found[0] if found else None


def get_principal(firestore_ops: FirestoreBaseModel, kind: Role, principal_id: str):
    kind = Role(kind)
    return firestore_ops.get(
        collection_name=PRINCIPAL_COLLECTIONS[kind],
        document_id=principal_id,
        pydantic_model=PRINCIPAL_MODELS[kind],
    )


def _create_principal(firestore_ops: FirestoreBaseModel, principal, password: str):
    kind = Role(principal.role)
    if get_principal_by_email(firestore_ops, kind, principal.email):
        raise EmailTaken()

    # The response model never carries the hash; only the stored record does
    record = principal.model_dump(mode="json")
    record["password_hash"] = get_password_hash(password)
    firestore_ops.save(collection_name=PRINCIPAL_COLLECTIONS[kind], data_model=record, document_id=principal.id)
    logger.info(f"Registered {kind.value} {principal.id}")
    return principal


def register_customer(firestore_ops: FirestoreBaseModel, name: str, email: str, password: str) -> Customer:
    email = normalize_email(email)
    errors = _validate_credentials(name, email, password)
    if errors:
        raise ValidationError("Registration details are invalid", field_errors=errors)
    return _create_principal(firestore_ops, Customer(name=name.strip(), email=email), password)


def register_editor(
    firestore_ops: FirestoreBaseModel,
    name: str,
    email: str,
    password: str,
    experience: str,
    portfolio: str,
    skills: str,
    awards: str,
) -> Editor:
    email = normalize_email(email)
    errors = _validate_credentials(name, email, password)
    profile = {"experience": experience, "portfolio": portfolio, "skills": skills, "awards": awards}
    for field, value in profile.items():
        if not (value or "").strip():
            errors[field] = f"{field.capitalize()} is required"
    if errors:
        raise ValidationError("Registration details are invalid", field_errors=errors)
    editor = Editor(name=name.strip(), email=email, **{k: v.strip() for k, v in profile.items()})
    return _create_principal(firestore_ops, editor, password)


def create_admin(firestore_ops: FirestoreBaseModel, name: str, email: str, password: str) -> Admin:
    """Admins have no public sign-up; the seed command creates them."""
    email = normalize_email(email)
    errors = _validate_credentials(name, email, password)
    if errors:
        raise ValidationError("Admin details are invalid", field_errors=errors)
    return _create_principal(firestore_ops, Admin(name=name.strip(), email=email), password)


def authenticate(firestore_ops: FirestoreBaseModel, kind: Role, email: str, password: str):
    """Return the principal of ``kind`` with this email and password."""
    kind = Role(kind)
    record = get_principal_by_email(firestore_ops, kind, email)
    if not record or not verify_password(password or "", record.get("password_hash")):
        logger.info(f"Failed {kind.value} login")
        raise InvalidCredentials()
    return PRINCIPAL_MODELS[kind](**record)


def establish_session(firestore_ops: FirestoreBaseModel, principal_id: str, kind: Role, remember: bool = False) -> Tuple[str, int]:
    """
    Write a session record and sign a token for it.
    Returns the token and its lifetime in seconds.
    """
    kind = Role(kind)
    max_age = config.REMEMBER_ME_SECONDS if remember else config.DEFAULT_SESSION_SECONDS
    session = Session(
        id=new_id(),
        principal_id=principal_id,
        role=kind,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=max_age),
    )
    firestore_ops.save(collection_name=SESSIONS, data_model=session, document_id=session.id)
    token = create_session_token(principal_id, kind.value, session.id, max_age)
    return token, max_age


def resolve_session(firestore_ops: FirestoreBaseModel, token: Optional[str]) -> RequestContext:
    """Anonymous context unless the token is valid and its session still exists."""
    if not token:
        return RequestContext()
    claims = decode_session_token(token)
    if not claims:
        return RequestContext()

    session = firestore_ops.get(collection_name=SESSIONS, document_id=claims["sid"], pydantic_model=Session)
    if not session or session.principal_id != claims["sub"] or session.role.value != claims["role"]:
        return RequestContext()
    if session.expires_at <= datetime.now(timezone.utc):
        return RequestContext()
    return RequestContext(principal_id=session.principal_id, role=session.role, session_id=session.id)


def end_session(firestore_ops: FirestoreBaseModel, token: Optional[str]) -> None:
    if not token:
        return
    claims = decode_session_token(token)
    if claims:
        firestore_ops.delete(collection_name=SESSIONS, document_id=claims["sid"])
