from fastapi import APIRouter, Depends, status

from artify.core.dependencies import get_request_context
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.db.storage import ObjectStorage, get_object_storage
from artify.models.schemas import (
    CompleteProjectRequest,
    Payment,
    PaymentCreate,
    Project,
    RequestContext,
    Role,
    UploadLocation,
    UploadLocationRequest,
)
from artify.services import lifecycle
from artify.services.authorization import require_role

router = APIRouter(prefix="/api", tags=["Actions"])


@router.post("/complete-project", response_model=Project)
async def complete_project(
    body: CompleteProjectRequest,
    ctx: RequestContext = Depends(get_request_context),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.complete_project(firestore_ops, ctx, body.project_id)


@router.post("/payment", response_model=Payment, status_code=status.HTTP_201_CREATED)
async def pay_for_project(
    body: PaymentCreate,
    ctx: RequestContext = Depends(get_request_context),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.record_payment(firestore_ops, ctx, body.project_id, body.payment_method, body.amount)


@router.post("/upload-location", response_model=UploadLocation)
async def request_upload_location(
    body: UploadLocationRequest,
    ctx: RequestContext = Depends(get_request_context),
    storage: ObjectStorage = Depends(get_object_storage),
):
    """Signed PUT location for a file a project party is about to attach."""
    require_role(ctx, Role.CUSTOMER, Role.EDITOR)
    return storage.request_upload_location(body.filename, body.content_type)
