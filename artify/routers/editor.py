from typing import List

from fastapi import APIRouter, Depends, status

from artify.core.dependencies import require_editor_area
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.db.storage import ObjectStorage, get_object_storage
from artify.models.schemas import (
    AttachedDocument,
    Bid,
    BidCreate,
    Dashboard,
    DocumentCreate,
    DocumentType,
    EditorPostView,
    Project,
    ProjectDetail,
    RequestContext,
)
from artify.services import documents, lifecycle, views

router = APIRouter(prefix="/editor", tags=["Editor"])


@router.get("", response_model=Dashboard)
async def editor_home(
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.dashboard(firestore_ops, ctx)


@router.get("/posts", response_model=List[EditorPostView])
async def list_posts(
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.editor_feed(firestore_ops, ctx)


@router.get("/posts/{post_id}", response_model=EditorPostView)
async def view_post(
    post_id: str,
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.editor_post_detail(firestore_ops, ctx, post_id)


@router.post("/posts/{post_id}/bid", response_model=Bid, status_code=status.HTTP_201_CREATED)
async def submit_bid(
    post_id: str,
    body: BidCreate,
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.create_bid(firestore_ops, ctx, post_id, body.price, body.comment)


@router.get("/projects", response_model=List[Project])
async def list_my_projects(
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.editor_projects(firestore_ops, ctx)


@router.get("/projects/{project_id}", response_model=ProjectDetail)
async def view_project(
    project_id: str,
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.project_detail(firestore_ops, ctx, project_id, redirect_to="/editor/projects")


@router.post("/projects/{project_id}/documents", response_model=AttachedDocument, status_code=status.HTTP_201_CREATED)
async def attach_edited_document(
    project_id: str,
    body: DocumentCreate,
    ctx: RequestContext = Depends(require_editor_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
    storage: ObjectStorage = Depends(get_object_storage),
):
    return documents.attach_document(
        firestore_ops, storage, ctx, project_id, body.post_id, body.name, body.description,
        body.key, body.bucket, body.region, body.extension, side=DocumentType.EDITED,
    )
