from typing import List

from fastapi import APIRouter, Depends, status

from artify.core.dependencies import require_customer_area
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.db.storage import ObjectStorage, get_object_storage
from artify.models.schemas import (
    AttachedDocument,
    Bid,
    Category,
    Dashboard,
    DocumentCreate,
    DocumentType,
    Post,
    PostCreate,
    PostDetail,
    Project,
    ProjectDetail,
    RequestContext,
)
from artify.services import catalog, documents, lifecycle, views

router = APIRouter(prefix="/customer", tags=["Customer"])


@router.get("", response_model=Dashboard)
async def customer_home(
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.dashboard(firestore_ops, ctx)


@router.get("/services", response_model=List[Category])
async def browse_services(
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return catalog.list_categories(firestore_ops)


@router.get("/posts", response_model=List[Post])
async def list_my_posts(
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.customer_posts(firestore_ops, ctx)


@router.post("/posts/{category_id}/new-post", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    category_id: str,
    body: PostCreate,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.create_post(
        firestore_ops, ctx, category_id, body.title, body.description, body.budget, body.duration
    )


@router.get("/posts/{post_id}", response_model=PostDetail)
async def view_post_bids(
    post_id: str,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.customer_post_detail(firestore_ops, ctx, post_id)


@router.post("/posts/{post_id}/bids/{bid_id}/approve", response_model=Project, status_code=status.HTTP_201_CREATED)
async def approve_bid(
    post_id: str,
    bid_id: str,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.approve_bid(firestore_ops, ctx, post_id, bid_id)


@router.post("/posts/{post_id}/bids/{bid_id}/decline", response_model=Bid)
async def decline_bid(
    post_id: str,
    bid_id: str,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return lifecycle.decline_bid(firestore_ops, ctx, post_id, bid_id)


@router.get("/projects", response_model=List[Project])
async def list_my_projects(
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.customer_projects(firestore_ops, ctx)


@router.get("/projects/{project_id}", response_model=ProjectDetail)
async def view_project(
    project_id: str,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.project_detail(firestore_ops, ctx, project_id, redirect_to="/customer/projects")


@router.post("/projects/{project_id}/documents", response_model=AttachedDocument, status_code=status.HTTP_201_CREATED)
async def attach_source_document(
    project_id: str,
    body: DocumentCreate,
    ctx: RequestContext = Depends(require_customer_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
    storage: ObjectStorage = Depends(get_object_storage),
):
    return documents.attach_document(
        firestore_ops, storage, ctx, project_id, body.post_id, body.name, body.description,
        body.key, body.bucket, body.region, body.extension, side=DocumentType.SOURCE,
    )
