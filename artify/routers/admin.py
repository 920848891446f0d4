from typing import List

from fastapi import APIRouter, Depends, status

from artify.core.dependencies import require_admin_area
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.models.schemas import AdminPostView, Category, CategoryCreate, Customer, Dashboard, Editor, RequestContext
from artify.services import catalog, views

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("", response_model=Dashboard)
async def admin_home(
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.dashboard(firestore_ops, ctx)


@router.get("/customers", response_model=List[Customer])
async def list_customers(
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.admin_customers(firestore_ops, ctx)


@router.get("/editors", response_model=List[Editor])
async def list_editors(
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.admin_editors(firestore_ops, ctx)


@router.get("/posts", response_model=List[AdminPostView])
async def list_posts(
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return views.admin_posts(firestore_ops, ctx)


@router.get("/services", response_model=List[Category])
async def list_services(
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return catalog.list_categories(firestore_ops)


@router.post("/services", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_service(
    body: CategoryCreate,
    ctx: RequestContext = Depends(require_admin_area),
    firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance),
):
    return catalog.create_category(firestore_ops, ctx, body.name, body.description, body.icon)
