from typing import List

from fastapi import APIRouter, Depends

from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.models.schemas import Category
from artify.services import catalog

router = APIRouter(tags=["Services"])


@router.get("/services", response_model=List[Category])
async def list_services(firestore_ops: FirestoreBaseModel = Depends(get_firestore_ops_instance)):
    """Public catalog of service categories."""
    return catalog.list_categories(firestore_ops)
