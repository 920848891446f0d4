from typing import List, Optional

from artify.core.errors import ValidationError
from artify.core.logging import get_logger
from artify.db.firebase_ops import FirestoreBaseModel
from artify.models.schemas import Category, RequestContext, Role
from artify.services.authorization import require_role

logger = get_logger("catalog")

CATEGORIES = "categories"

# Paint brush, used when an admin does not supply an icon
DEFAULT_ICON = (
    "data:image/svg+xml;base64,PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciIHdpZHRoPSIyNCIgaGVpZ2h0PSIyNCIg"
    "dmlld0JveD0iMCAwIDI0IDI0IiBmaWxsPSJub25lIiBzdHJva2U9IiNkYzI2MWMiIHN0cm9rZS13aWR0aD0iMiIgc3Ryb2tlLWxpbmVjYXA9InJv"
    "dW5kIiBzdHJva2UtbGluZWpvaW49InJvdW5kIj48cGF0aCBkPSJtOS4wNiAxMS45IDguMDctOC4wNmEyLjg1IDIuODUgMCAxIDEgNC4wMyA0LjAz"
    "bC04LjA2IDguMDgiLz48cGF0aCBkPSJNNy4wNyAxNC45NGMtMS42NiAwLTMgMS4zNS0zIDMuMDIgMCAxLjMzLTIuNSAxLjUyLTIgMi4wMiAxLjA4"
    "IDEuMSAyLjQ5IDIuMDIgNCAyLjAyIDIuMiAwIDQtMS44IDQtNC4wNGEzLjAxIDMuMDEgMCAwIDAtMy0zLjAyeiIvPjwvc3ZnPg=="
)


def list_categories(firestore_ops: FirestoreBaseModel) -> List[Category]:
    """All categories in creation order."""
    categories = firestore_ops.get_all(collection_name=CATEGORIES, pydantic_model=Category)
    return sorted(categories, key=lambda c: c.created_at)


def get_category(firestore_ops: FirestoreBaseModel, category_id: str) -> Optional[Category]:
    return firestore_ops.get(collection_name=CATEGORIES, document_id=category_id, pydantic_model=Category)


def save_category(firestore_ops: FirestoreBaseModel, name: str, description: str, icon: Optional[str] = None) -> Category:
    if not (name or "").strip():
        raise ValidationError.for_field("name", "Name is required")
    if not (description or "").strip():
        raise ValidationError.for_field("description", "Description is required")

    category = Category(name=name.strip(), description=description.strip(), icon=icon or DEFAULT_ICON)
    firestore_ops.save(collection_name=CATEGORIES, data_model=category, document_id=category.id)
    logger.info(f"Created category {category.id} ({category.name})")
    return category


def create_category(firestore_ops: FirestoreBaseModel, ctx: RequestContext, name: str, description: str, icon: Optional[str] = None) -> Category:
    require_role(ctx, Role.ADMIN)
    return save_category(firestore_ops, name, description, icon)
