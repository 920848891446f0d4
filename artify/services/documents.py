"""
Files exchanged on a project.

The document record is written first; the caller then receives a signed URL
to PUT the bytes to object storage. A failed upload leaves the record behind.
"""
from typing import Dict, List, Optional

from artify.core.errors import Forbidden, InvalidState, ValidationError
from artify.core.logging import get_logger
from artify.db.firebase_ops import FirestoreBaseModel
from artify.db.storage import ObjectStorage, public_url
from artify.models.schemas import (
    AttachedDocument,
    Document,
    DocumentType,
    ProjectStatus,
    RequestContext,
    Role,
)
from artify.services.authorization import require_project_party
from artify.services.lifecycle import get_project

logger = get_logger("documents")

DOCUMENTS = "documents"
MIN_NAME_LENGTH = 3

SIDE_BY_ROLE = {
    Role.CUSTOMER: DocumentType.SOURCE,
    Role.EDITOR: DocumentType.EDITED,
}


def attach_document(
    firestore_ops: FirestoreBaseModel,
    storage: ObjectStorage,
    ctx: RequestContext,
    project_id: str,
    post_id: str,
    name: str,
    description: Optional[str],
    key: str,
    bucket: str,
    region: str,
    extension: str,
    side: Optional[DocumentType] = None,
) -> AttachedDocument:
    project = get_project(firestore_ops, project_id)
    owner_id = require_project_party(ctx, project)
    own_side = SIDE_BY_ROLE[ctx.role]
    if side is not None and DocumentType(side) != own_side:
        raise Forbidden(f"{ctx.role.value.capitalize()}s can only attach {own_side.value} documents")

    errors: Dict[str, str] = {}
    if len((name or "").strip()) < MIN_NAME_LENGTH:
        errors["name"] = f"File name must be at least {MIN_NAME_LENGTH} characters long"
    for field, value in (("key", key), ("bucket", bucket), ("region", region), ("extension", extension)):
        if not (value or "").strip():
            errors[field] = "File must be selected"
    if not post_id:
        errors["post_id"] = "postId is required"
    elif post_id != project.post_id:
        errors["post_id"] = "Post does not belong to this project"
    if errors:
        raise ValidationError("Document details are invalid", field_errors=errors)

    if project.status == ProjectStatus.COMPLETED:
        raise InvalidState("Project is completed; no more documents can be attached")

    document = Document(
        name=name.strip(),
        description=description,
        key=key,
        bucket=bucket,
        region=region,
        url=public_url(key, bucket=bucket, region=region),
        extension=extension.lstrip(".").lower(),
        type=own_side,
        project_id=project.id,
        post_id=project.post_id,
        owner_id=owner_id,
        owner_role=ctx.role,
    )
    firestore_ops.save(collection_name=DOCUMENTS, data_model=document, document_id=document.id)
    logger.info(f"{ctx.role.value} {owner_id} attached {document.type.value} document {document.id} to project {project.id}")

    upload_url = storage.presigned_put_url(key, bucket=bucket)
    return AttachedDocument(document=document, upload_url=upload_url)


def list_documents(firestore_ops: FirestoreBaseModel, project_id: str, side: DocumentType) -> List[Document]:
    """Documents of one side of a project, oldest first."""
    documents = firestore_ops.query(
        collection_name=DOCUMENTS,
        field="project_id",
        operator="==",
        value=project_id,
        pydantic_model=Document,
    )
    side = DocumentType(side)
    return sorted((d for d in documents if d.type == side), key=lambda d: d.created_at)


def list_project_documents(firestore_ops: FirestoreBaseModel, ctx: RequestContext, project_id: str, side: DocumentType) -> List[Document]:
    project = get_project(firestore_ops, project_id)
    require_project_party(ctx, project)
    return list_documents(firestore_ops, project.id, side)
