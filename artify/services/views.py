"""
Read-side queries behind the customer, editor and admin areas.
"""
from typing import Dict, List, Optional

from artify.db.firebase_ops import FirestoreBaseModel
from artify.models.schemas import (
    PRINCIPAL_COLLECTIONS,
    AdminPostView,
    Bid,
    BidWithEditor,
    Category,
    Customer,
    Dashboard,
    DocumentType,
    Editor,
    EditorPostView,
    Payment,
    Post,
    PostDetail,
    PostStatus,
    Project,
    ProjectDetail,
    RequestContext,
    Role,
)
from artify.services.authorization import require_post_owner, require_project_party, require_role
from artify.services.catalog import CATEGORIES
from artify.services.documents import list_documents
from artify.services.lifecycle import BIDS, PAYMENTS, POSTS, PROJECTS, get_post, get_project


def _newest_first(records):
    return sorted(records, key=lambda r: r.created_at, reverse=True)


def _by_id(firestore_ops: FirestoreBaseModel, collection_name: str, pydantic_model) -> Dict[str, object]:
    return {r.id: r for r in firestore_ops.get_all(collection_name=collection_name, pydantic_model=pydantic_model)}


def _bids_for_post(firestore_ops: FirestoreBaseModel, post_id: str) -> List[Bid]:
    bids = firestore_ops.query(collection_name=BIDS, field="post_id", operator="==", value=post_id, pydantic_model=Bid)
    return sorted(bids, key=lambda b: b.created_at)


def _projects_for(firestore_ops: FirestoreBaseModel, field: str, principal_id: str) -> List[Project]:
    projects = firestore_ops.query(
        collection_name=PROJECTS, field=field, operator="==", value=principal_id, pydantic_model=Project
    )
    return _newest_first(projects)


# --- Customer area ---

def customer_posts(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[Post]:
    customer_id = require_role(ctx, Role.CUSTOMER)
    posts = firestore_ops.query(collection_name=POSTS, field="customer_id", operator="==", value=customer_id, pydantic_model=Post)
    return _newest_first(posts)


def customer_post_detail(firestore_ops: FirestoreBaseModel, ctx: RequestContext, post_id: str) -> PostDetail:
    post = get_post(firestore_ops, post_id, redirect_to="/customer/posts")
    require_post_owner(ctx, post)
    editors = _by_id(firestore_ops, PRINCIPAL_COLLECTIONS[Role.EDITOR], Editor)
    return PostDetail(
        post=post,
        category=firestore_ops.get(collection_name=CATEGORIES, document_id=post.category_id, pydantic_model=Category),
        customer=firestore_ops.get(
            collection_name=PRINCIPAL_COLLECTIONS[Role.CUSTOMER], document_id=post.customer_id, pydantic_model=Customer
        ),
        bids=[BidWithEditor(bid=b, editor=editors.get(b.editor_id)) for b in _bids_for_post(firestore_ops, post.id)],
    )


def customer_projects(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[Project]:
    customer_id = require_role(ctx, Role.CUSTOMER)
    return _projects_for(firestore_ops, "customer_id", customer_id)


# --- Editor area ---

def editor_feed(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[EditorPostView]:
    """Open posts, plus in-progress posts this editor won, newest first."""
    editor_id = require_role(ctx, Role.EDITOR)
    categories = _by_id(firestore_ops, CATEGORIES, Category)
    my_bids = {
        b.post_id: b
        for b in firestore_ops.query(collection_name=BIDS, field="editor_id", operator="==", value=editor_id, pydantic_model=Bid)
    }
    my_projects = {p.post_id: p.id for p in _projects_for(firestore_ops, "editor_id", editor_id)}

    views = []
    for post in _newest_first(firestore_ops.get_all(collection_name=POSTS, pydantic_model=Post)):
        my_bid = my_bids.get(post.id)
        won = my_bid is not None and my_bid.approved
        if post.status == PostStatus.OPEN or (post.status == PostStatus.IN_PROGRESS and won):
            views.append(EditorPostView(
                post=post,
                category=categories.get(post.category_id),
                my_bid=my_bid,
                my_project_id=my_projects.get(post.id),
            ))
    return views


def editor_post_detail(firestore_ops: FirestoreBaseModel, ctx: RequestContext, post_id: str) -> EditorPostView:
    editor_id = require_role(ctx, Role.EDITOR)
    post = get_post(firestore_ops, post_id, redirect_to="/editor/posts")
    my_bid = next((b for b in _bids_for_post(firestore_ops, post.id) if b.editor_id == editor_id), None)
    return EditorPostView(
        post=post,
        category=firestore_ops.get(collection_name=CATEGORIES, document_id=post.category_id, pydantic_model=Category),
        my_bid=my_bid,
    )


def editor_projects(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[Project]:
    editor_id = require_role(ctx, Role.EDITOR)
    return _projects_for(firestore_ops, "editor_id", editor_id)


# --- Shared ---

def project_detail(firestore_ops: FirestoreBaseModel, ctx: RequestContext, project_id: str, redirect_to: Optional[str] = None) -> ProjectDetail:
    project = get_project(firestore_ops, project_id, redirect_to=redirect_to)
    require_project_party(ctx, project)
    payment = None
    if project.payment_id:
        payment = firestore_ops.get(collection_name=PAYMENTS, document_id=project.payment_id, pydantic_model=Payment)
    return ProjectDetail(
        project=project,
        post=get_post(firestore_ops, project.post_id, redirect_to=redirect_to),
        customer=firestore_ops.get(
            collection_name=PRINCIPAL_COLLECTIONS[Role.CUSTOMER], document_id=project.customer_id, pydantic_model=Customer
        ),
        editor=firestore_ops.get(
            collection_name=PRINCIPAL_COLLECTIONS[Role.EDITOR], document_id=project.editor_id, pydantic_model=Editor
        ),
        bid=firestore_ops.get(collection_name=BIDS, document_id=project.bid_id, pydantic_model=Bid),
        payment=payment,
        customer_documents=list_documents(firestore_ops, project.id, DocumentType.SOURCE),
        editor_documents=list_documents(firestore_ops, project.id, DocumentType.EDITED),
    )


def dashboard(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> Dashboard:
    """Counts shown on each role's home page."""
    require_role(ctx, Role.ADMIN, Role.CUSTOMER, Role.EDITOR)
    if ctx.role == Role.ADMIN:
        counts = {
            "customers": len(firestore_ops.get_all(collection_name=PRINCIPAL_COLLECTIONS[Role.CUSTOMER])),
            "editors": len(firestore_ops.get_all(collection_name=PRINCIPAL_COLLECTIONS[Role.EDITOR])),
            "posts": len(firestore_ops.get_all(collection_name=POSTS)),
            "categories": len(firestore_ops.get_all(collection_name=CATEGORIES)),
        }
    elif ctx.role == Role.CUSTOMER:
        counts = {
            "posts": len(customer_posts(firestore_ops, ctx)),
            "projects": len(customer_projects(firestore_ops, ctx)),
        }
    else:
        counts = {
            "open_posts": sum(1 for v in editor_feed(firestore_ops, ctx) if v.post.status == PostStatus.OPEN),
            "projects": len(editor_projects(firestore_ops, ctx)),
        }
    return Dashboard(role=ctx.role, counts=counts)


# --- Admin area ---

def admin_customers(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[Customer]:
    require_role(ctx, Role.ADMIN)
    customers = firestore_ops.get_all(collection_name=PRINCIPAL_COLLECTIONS[Role.CUSTOMER], pydantic_model=Customer)
    return sorted(customers, key=lambda c: c.created_at)


def admin_editors(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[Editor]:
    require_role(ctx, Role.ADMIN)
    editors = firestore_ops.get_all(collection_name=PRINCIPAL_COLLECTIONS[Role.EDITOR], pydantic_model=Editor)
    return sorted(editors, key=lambda e: e.created_at)


def admin_posts(firestore_ops: FirestoreBaseModel, ctx: RequestContext) -> List[AdminPostView]:
    """Every post with its bid count and, once a bid is approved, the assigned editor."""
    require_role(ctx, Role.ADMIN)
    customers = _by_id(firestore_ops, PRINCIPAL_COLLECTIONS[Role.CUSTOMER], Customer)
    bid_counts: Dict[str, int] = {}
    for bid in firestore_ops.get_all(collection_name=BIDS, pydantic_model=Bid):
        bid_counts[bid.post_id] = bid_counts.get(bid.post_id, 0) + 1
    editor_by_post = {p.post_id: p.editor_id for p in firestore_ops.get_all(collection_name=PROJECTS, pydantic_model=Project)}

    return [
        AdminPostView(
            post=post,
            customer=customers.get(post.customer_id),
            bid_count=bid_counts.get(post.id, 0),
            editor_id=editor_by_post.get(post.id),
        )
        for post in _newest_first(firestore_ops.get_all(collection_name=POSTS, pydantic_model=Post))
    ]
