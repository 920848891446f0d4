"""
Post, bid, project and payment lifecycle.

    Post:    open -> in_progress -> payment_pending -> completed
    Project:         in_progress -> payment_pending -> completed
    Bid:     undecided -> approved | declined

Approving a bid, completing a project and recording a payment each touch more
than one record; they run inside ``run_transaction`` so either every write
lands or none does. Inside a transaction all reads come before the first write.
"""
import math
from datetime import timedelta
from typing import Any, Dict, Optional

from artify.core.errors import (
    AlreadyDecided,
    DuplicateBid,
    InvalidState,
    NotFound,
    PostNotOpen,
    ValidationError,
)
from artify.core.logging import get_logger
from artify.db.firebase_ops import FirestoreBaseModel
from artify.models.schemas import (
    Bid,
    Payment,
    PaymentMethod,
    Post,
    PostStatus,
    Project,
    ProjectStatus,
    RequestContext,
    Role,
    utcnow,
)
from artify.services.authorization import (
    require_post_owner,
    require_project_customer,
    require_project_party,
    require_role,
)
from artify.services.catalog import get_category

logger = get_logger("lifecycle")

POSTS = "posts"
BIDS = "bids"
PROJECTS = "projects"
PAYMENTS = "payments"

# Amounts are compared to the cent
AMOUNT_TOLERANCE = 0.005
# Ten years
MAX_DURATION_DAYS = 3650


def _positive(value: Any, integer: bool = False) -> Optional[float]:
    """Return ``value`` as a positive number, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    if integer:
        if not number.is_integer():
            return None
        return int(number)
    return number


def _load_post(reader, post_id: str, redirect_to: Optional[str] = None) -> Post:
    post = reader.get(collection_name=POSTS, document_id=post_id, pydantic_model=Post)
    if not post:
        raise NotFound("Post not found", redirect_to=redirect_to)
    return post


def _load_project(reader, project_id: str, redirect_to: Optional[str] = None) -> Project:
    project = reader.get(collection_name=PROJECTS, document_id=project_id, pydantic_model=Project)
    if not project:
        raise NotFound("Project not found", redirect_to=redirect_to)
    return project


def _load_bid_of_post(reader, post: Post, bid_id: str) -> Bid:
    bid = reader.get(collection_name=BIDS, document_id=bid_id, pydantic_model=Bid)
    if not bid or bid.post_id != post.id:
        raise NotFound("Bid not found for this post")
    return bid


def get_post(firestore_ops: FirestoreBaseModel, post_id: str, redirect_to: Optional[str] = None) -> Post:
    return _load_post(firestore_ops, post_id, redirect_to)


def get_project(firestore_ops: FirestoreBaseModel, project_id: str, redirect_to: Optional[str] = None) -> Project:
    return _load_project(firestore_ops, project_id, redirect_to)


def create_post(
    firestore_ops: FirestoreBaseModel,
    ctx: RequestContext,
    category_id: str,
    title: str,
    description: str,
    budget: Any,
    duration: Any,
) -> Post:
    customer_id = require_role(ctx, Role.CUSTOMER)

    errors: Dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = "Title is required"
    if not (description or "").strip():
        errors["description"] = "Description is required"
    budget_value = _positive(budget)
    if budget_value is None:
        errors["budget"] = "Budget must be a positive number"
    duration_value = _positive(duration, integer=True)
    if duration_value is None:
        errors["duration"] = "Duration must be a positive number of days"
    elif duration_value > MAX_DURATION_DAYS:
        errors["duration"] = f"Duration cannot exceed {MAX_DURATION_DAYS} days"
    if not category_id or not get_category(firestore_ops, category_id):
        errors["category_id"] = "Category not found"
    if errors:
        raise ValidationError("Post details are invalid", field_errors=errors)

    now = utcnow()
    post = Post(
        title=title.strip(),
        description=description.strip(),
        budget=budget_value,
        duration=duration_value,
        deadline=now + timedelta(days=duration_value),
        status=PostStatus.OPEN,
        customer_id=customer_id,
        category_id=category_id,
        created_at=now,
        updated_at=now,
    )
    firestore_ops.save(collection_name=POSTS, data_model=post, document_id=post.id)
    logger.info(f"Customer {customer_id} created post {post.id}")
    return post


def create_bid(firestore_ops: FirestoreBaseModel, ctx: RequestContext, post_id: str, price: Any, comment: str) -> Bid:
    editor_id = require_role(ctx, Role.EDITOR)

    errors: Dict[str, str] = {}
    price_value = _positive(price)
    if price_value is None:
        errors["price"] = "Price must be a positive number"
    if not (comment or "").strip():
        errors["comment"] = "Comment is required"
    if errors:
        raise ValidationError("Bid details are invalid", field_errors=errors)

    def _create(txn) -> Bid:
        post = _load_post(txn, post_id, redirect_to="/editor/posts")
        if post.status != PostStatus.OPEN:
            raise PostNotOpen()
        existing = txn.query(collection_name=BIDS, field="post_id", operator="==", value=post.id, pydantic_model=Bid)
        if any(b.editor_id == editor_id for b in existing):
            raise DuplicateBid()

        bid = Bid(price=price_value, comment=comment.strip(), editor_id=editor_id, post_id=post.id)
        txn.create(collection_name=BIDS, data_model=bid, document_id=bid.id)
        return bid

    bid = firestore_ops.run_transaction(_create)
    logger.info(f"Editor {editor_id} bid {bid.price} on post {post_id}")
    return bid


def approve_bid(firestore_ops: FirestoreBaseModel, ctx: RequestContext, post_id: str, bid_id: str) -> Project:
    """
    Accept ``bid_id``: the bid is approved, a project is opened for its editor
    and the post moves to in_progress, all in one transaction.
    """
    require_role(ctx, Role.CUSTOMER)

    def _approve(txn) -> Project:
        post = _load_post(txn, post_id, redirect_to="/customer/posts")
        customer_id = require_post_owner(ctx, post)
        bid = _load_bid_of_post(txn, post, bid_id)
        if bid.is_decided:
            raise AlreadyDecided()
        bids = txn.query(collection_name=BIDS, field="post_id", operator="==", value=post.id, pydantic_model=Bid)
        if post.status != PostStatus.OPEN or any(b.approved for b in bids):
            raise AlreadyDecided("This post already has an approved bid")

        project = Project(
            status=ProjectStatus.IN_PROGRESS,
            post_id=post.id,
            customer_id=customer_id,
            editor_id=bid.editor_id,
            bid_id=bid.id,
        )
        txn.update(collection_name=BIDS, document_id=bid.id, updates={"approved": True, "declined": False})
        txn.create(collection_name=PROJECTS, data_model=project, document_id=project.id)
        txn.update(collection_name=POSTS, document_id=post.id, updates={"status": PostStatus.IN_PROGRESS.value})
        return project

    project = firestore_ops.run_transaction(_approve)
    logger.info(f"Bid {bid_id} approved; project {project.id} opened for post {post_id}")
    return project


def decline_bid(firestore_ops: FirestoreBaseModel, ctx: RequestContext, post_id: str, bid_id: str) -> Bid:
    """Decline a bid. The post keeps its status and stays open to other bids."""
    require_role(ctx, Role.CUSTOMER)

    def _decline(txn) -> Bid:
        post = _load_post(txn, post_id, redirect_to="/customer/posts")
        require_post_owner(ctx, post)
        bid = _load_bid_of_post(txn, post, bid_id)
        if bid.is_decided:
            raise AlreadyDecided()
        txn.update(collection_name=BIDS, document_id=bid.id, updates={"approved": False, "declined": True})
        return bid.model_copy(update={"declined": True})

    bid = firestore_ops.run_transaction(_decline)
    logger.info(f"Bid {bid_id} declined on post {post_id}")
    return bid


def complete_project(firestore_ops: FirestoreBaseModel, ctx: RequestContext, project_id: str) -> Project:
    """Mark the work delivered; project and post wait for payment."""
    require_role(ctx, Role.CUSTOMER, Role.EDITOR)

    def _complete(txn) -> Project:
        project = _load_project(txn, project_id)
        require_project_party(ctx, project)
        if project.status != ProjectStatus.IN_PROGRESS:
            raise InvalidState(f"Project is {project.status.value}, not in progress")
        post = _load_post(txn, project.post_id)

        pending = ProjectStatus.PAYMENT_PENDING.value
        txn.update(collection_name=PROJECTS, document_id=project.id, updates={"status": pending})
        txn.update(collection_name=POSTS, document_id=post.id, updates={"status": PostStatus.PAYMENT_PENDING.value})
        return project.model_copy(update={"status": ProjectStatus.PAYMENT_PENDING})

    project = firestore_ops.run_transaction(_complete)
    logger.info(f"Project {project_id} is awaiting payment")
    return project


def _parse_method(method: Any) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError.for_field("payment_method", f"Payment method must be one of: {allowed}")


def record_payment(
    firestore_ops: FirestoreBaseModel,
    ctx: RequestContext,
    project_id: str,
    method: Any,
    amount: Any = None,
) -> Payment:
    """
    Settle a project awaiting payment.

    The amount charged is the approved bid's price. A client-supplied amount is
    only checked against it.
    """
    require_role(ctx, Role.CUSTOMER)
    payment_method = _parse_method(method)

    def _pay(txn) -> Payment:
        project = _load_project(txn, project_id)
        customer_id = require_project_customer(ctx, project)
        if project.status != ProjectStatus.PAYMENT_PENDING or project.payment_id:
            raise InvalidState(f"Project is {project.status.value}, not awaiting payment")
        existing = txn.query(collection_name=PAYMENTS, field="project_id", operator="==", value=project.id)
        if existing:
            raise InvalidState("Project has already been paid")
        bid = txn.get(collection_name=BIDS, document_id=project.bid_id, pydantic_model=Bid)
        if not bid or not bid.approved:
            raise InvalidState("Project has no approved bid to pay")
        if amount is not None:
            supplied = _positive(amount)
            if supplied is None or abs(supplied - bid.price) > AMOUNT_TOLERANCE:
                raise ValidationError.for_field("amount", f"Amount must equal the accepted price of {bid.price:.2f}")

        payment = Payment(
            amount=bid.price,
            payment_method=payment_method,
            project_id=project.id,
            customer_id=customer_id,
            editor_id=project.editor_id,
        )
        txn.create(collection_name=PAYMENTS, data_model=payment, document_id=payment.id)
        txn.update(
            collection_name=PROJECTS,
            document_id=project.id,
            updates={"status": ProjectStatus.COMPLETED.value, "payment_id": payment.id},
        )
        txn.update(collection_name=POSTS, document_id=project.post_id, updates={"status": PostStatus.COMPLETED.value})
        return payment

    payment = firestore_ops.run_transaction(_pay)
    logger.info(f"Payment {payment.id} of {payment.amount} recorded for project {project_id}")
    return payment
