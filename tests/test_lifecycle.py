from datetime import timedelta

import pytest

from artify.core.errors import (
    AlreadyDecided,
    DuplicateBid,
    Forbidden,
    InvalidState,
    NotAuthenticated,
    NotFound,
    PostNotOpen,
    ValidationError,
)
from artify.models.schemas import Bid, Payment, Post, PostStatus, Project, ProjectStatus, RequestContext
from artify.services import identity, lifecycle
from conftest import ctx_for

STATUS_ORDER = [PostStatus.OPEN, PostStatus.IN_PROGRESS, PostStatus.PAYMENT_PENDING, PostStatus.COMPLETED]


def _post(store, post_id) -> Post:
    return store.get("posts", post_id, Post)


def _bid(store, bid_id) -> Bid:
    return store.get("bids", bid_id, Bid)


def _projects(store):
    return store.get_all("projects", pydantic_model=Project)


@pytest.fixture
def open_post(store, customer_ctx, category):
    return lifecycle.create_post(store, customer_ctx, category.id, "Wedding album", "Retouch 40 photos", 500, 5)


# --- createPost ---

def test_create_post_is_open_with_deadline(store, customer, customer_ctx, category):
    post = lifecycle.create_post(store, customer_ctx, category.id, "Logo", "A new logo", "250.5", "3")

    assert post.status == PostStatus.OPEN
    assert post.budget == 250.5
    assert post.duration == 3
    assert post.customer_id == customer.id
    assert post.deadline - post.created_at == timedelta(days=3)
    assert _post(store, post.id).status == PostStatus.OPEN


def test_create_post_reports_every_bad_field(store, customer_ctx):
    with pytest.raises(ValidationError) as exc_info:
        lifecycle.create_post(store, customer_ctx, "missing-category", "", " ", 0, -2)

    assert set(exc_info.value.field_errors) == {"title", "description", "budget", "duration", "category_id"}
    assert store.get_all("posts") == []


def test_create_post_rejects_fractional_duration(store, customer_ctx, category):
    with pytest.raises(ValidationError) as exc_info:
        lifecycle.create_post(store, customer_ctx, category.id, "Logo", "A new logo", 100, 1.5)
    assert "duration" in exc_info.value.field_errors


@pytest.mark.parametrize("budget, duration, field", [
    (float("nan"), 3, "budget"),
    (float("inf"), 3, "budget"),
    (100, 10**9, "duration"),
    (100, 10**400, "duration"),
    (100, lifecycle.MAX_DURATION_DAYS + 1, "duration"),
])
def test_create_post_rejects_out_of_range_numbers(store, customer_ctx, category, budget, duration, field):
    with pytest.raises(ValidationError) as exc_info:
        lifecycle.create_post(store, customer_ctx, category.id, "Logo", "A new logo", budget, duration)
    assert set(exc_info.value.field_errors) == {field}
    assert store.get_all("posts") == []


def test_create_post_accepts_longest_duration(store, customer_ctx, category):
    post = lifecycle.create_post(store, customer_ctx, category.id, "Logo", "A new logo", 100, lifecycle.MAX_DURATION_DAYS)
    assert post.deadline - post.created_at == timedelta(days=lifecycle.MAX_DURATION_DAYS)


def test_only_customers_create_posts(store, editor_ctx, category):
    with pytest.raises(Forbidden):
        lifecycle.create_post(store, editor_ctx, category.id, "Logo", "A new logo", 100, 2)
    with pytest.raises(NotAuthenticated):
        lifecycle.create_post(store, RequestContext(), category.id, "Logo", "A new logo", 100, 2)


# --- createBid ---

def test_create_bid(store, editor, editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "I can do this in 4 days")

    assert bid.editor_id == editor.id
    assert bid.post_id == open_post.id
    assert not bid.approved and not bid.declined
    assert _bid(store, bid.id).price == 450


@pytest.mark.parametrize("price, comment, field", [
    (0, "ok", "price"),
    (-5, "ok", "price"),
    ("abc", "ok", "price"),
    (float("nan"), "ok", "price"),
    (float("inf"), "ok", "price"),
    (10, "", "comment"),
])
def test_create_bid_validation(store, editor_ctx, open_post, price, comment, field):
    with pytest.raises(ValidationError) as exc_info:
        lifecycle.create_bid(store, editor_ctx, open_post.id, price, comment)
    assert field in exc_info.value.field_errors


def test_create_bid_unknown_post(store, editor_ctx):
    with pytest.raises(NotFound):
        lifecycle.create_bid(store, editor_ctx, "nope", 100, "hi")


def test_bid_on_in_progress_post_fails(store, customer_ctx, editor_ctx, other_editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "Me")
    lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)

    with pytest.raises(PostNotOpen):
        lifecycle.create_bid(store, other_editor_ctx, open_post.id, 300, "Me too")


def test_second_bid_by_same_editor_is_rejected(store, editor_ctx, open_post):
    lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "First")
    with pytest.raises(DuplicateBid):
        lifecycle.create_bid(store, editor_ctx, open_post.id, 400, "Cheaper")
    assert len(store.get_all("bids")) == 1


def test_customers_cannot_bid(store, customer_ctx, open_post):
    with pytest.raises(Forbidden):
        lifecycle.create_bid(store, customer_ctx, open_post.id, 100, "self bid")


# --- approveBid / declineBid ---

def test_approve_bid_creates_project_atomically(store, customer, editor, customer_ctx, editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "Me")

    project = lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)

    assert project.status == ProjectStatus.IN_PROGRESS
    assert (project.post_id, project.customer_id, project.editor_id, project.bid_id) == (
        open_post.id, customer.id, editor.id, bid.id
    )
    assert _bid(store, bid.id).approved is True
    assert _post(store, open_post.id).status == PostStatus.IN_PROGRESS
    assert [p.id for p in _projects(store)] == [project.id]


def test_failed_approval_leaves_nothing_behind(store, customer_ctx, editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "Me")
    store.fail_writes_to = "posts"

    with pytest.raises(RuntimeError):
        lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)

    assert _bid(store, bid.id).approved is False
    assert _post(store, open_post.id).status == PostStatus.OPEN
    assert _projects(store) == []


def test_approve_requires_post_owner(store, editor_ctx, open_post):
    stranger = identity.register_customer(store, "Sam", "sam@example.com", "password123")
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "Me")

    with pytest.raises(Forbidden):
        lifecycle.approve_bid(store, ctx_for(stranger), open_post.id, bid.id)
    with pytest.raises(Forbidden):
        lifecycle.decline_bid(store, ctx_for(stranger), open_post.id, bid.id)
    assert not _bid(store, bid.id).is_decided


def test_approve_bid_of_another_post_is_not_found(store, customer_ctx, editor_ctx, category, open_post):
    other_post = lifecycle.create_post(store, customer_ctx, category.id, "Poster", "Concert poster", 80, 2)
    bid = lifecycle.create_bid(store, editor_ctx, other_post.id, 70, "Me")

    with pytest.raises(NotFound):
        lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)


def test_only_one_bid_can_be_approved(store, customer_ctx, editor_ctx, other_editor_ctx, open_post):
    first = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "A")
    second = lifecycle.create_bid(store, other_editor_ctx, open_post.id, 400, "B")
    lifecycle.approve_bid(store, customer_ctx, open_post.id, first.id)

    with pytest.raises(AlreadyDecided):
        lifecycle.approve_bid(store, customer_ctx, open_post.id, second.id)
    with pytest.raises(AlreadyDecided):
        lifecycle.approve_bid(store, customer_ctx, open_post.id, first.id)

    approved = [b for b in store.get_all("bids", pydantic_model=Bid) if b.approved]
    assert len(approved) == 1
    assert len(_projects(store)) == 1


def test_declined_bid_is_terminal(store, customer_ctx, editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "A")
    declined = lifecycle.decline_bid(store, customer_ctx, open_post.id, bid.id)

    assert declined.declined is True
    with pytest.raises(AlreadyDecided):
        lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)
    with pytest.raises(AlreadyDecided):
        lifecycle.decline_bid(store, customer_ctx, open_post.id, bid.id)

    stored = _bid(store, bid.id)
    assert stored.declined and not stored.approved
    assert _post(store, open_post.id).status == PostStatus.OPEN


def test_decline_one_approve_another(store, customer_ctx, editor_ctx, other_editor, other_editor_ctx, open_post):
    bid_a = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "A")
    bid_b = lifecycle.create_bid(store, other_editor_ctx, open_post.id, 420, "B")

    lifecycle.decline_bid(store, customer_ctx, open_post.id, bid_a.id)
    lifecycle.approve_bid(store, customer_ctx, open_post.id, bid_b.id)

    assert _bid(store, bid_a.id).declined is True
    assert _bid(store, bid_b.id).approved is True
    projects = _projects(store)
    assert len(projects) == 1
    assert projects[0].editor_id == other_editor.id
    for bid in store.get_all("bids", pydantic_model=Bid):
        assert not (bid.approved and bid.declined)


# --- completeProject / recordPayment ---

@pytest.fixture
def project(store, customer_ctx, editor_ctx, open_post):
    bid = lifecycle.create_bid(store, editor_ctx, open_post.id, 450, "Me")
    return lifecycle.approve_bid(store, customer_ctx, open_post.id, bid.id)


def test_complete_project_moves_both_to_payment_pending(store, editor_ctx, project):
    completed = lifecycle.complete_project(store, editor_ctx, project.id)

    assert completed.status == ProjectStatus.PAYMENT_PENDING
    assert store.get("projects", project.id, Project).status == ProjectStatus.PAYMENT_PENDING
    assert _post(store, project.post_id).status == PostStatus.PAYMENT_PENDING


def test_customer_may_also_complete(store, customer_ctx, project):
    lifecycle.complete_project(store, customer_ctx, project.id)
    assert store.get("projects", project.id, Project).status == ProjectStatus.PAYMENT_PENDING


def test_complete_project_twice_is_invalid(store, editor_ctx, project):
    lifecycle.complete_project(store, editor_ctx, project.id)
    with pytest.raises(InvalidState):
        lifecycle.complete_project(store, editor_ctx, project.id)


def test_outsider_cannot_complete(store, other_editor_ctx, project):
    with pytest.raises(Forbidden):
        lifecycle.complete_project(store, other_editor_ctx, project.id)


def test_payment_requires_payment_pending(store, customer_ctx, project):
    with pytest.raises(InvalidState):
        lifecycle.record_payment(store, customer_ctx, project.id, "credit_card", 450)
    assert store.get_all("payments") == []


def test_payment_validates_method_and_amount(store, customer_ctx, editor_ctx, project):
    lifecycle.complete_project(store, editor_ctx, project.id)

    with pytest.raises(ValidationError) as exc_info:
        lifecycle.record_payment(store, customer_ctx, project.id, "cash", 450)
    assert "payment_method" in exc_info.value.field_errors

    with pytest.raises(ValidationError) as exc_info:
        lifecycle.record_payment(store, customer_ctx, project.id, "wallet", 1)
    assert "amount" in exc_info.value.field_errors
    assert store.get_all("payments") == []


def test_payment_amount_comes_from_bid(store, customer_ctx, editor_ctx, project):
    lifecycle.complete_project(store, editor_ctx, project.id)
    payment = lifecycle.record_payment(store, customer_ctx, project.id, "bank_transfer")
    assert payment.amount == 450


def test_only_project_customer_pays(store, editor_ctx, project):
    lifecycle.complete_project(store, editor_ctx, project.id)
    with pytest.raises(Forbidden):
        lifecycle.record_payment(store, editor_ctx, project.id, "wallet", 450)


def test_second_payment_is_rejected(store, customer_ctx, editor_ctx, project):
    lifecycle.complete_project(store, editor_ctx, project.id)
    lifecycle.record_payment(store, customer_ctx, project.id, "credit_card", 450)

    with pytest.raises(InvalidState):
        lifecycle.record_payment(store, customer_ctx, project.id, "credit_card", 450)
    assert len(store.get_all("payments")) == 1


def test_full_scenario(store, customer, editor, customer_ctx, editor_ctx, category):
    post = lifecycle.create_post(store, customer_ctx, category.id, "Promo video", "Cut a 60s promo", 500, 5)
    seen = [_post(store, post.id).status]

    bid = lifecycle.create_bid(store, editor_ctx, post.id, 450, "Done in 3 days")
    project = lifecycle.approve_bid(store, customer_ctx, post.id, bid.id)
    assert project.status == ProjectStatus.IN_PROGRESS
    seen.append(_post(store, post.id).status)

    lifecycle.complete_project(store, editor_ctx, project.id)
    assert store.get("projects", project.id, Project).status == ProjectStatus.PAYMENT_PENDING
    seen.append(_post(store, post.id).status)

    payment = lifecycle.record_payment(store, customer_ctx, project.id, "credit_card", 450)
    seen.append(_post(store, post.id).status)

    assert seen == STATUS_ORDER
    final = store.get("projects", project.id, Project)
    assert final.status == ProjectStatus.COMPLETED
    assert final.payment_id == payment.id
    payments = store.get_all("payments", pydantic_model=Payment)
    assert len(payments) == 1
    assert payments[0].amount == 450
    assert (payments[0].customer_id, payments[0].editor_id) == (customer.id, editor.id)
