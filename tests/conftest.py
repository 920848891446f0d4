import copy
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel as PydanticBaseModel

from artify.db.firebase_ops import get_firestore_ops_instance
from artify.db.storage import ObjectStorage, get_object_storage
from artify.main import app
from artify.models.schemas import RequestContext, Role
from artify.services import catalog, identity


def _prepare(data_model: Any) -> Dict[str, Any]:
    if isinstance(data_model, PydanticBaseModel):
        return data_model.model_dump(mode="json")
    return copy.deepcopy(data_model)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _out(doc_id: str, data: Dict[str, Any], pydantic_model=None):
    data = {"id": doc_id, **copy.deepcopy(data)}
    return pydantic_model(**data) if pydantic_model else data


class InMemoryTransaction:
    """Buffers writes like a Firestore transaction and refuses reads after a write."""

    def __init__(self, store: "InMemoryFirestoreOps"):
        self.store = store
        self.writes = []

    def _check_read(self):
        assert not self.writes, "transaction read after write"

    def get(self, collection_name, document_id, pydantic_model=None):
        self._check_read()
        return self.store.get(collection_name, document_id, pydantic_model)

    def query(self, collection_name, field, operator, value, pydantic_model=None):
        self._check_read()
        return self.store.query(collection_name, field, operator, value, pydantic_model)

    def create(self, collection_name, data_model, document_id):
        self.store.check_failure(collection_name)
        self.writes.append(("create", collection_name, document_id, _prepare(data_model)))
        return document_id

    def update(self, collection_name, document_id, updates):
        self.store.check_failure(collection_name)
        self.writes.append(("update", collection_name, document_id, copy.deepcopy(updates)))

    def commit(self):
        for kind, collection_name, document_id, data in self.writes:
            docs = self.store.collections[collection_name]
            if kind == "create":
                if document_id in docs:
                    raise RuntimeError(f"{collection_name}/{document_id} already exists")
                data.pop("id", None)
                data.setdefault("created_at", _now())
                docs[document_id] = data
            else:
                if document_id not in docs:
                    raise RuntimeError(f"{collection_name}/{document_id} does not exist")
                docs[document_id].update(data, updated_at=_now())


class InMemoryFirestoreOps:
    """Dict-backed stand-in for FirestoreBaseModel."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = defaultdict(dict)
        self.fail_writes_to: Optional[str] = None

    def check_failure(self, collection_name):
        if collection_name == self.fail_writes_to:
            raise RuntimeError(f"simulated write failure on {collection_name}")

    def save(self, collection_name, data_model, document_id):
        data = _prepare(data_model)
        data.pop("id", None)
        existing = self.collections[collection_name].get(document_id, {})
        data["updated_at"] = _now()
        data.setdefault("created_at", existing.get("created_at", _now()))
        self.collections[collection_name][document_id] = {**existing, **data}
        return document_id

    def get(self, collection_name, document_id, pydantic_model=None):
        data = self.collections[collection_name].get(document_id)
        return _out(document_id, data, pydantic_model) if data is not None else None

    def get_all(self, collection_name, pydantic_model=None):
        return [_out(doc_id, data, pydantic_model) for doc_id, data in self.collections[collection_name].items()]

    def query(self, collection_name, field, operator, value, pydantic_model=None):
        assert operator == "==", "only equality queries are used"
        return [
            _out(doc_id, data, pydantic_model)
            for doc_id, data in self.collections[collection_name].items()
            if data.get(field) == value
        ]

    def delete(self, collection_name, document_id):
        self.collections[collection_name].pop(document_id, None)
        return True

    def run_transaction(self, callback):
        txn = InMemoryTransaction(self)
        result = callback(txn)
        txn.commit()
        return result


@pytest.fixture
def store():
    return InMemoryFirestoreOps()


@pytest.fixture
def mock_s3():
    s3 = MagicMock()
    s3.generate_presigned_url.return_value = "https://signed.example/upload"
    return s3


@pytest.fixture
def storage(mock_s3):
    return ObjectStorage(bucket="artify-test", region="eu-west-1", client=mock_s3)


@pytest.fixture
def override_deps(store, storage):
    app.dependency_overrides[get_firestore_ops_instance] = lambda: store
    app.dependency_overrides[get_object_storage] = lambda: storage
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(override_deps):
    """Each client keeps its own cookie jar, so several users can act at once."""
    def _make(**kwargs):
        return TestClient(app, follow_redirects=False, **kwargs)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


# --- Records and contexts ---

@pytest.fixture
def customer(store):
    return identity.register_customer(store, "Cara Customer", "cara@example.com", "password123")


@pytest.fixture
def editor(store):
    return identity.register_editor(
        store, "Eddie Editor", "eddie@example.com", "password123",
        experience="5 years", portfolio="https://portfolio.example.com/eddie", skills="Color grading", awards="None",
    )


@pytest.fixture
def other_editor(store):
    return identity.register_editor(
        store, "Erin Editor", "erin@example.com", "password123",
        experience="2 years", portfolio="https://portfolio.example.com/erin", skills="Retouching", awards="Best newcomer",
    )


@pytest.fixture
def admin(store):
    return identity.create_admin(store, "Ada Admin", "ada@example.com", "password123")


@pytest.fixture
def category(store):
    return catalog.save_category(store, "Photo-Editing", "Professional photo editing")


def ctx_for(principal) -> RequestContext:
    return RequestContext(principal_id=principal.id, role=Role(principal.role))


@pytest.fixture
def customer_ctx(customer):
    return ctx_for(customer)


@pytest.fixture
def editor_ctx(editor):
    return ctx_for(editor)


@pytest.fixture
def other_editor_ctx(other_editor):
    return ctx_for(other_editor)


@pytest.fixture
def admin_ctx(admin):
    return ctx_for(admin)


def login(client: TestClient, role: str, email: str, password: str = "password123"):
    response = client.post("/auth/login", json={"role": role, "email": email, "password": password})
    assert response.status_code == 200, response.text
    return response
