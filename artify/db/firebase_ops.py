import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import BaseModel as PydanticBaseModel

from artify.core.config import config
from artify.core.logging import get_logger

logger = get_logger("firestore")

T = TypeVar("T")


class FirebaseManager:
    """
    Firebase Firestore Manager holding the process-wide client.
    """
    _instance = None
    _db = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(FirebaseManager, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._db is None:
            self.initialize_firebase()

    def initialize_firebase(self):
        """Initialize Firebase Admin SDK"""
        try:
            app = firebase_admin.get_app()
            self._db = firestore.client(app)
            logger.info("Using existing Firebase app")
            return
        except ValueError:
            pass  # App doesn't exist, so we need to initialize it

        options = {'projectId': config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
        cred_path = config.FIREBASE_CREDENTIALS_PATH
        if cred_path and os.path.exists(cred_path):
            cred = credentials.Certificate(cred_path)
            logger.info(f"Firebase initialized with service account key from {cred_path}")
        else:
            cred = credentials.ApplicationDefault()
            logger.info("Firebase initialized with application default credentials")

        firebase_admin.initialize_app(cred, options)
        self._db = firestore.client()

    def get_db(self):
        """Get Firestore database client"""
        return self._db


def _prepare_data_for_firestore(data_model: Any) -> Dict[str, Any]:
    """Converts Pydantic model or dict to Firestore-compatible dict."""
    if isinstance(data_model, PydanticBaseModel):
        return data_model.model_dump(mode="json")
    if isinstance(data_model, dict):
        return data_model.copy()
    raise ValueError("Data must be a Pydantic model or a dictionary.")


def _to_model(doc_id: str, data: Dict[str, Any], pydantic_model=None):
    data = {'id': doc_id, **data}
    if pydantic_model:
        return pydantic_model(**data)
    return data


class FirestoreTransaction:
    """
    Reads and buffered writes bound to one Firestore transaction.

    Firestore requires every read to happen before the first write; callers
    load everything they need, check it, then write.
    """

    def __init__(self, db, transaction):
        self.db = db
        self.transaction = transaction

    def get(self, collection_name: str, document_id: str, pydantic_model=None) -> Optional[Any]:
        doc = self.db.collection(collection_name).document(document_id).get(transaction=self.transaction)
        if not doc.exists:
            return None
        return _to_model(doc.id, doc.to_dict(), pydantic_model)

    def query(self, collection_name: str, field: str, operator: str, value: Any, pydantic_model=None) -> List[Any]:
        query_ref = self.db.collection(collection_name).where(filter=FieldFilter(field, operator, value))
        return [_to_model(doc.id, doc.to_dict(), pydantic_model) for doc in query_ref.stream(transaction=self.transaction)]

    def create(self, collection_name: str, data_model: Any, document_id: str) -> str:
        data = _prepare_data_for_firestore(data_model)
        data.pop('id', None)
        doc_ref = self.db.collection(collection_name).document(document_id)
        self.transaction.create(doc_ref, data)
        return document_id

    def update(self, collection_name: str, document_id: str, updates: Dict[str, Any]) -> None:
        updates_copy = updates.copy()
        updates_copy['updated_at'] = datetime.now(timezone.utc).isoformat()
        doc_ref = self.db.collection(collection_name).document(document_id)
        self.transaction.update(doc_ref, updates_copy)


class FirestoreBaseModel:
    """
    Store operations on Firestore collections. Records are plain dicts or
    Pydantic models; every record is keyed by its ``id``.
    """

    def __init__(self):
        self.firebase_manager = FirebaseManager()
        self.db = self.firebase_manager.get_db()

    def _require_db(self):
        if not self.db:
            raise RuntimeError("Database not initialized")
        return self.db

    def save(self, collection_name: str, data_model: Any, document_id: str) -> str:
        """Save Pydantic model or dictionary to Firestore under ``document_id``"""
        db = self._require_db()
        data = _prepare_data_for_firestore(data_model)
        data.pop('id', None)

        now = datetime.now(timezone.utc).isoformat()
        data['updated_at'] = now
        data.setdefault('created_at', now)

        db.collection(collection_name).document(document_id).set(data, merge=True)
        return document_id

    def get(self, collection_name: str, document_id: str, pydantic_model: Optional[type[PydanticBaseModel]] = None) -> Optional[Any]:
        """Get document from Firestore by ID, optionally parsing into a Pydantic model."""
        doc = self._require_db().collection(collection_name).document(document_id).get()
        if not doc.exists:
            return None
        return _to_model(doc.id, doc.to_dict(), pydantic_model)

    def get_all(self, collection_name: str, pydantic_model: Optional[type[PydanticBaseModel]] = None) -> List[Any]:
        """Get all documents from a collection, optionally parsing into Pydantic models."""
        docs_stream = self._require_db().collection(collection_name).stream()
        return [_to_model(doc.id, doc.to_dict(), pydantic_model) for doc in docs_stream]

    def query(self, collection_name: str, field: str, operator: str, value: Any, pydantic_model: Optional[type[PydanticBaseModel]] = None) -> List[Any]:
        """Query documents by field, optionally parsing into Pydantic models."""
        query_ref = self._require_db().collection(collection_name).where(filter=FieldFilter(field, operator, value))
        return [_to_model(doc.id, doc.to_dict(), pydantic_model) for doc in query_ref.stream()]

    def delete(self, collection_name: str, document_id: str) -> bool:
        """Delete a document from Firestore."""
        self._require_db().collection(collection_name).document(document_id).delete()
        return True

    def run_transaction(self, callback: Callable[[FirestoreTransaction], T]) -> T:
        """
        Run ``callback`` inside one Firestore transaction.

        Writes are committed together when the callback returns; any exception
        aborts the transaction and is re-raised unchanged.
        """
        db = self._require_db()

        @firestore.transactional
        def _run(transaction):
            return callback(FirestoreTransaction(db, transaction))

        return _run(db.transaction())


def get_firestore_ops_instance() -> FirestoreBaseModel:
    return FirestoreBaseModel()
