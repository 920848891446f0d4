from typing import Annotated, Optional, List, Union, Literal
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, EmailStr, Field


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    EDITOR = "editor"


class PostStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"
    CLOSED = "closed"  # reserved for operators, no transition leads here


class ProjectStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    WALLET = "wallet"


class DocumentType(str, Enum):
    SOURCE = "SOURCE"  # submitted by the customer
    EDITED = "EDITED"  # submitted by the editor


class Record(BaseModel):
    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Principals ---

class PrincipalBase(Record):
    name: str
    email: EmailStr


class Admin(PrincipalBase):
    role: Literal["admin"] = "admin"


class Customer(PrincipalBase):
    role: Literal["customer"] = "customer"


class Editor(PrincipalBase):
    role: Literal["editor"] = "editor"
    experience: str
    portfolio: str
    skills: str
    awards: str


Principal = Annotated[Union[Admin, Customer, Editor], Field(discriminator="role")]

PRINCIPAL_COLLECTIONS = {
    Role.ADMIN: "admins",
    Role.CUSTOMER: "customers",
    Role.EDITOR: "editors",
}

PRINCIPAL_MODELS = {
    Role.ADMIN: Admin,
    Role.CUSTOMER: Customer,
    Role.EDITOR: Editor,
}


class Session(Record):
    principal_id: str
    role: Role
    expires_at: datetime


class RequestContext(BaseModel):
    """Who is calling. Resolved once per request and handed to every service call."""
    principal_id: Optional[str] = None
    role: Optional[Role] = None
    session_id: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.principal_id is None or self.role is None


# --- Catalog ---

class Category(Record):
    name: str
    description: str
    icon: str


# --- Lifecycle ---

class Post(Record):
    title: str
    description: str
    budget: float
    duration: int
    deadline: datetime
    status: PostStatus = PostStatus.OPEN
    customer_id: str
    category_id: str


class Bid(Record):
    price: float
    comment: str
    editor_id: str
    post_id: str
    approved: bool = False
    declined: bool = False

    @property
    def is_decided(self) -> bool:
        return self.approved or self.declined


class Project(Record):
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    post_id: str
    customer_id: str
    editor_id: str
    bid_id: str
    payment_id: Optional[str] = None


class Document(Record):
    name: str
    description: Optional[str] = None
    key: str
    bucket: str
    region: str
    url: str
    extension: str
    type: DocumentType
    project_id: str
    post_id: str
    owner_id: str
    owner_role: Role


class Payment(Record):
    amount: float
    payment_method: PaymentMethod
    project_id: str
    customer_id: str
    editor_id: str


# --- Request bodies ---
# Domain validation (positive numbers, lengths, enum membership) happens in the
# services so every failure is reported with the same field-keyed shape.

class CustomerRegister(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class EditorRegister(CustomerRegister):
    experience: str = ""
    portfolio: str = ""
    skills: str = ""
    awards: str = ""


class RegisterRequest(EditorRegister):
    role: Optional[Role] = None
    remember: bool = False


class LoginRequest(BaseModel):
    role: Role
    email: str
    password: str
    remember: bool = False


class CategoryCreate(BaseModel):
    name: str = ""
    description: str = ""
    icon: Optional[str] = None


class PostCreate(BaseModel):
    title: str = ""
    description: str = ""
    budget: Optional[float] = None
    duration: Optional[int] = None


class BidCreate(BaseModel):
    price: Optional[float] = None
    comment: str = ""


class CompleteProjectRequest(BaseModel):
    project_id: str


class PaymentCreate(BaseModel):
    project_id: str
    payment_method: str = ""
    amount: Optional[float] = None


class UploadLocationRequest(BaseModel):
    filename: str
    content_type: Optional[str] = None


class UploadLocation(BaseModel):
    key: str
    bucket: str
    region: str
    extension: str
    upload_url: str


class DocumentCreate(BaseModel):
    post_id: str = ""
    name: str = ""
    description: Optional[str] = None
    key: str = ""
    bucket: str = ""
    region: str = ""
    extension: str = ""


class AttachedDocument(BaseModel):
    document: Document
    upload_url: str


# --- Views ---

class BidWithEditor(BaseModel):
    bid: Bid
    editor: Optional[Editor] = None


class PostDetail(BaseModel):
    post: Post
    category: Optional[Category] = None
    customer: Optional[Customer] = None
    bids: List[BidWithEditor] = []


class EditorPostView(BaseModel):
    post: Post
    category: Optional[Category] = None
    my_bid: Optional[Bid] = None
    my_project_id: Optional[str] = None


class ProjectDetail(BaseModel):
    project: Project
    post: Post
    customer: Optional[Customer] = None
    editor: Optional[Editor] = None
    bid: Optional[Bid] = None
    payment: Optional[Payment] = None
    customer_documents: List[Document] = []
    editor_documents: List[Document] = []


class AdminPostView(BaseModel):
    post: Post
    customer: Optional[Customer] = None
    bid_count: int = 0
    editor_id: Optional[str] = None


class Dashboard(BaseModel):
    role: Role
    counts: dict
