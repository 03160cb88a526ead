from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    AfterValidator,
    field_validator,
)
from pydantic.alias_generators import to_camel

# =========================
# ===== Base (Pydantic v2)
# =========================
class APIBase(BaseModel):
    """
    Base for every schema:
    - from_attributes=True: build straight from SQLAlchemy rows
    - camelCase on the wire, snake_case accepted too
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

class APIIn(APIBase):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")

MPIStatus = Literal["draft", "in-review", "approved", "rejected", "archived"]
UserType = Literal["admin", "engineer"]

def _normalize_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip().lower()
    if not v:
        return None
    if not EMAIL_RE.match(v):
        raise ValueError("Please enter a valid email")
    return v

def count_words(text: str) -> int:
    return len(text.split())

def _max_150_words(v: str) -> str:
    if count_words(v) > 150:
        raise ValueError("Step cannot exceed 150 words")
    return v

Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1), AfterValidator(_normalize_email)]
OptionalEmail = Annotated[Optional[str], AfterValidator(_normalize_email)]
StepText = Annotated[NonEmpty, AfterValidator(_max_150_words)]

# =========================================
# ================= Auth ==================
# =========================================
class LoginIn(APIIn):
    email: Email
    password: NonEmpty
    user_type: UserType

class EngineerSignupIn(APIIn):
    full_name: Annotated[NonEmpty, StringConstraints(max_length=100)]
    email: Email
    password: str = Field(min_length=8)
    title: Annotated[NonEmpty, StringConstraints(max_length=50)]

class AdminSignupIn(APIIn):
    email: Email
    password: str = Field(min_length=8)
    admin_key: NonEmpty
    full_name: Optional[str] = None
    title: Optional[str] = None

class ChangePasswordIn(APIIn):
    current_password: NonEmpty
    new_password: NonEmpty

class ProfileUpdateIn(APIIn):
    full_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    title: Optional[Annotated[str, StringConstraints(max_length=50)]] = None

class PrincipalOut(APIBase):
    id: int
    full_name: Optional[str] = None
    email: str
    title: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AuthOut(APIBase):
    token: str
    user: PrincipalOut
    user_type: UserType

class MeOut(APIBase):
    user: PrincipalOut
    user_type: UserType

class MessageOut(APIBase):
    message: str

# =========================================
# ============ Engineers (admin) ==========
# =========================================
class EngineerCreate(EngineerSignupIn):
    pass

class EngineerUpdate(APIIn):
    full_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    email: OptionalEmail = None
    title: Optional[Annotated[NonEmpty, StringConstraints(max_length=50)]] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8)

# =========================================
# =========== Customer companies ==========
# =========================================
class CustomerCompanyCreate(APIIn):
    company_name: Annotated[NonEmpty, StringConstraints(max_length=100)]
    city: Annotated[NonEmpty, StringConstraints(max_length=50)]
    state: Annotated[NonEmpty, StringConstraints(max_length=50)]
    contact_person: Optional[Annotated[str, StringConstraints(max_length=100)]] = None
    email: OptionalEmail = None
    phone: Optional[Annotated[str, StringConstraints(max_length=20)]] = None
    address: Optional[Annotated[str, StringConstraints(max_length=200)]] = None

class CustomerCompanyUpdate(APIIn):
    company_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    city: Optional[Annotated[NonEmpty, StringConstraints(max_length=50)]] = None
    state: Optional[Annotated[NonEmpty, StringConstraints(max_length=50)]] = None
    contact_person: Optional[Annotated[str, StringConstraints(max_length=100)]] = None
    email: OptionalEmail = None
    phone: Optional[Annotated[str, StringConstraints(max_length=20)]] = None
    address: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    is_active: Optional[bool] = None

class CustomerCompanyOut(APIBase):
    id: int
    company_name: str
    city: str
    state: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CustomerCompanyMini(APIBase):
    id: int
    company_name: str
    city: Optional[str] = None
    state: Optional[str] = None

# =========================================
# ================= Forms =================
# =========================================
class FormCreate(APIIn):
    form_id: Annotated[NonEmpty, StringConstraints(max_length=50)]
    form_rev: Annotated[NonEmpty, StringConstraints(max_length=20)]
    description: Optional[Annotated[str, StringConstraints(max_length=200)]] = None

class FormUpdate(APIIn):
    form_id: Optional[Annotated[NonEmpty, StringConstraints(max_length=50)]] = None
    form_rev: Optional[Annotated[NonEmpty, StringConstraints(max_length=20)]] = None
    description: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    is_active: Optional[bool] = None

class FormOut(APIBase):
    id: int
    form_id: str
    form_rev: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# =========================================
# ============= Document IDs ==============
# =========================================
class DocumentIdCreate(APIIn):
    doc_id: Annotated[NonEmpty, StringConstraints(max_length=50)]
    description: Optional[Annotated[str, StringConstraints(max_length=200)]] = None

class DocumentIdUpdate(APIIn):
    doc_id: Optional[Annotated[NonEmpty, StringConstraints(max_length=50)]] = None
    description: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    is_active: Optional[bool] = None

class DocumentIdOut(APIBase):
    id: int
    doc_id: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# =========================================
# ====== Process categories / steps =======
# =========================================
class StepIn(APIIn):
    title: Annotated[NonEmpty, StringConstraints(max_length=200)]
    content: NonEmpty

class StepUpdate(APIIn):
    title: Optional[Annotated[NonEmpty, StringConstraints(max_length=200)]] = None
    content: Optional[NonEmpty] = None
    order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

class StepOut(APIBase):
    id: int
    title: str
    content: str
    order: int
    is_active: bool

class CategoryCreate(APIIn):
    category_name: Annotated[NonEmpty, StringConstraints(max_length=100)]

class CategoryUpdate(APIIn):
    category_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    is_active: Optional[bool] = None

class CategoryOut(APIBase):
    id: int
    category_name: str
    steps: List[StepOut] = []
    usage_count: int
    created_by: int
    created_by_model: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UsageOut(APIBase):
    id: int
    usage_count: int

# =========================================
# ================= Tasks =================
# =========================================
class TaskCreate(APIIn):
    step: StepText
    process_item_id: int = Field(validation_alias="processItem")

class TaskUpdate(APIIn):
    step: Optional[StepText] = None
    process_item_id: Optional[int] = Field(default=None, validation_alias="processItem")
    is_active: Optional[bool] = None

class TaskOut(APIBase):
    id: int
    step: str
    category_name: str
    process_item_id: int = Field(serialization_alias="processItem")
    usage_count: int
    created_by: int
    created_by_model: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# =========================================
# ================= Docs ==================
# =========================================
class DocsIn(APIIn):
    job_no: NonEmpty
    old_job_no: Optional[str] = None
    mpi_no: NonEmpty
    mpi_rev: NonEmpty
    doc_id: NonEmpty
    form_id: NonEmpty
    form_rev: NonEmpty
    process_item: Optional[Annotated[str, StringConstraints(max_length=100)]] = None

class DocsOut(APIBase):
    id: int
    job_no: Optional[str] = None
    old_job_no: Optional[str] = None
    mpi_no: Optional[str] = None
    mpi_rev: Optional[str] = None
    process_item: Optional[str] = None
    doc_id: Optional[str] = None
    form_id: Optional[str] = None
    form_rev: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# =========================================
# ======= Customers (assembly records) ====
# =========================================
class CustomerCreate(APIIn):
    customer_company_id: Optional[int] = None
    customer_name: Annotated[NonEmpty, StringConstraints(max_length=100)]
    assembly_name: Annotated[NonEmpty, StringConstraints(max_length=100)]
    assembly_rev: Annotated[NonEmpty, StringConstraints(max_length=20)]
    drawing_name: Annotated[NonEmpty, StringConstraints(max_length=100)]
    drawing_rev: Annotated[NonEmpty, StringConstraints(max_length=20)]
    assembly_quantity: int = Field(ge=1)
    kit_received_date: Optional[date] = None
    kit_complete_date: Optional[date] = None
    comments: Optional[Annotated[str, StringConstraints(max_length=500)]] = None

class CustomerUpdate(APIIn):
    customer_company_id: Optional[int] = None
    customer_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    assembly_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    assembly_rev: Optional[Annotated[NonEmpty, StringConstraints(max_length=20)]] = None
    drawing_name: Optional[Annotated[NonEmpty, StringConstraints(max_length=100)]] = None
    drawing_rev: Optional[Annotated[NonEmpty, StringConstraints(max_length=20)]] = None
    assembly_quantity: Optional[int] = Field(default=None, ge=1)
    kit_received_date: Optional[date] = None
    kit_complete_date: Optional[date] = None
    comments: Optional[Annotated[str, StringConstraints(max_length=500)]] = None

class CustomerOut(APIBase):
    id: int
    customer_company_id: Optional[int] = None
    customer_name: str
    assembly_name: str
    assembly_rev: str
    drawing_name: str
    drawing_rev: str
    assembly_quantity: int
    kit_received_date: Optional[date] = None
    kit_complete_date: Optional[date] = None
    comments: Optional[str] = None
    engineer_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# =========================================
# ================== MPI ==================
# =========================================
class SectionIn(APIIn):
    id: NonEmpty
    title: NonEmpty
    content: str = ""
    order: int
    is_collapsed: bool = False
    images: List[str] = []
    document_id: Optional[str] = None

class SectionOut(APIBase):
    id: str
    title: str
    content: str
    order: int
    is_collapsed: bool
    images: List[str] = []
    document_id: Optional[str] = None

class VersionOut(APIBase):
    version: str
    date: datetime
    description: str
    engineer_name: str

class EngineerMini(APIBase):
    id: int
    full_name: str
    email: str

class MPICreate(APIIn):
    customer_company_id: int
    job_number: NonEmpty            # "AUTO" allocates the next free number
    mpi_number: NonEmpty            # "AUTO" allocates the next free number
    old_job_number: Optional[str] = None
    mpi_version: Optional[str] = None
    form_id: Optional[int] = None
    form_rev: Optional[str] = None
    customer_assembly_name: NonEmpty
    assembly_rev: NonEmpty
    drawing_name: NonEmpty
    drawing_rev: NonEmpty
    assembly_quantity: int = Field(ge=1)
    kit_received_date: date
    date_released: Optional[str] = None
    pages: Optional[str] = None

class MPIUpdate(APIIn):
    customer_company_id: Optional[int] = None
    job_number: Optional[NonEmpty] = None
    mpi_number: Optional[NonEmpty] = None
    old_job_number: Optional[str] = None
    mpi_version: Optional[str] = None
    form_id: Optional[int] = None
    form_rev: Optional[str] = None
    customer_assembly_name: Optional[NonEmpty] = None
    assembly_rev: Optional[NonEmpty] = None
    drawing_name: Optional[NonEmpty] = None
    drawing_rev: Optional[NonEmpty] = None
    assembly_quantity: Optional[int] = Field(default=None, ge=1)
    kit_received_date: Optional[date] = None
    date_released: Optional[str] = None
    pages: Optional[str] = None
    sections: Optional[List[SectionIn]] = None
    status: Optional[MPIStatus] = None

class MPIStatusIn(APIIn):
    mpi_id: int
    status: str

class MPIOut(APIBase):
    id: int
    job_number: str
    old_job_number: Optional[str] = None
    mpi_number: str
    mpi_version: Optional[str] = None
    engineer_id: int
    customer_company_id: int
    form_id: Optional[int] = None
    form_rev: Optional[str] = None
    customer_assembly_name: str
    assembly_rev: str
    drawing_name: str
    drawing_rev: str
    assembly_quantity: int
    kit_received_date: date
    date_released: Optional[str] = None
    pages: Optional[str] = None
    sections: List[SectionOut] = []
    status: MPIStatus
    version_history: List[VersionOut] = []
    is_active: bool
    docs_id: Optional[int] = None
    customer_id: Optional[int] = None
    customer_company: Optional[CustomerCompanyMini] = None
    engineer: Optional[EngineerMini] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("sections", mode="before")
    @classmethod
    def _sections_from_rows(cls, v):
        # ORM rows keep the client-facing id in section_key
        out = []
        for s in v or []:
            if hasattr(s, "section_key"):
                out.append({
                    "id": s.section_key,
                    "title": s.title,
                    "content": s.content or "",
                    "order": s.order,
                    "is_collapsed": bool(s.is_collapsed),
                    "images": list(s.images or []),
                    "document_id": s.document_id,
                })
            else:
                out.append(s)
        return out


class JobNumberOut(APIBase):
    job_number: str

class MPINumberOut(APIBase):
    mpi_number: str

class JobNumberListOut(APIBase):
    job_numbers: List[str]
    old_job_numbers: List[str]
