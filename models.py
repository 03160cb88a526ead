# models.py
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from database import Base


MPI_STATUSES = ("draft", "in-review", "approved", "rejected", "archived")
CREATOR_MODELS = ("Engineer", "Admin")


def _active_only(model):
    """WHERE clause for partial unique indexes: only active rows compete."""
    return {
        "postgresql_where": model.is_active.is_(True),
        "sqlite_where": model.is_active == True,  # noqa: E712
    }


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# =========================================
# ============== Principals ===============
# =========================================

class Admin(TimestampMixin, Base):
    __tablename__ = "admins"
    id = Column(Integer, primary_key=True)
    full_name = Column(String(100), nullable=False, default="Admin")
    email = Column(String, nullable=False, unique=True, index=True)   # stored lower-case
    password_hash = Column(String, nullable=False)
    title = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Admin(email={self.email})>"


class Engineer(TimestampMixin, Base):
    __tablename__ = "engineers"
    id = Column(Integer, primary_key=True)
    full_name = Column(String(100), nullable=False, index=True)
    email = Column(String, nullable=False, unique=True, index=True)   # stored lower-case
    password_hash = Column(String, nullable=False)
    title = Column(String(50), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    mpis = relationship("MPI", back_populates="engineer")

    __table_args__ = (Index("ix_engineers_active", "is_active"),)

    def __repr__(self):
        return f"<Engineer(email={self.email}, active={self.is_active})>"


# =========================================
# ============ Reference data =============
# =========================================

class CustomerCompany(TimestampMixin, Base):
    __tablename__ = "customer_companies"
    id = Column(Integer, primary_key=True)
    company_name = Column(String(100), nullable=False)
    city = Column(String(50), nullable=False, index=True)
    state = Column(String(50), nullable=False, index=True)
    contact_person = Column(String(100), nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self):
        return f"<CustomerCompany(company_name={self.company_name})>"


class Form(TimestampMixin, Base):
    __tablename__ = "forms"
    id = Column(Integer, primary_key=True)
    form_id = Column(String(50), nullable=False, index=True)
    form_rev = Column(String(20), nullable=False)
    description = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Form(form_id={self.form_id}, form_rev={self.form_rev})>"


class DocumentId(TimestampMixin, Base):
    __tablename__ = "document_ids"
    id = Column(Integer, primary_key=True)
    doc_id = Column(String(50), nullable=False)
    description = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self):
        return f"<DocumentId(doc_id={self.doc_id})>"


class ProcessItem(TimestampMixin, Base):
    """Process-step category; owns an ordered list of steps."""
    __tablename__ = "process_items"
    id = Column(Integer, primary_key=True)
    category_name = Column(String(100), nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, nullable=False)
    created_by_model = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    steps = relationship(
        "ProcessStep",
        back_populates="process_item",
        cascade="all, delete-orphan",
        order_by="ProcessStep.order",
    )
    tasks = relationship("Task", back_populates="process_item")

    __table_args__ = (
        CheckConstraint("usage_count >= 0", name="ck_process_items_usage"),
        CheckConstraint(
            "created_by_model IN ('Engineer', 'Admin')", name="ck_process_items_creator"
        ),
    )

    def __repr__(self):
        return f"<ProcessItem(category_name={self.category_name})>"


class ProcessStep(TimestampMixin, Base):
    __tablename__ = "process_steps"
    id = Column(Integer, primary_key=True)
    process_item_id = Column(
        Integer, ForeignKey("process_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    order = Column("step_order", Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    process_item = relationship("ProcessItem", back_populates="steps")

    __table_args__ = (CheckConstraint("step_order >= 0", name="ck_process_steps_order"),)

    def __repr__(self):
        return f"<ProcessStep(process_item_id={self.process_item_id}, order={self.order})>"


class Task(TimestampMixin, Base):
    __tablename__ = "tasks"
    id = Column(Integer, primary_key=True)
    step = Column(Text, nullable=False)
    category_name = Column(String(100), nullable=False, index=True)
    process_item_id = Column(Integer, ForeignKey("process_items.id"), nullable=False, index=True)
    usage_count = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, nullable=False, index=True)
    created_by_model = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    process_item = relationship("ProcessItem", back_populates="tasks")

    __table_args__ = (CheckConstraint("usage_count >= 0", name="ck_tasks_usage"),)

    def __repr__(self):
        return f"<Task(category_name={self.category_name}, id={self.id})>"


# =========================================
# ========== Derived tracking records =====
# =========================================

class Docs(TimestampMixin, Base):
    __tablename__ = "docs"
    id = Column(Integer, primary_key=True)
    job_no = Column(String, nullable=True, index=True)
    old_job_no = Column(String, nullable=True, index=True)
    mpi_no = Column(String, nullable=True, index=True)
    mpi_rev = Column(String, nullable=True)
    process_item = Column(String(100), nullable=True)
    doc_id = Column(String, nullable=True, index=True)
    form_id = Column(String, nullable=True, index=True)
    form_rev = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Docs(job_no={self.job_no}, mpi_no={self.mpi_no})>"


class Customer(TimestampMixin, Base):
    """Assembly-tracking record kept alongside each MPI."""
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True)
    customer_company_id = Column(Integer, ForeignKey("customer_companies.id"), nullable=True, index=True)
    customer_name = Column(String(100), nullable=False, index=True)
    assembly_name = Column(String(100), nullable=False, index=True)
    assembly_rev = Column(String(20), nullable=False)
    drawing_name = Column(String(100), nullable=False)
    drawing_rev = Column(String(20), nullable=False)
    assembly_quantity = Column(Integer, nullable=False)
    kit_received_date = Column(Date, nullable=True)
    kit_complete_date = Column(Date, nullable=True)
    comments = Column(String(500), nullable=True)
    engineer_id = Column(Integer, ForeignKey("engineers.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    customer_company = relationship("CustomerCompany")

    __table_args__ = (
        CheckConstraint("assembly_quantity >= 1", name="ck_customers_qty"),
    )

    def __repr__(self):
        return f"<Customer(customer_name={self.customer_name}, assembly_name={self.assembly_name})>"


# =========================================
# ================= MPI ===================
# =========================================

class MPI(TimestampMixin, Base):
    __tablename__ = "mpis"
    id = Column(Integer, primary_key=True)
    job_number = Column(String, nullable=False, unique=True, index=True)
    old_job_number = Column(String, nullable=True, index=True)
    mpi_number = Column(String, nullable=False, unique=True, index=True)
    mpi_version = Column(String, nullable=True)

    engineer_id = Column(Integer, ForeignKey("engineers.id"), nullable=False, index=True)
    customer_company_id = Column(Integer, ForeignKey("customer_companies.id"), nullable=False, index=True)
    form_id = Column(Integer, ForeignKey("forms.id"), nullable=True)
    form_rev = Column(String, nullable=True)

    customer_assembly_name = Column(String, nullable=False)
    assembly_rev = Column(String, nullable=False)
    drawing_name = Column(String, nullable=False)
    drawing_rev = Column(String, nullable=False)
    assembly_quantity = Column(Integer, nullable=False)
    kit_received_date = Column(Date, nullable=False)
    date_released = Column(String, nullable=True)
    pages = Column(String, nullable=True)

    status = Column(String(20), nullable=False, default="draft", index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # explicit links to the derived records
    docs_id = Column(Integer, ForeignKey("docs.id", ondelete="SET NULL"), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)

    engineer = relationship("Engineer", back_populates="mpis")
    customer_company = relationship("CustomerCompany")
    form = relationship("Form")
    docs = relationship("Docs", foreign_keys=[docs_id])
    customer = relationship("Customer", foreign_keys=[customer_id])

    sections = relationship(
        "MPISection",
        back_populates="mpi",
        cascade="all, delete-orphan",
        order_by="MPISection.order",
    )
    version_history = relationship(
        "MPIVersion",
        back_populates="mpi",
        cascade="all, delete-orphan",
        order_by="MPIVersion.id",
    )

    __table_args__ = (
        CheckConstraint("assembly_quantity >= 1", name="ck_mpis_qty"),
        CheckConstraint(
            "status IN ('draft', 'in-review', 'approved', 'rejected', 'archived')",
            name="ck_mpis_status",
        ),
    )

    def __repr__(self):
        return f"<MPI(mpi_number={self.mpi_number}, job_number={self.job_number}, status={self.status})>"


class MPISection(Base):
    __tablename__ = "mpi_sections"
    id = Column(Integer, primary_key=True)
    mpi_id = Column(Integer, ForeignKey("mpis.id", ondelete="CASCADE"), nullable=False, index=True)
    section_key = Column(String, nullable=False)     # e.g. "kit-release"
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    order = Column("section_order", Integer, nullable=False)
    is_collapsed = Column(Boolean, nullable=False, default=False)
    images = Column(JSON, nullable=False, default=list)
    document_id = Column(String, nullable=True)

    mpi = relationship("MPI", back_populates="sections")

    def __repr__(self):
        return f"<MPISection(mpi_id={self.mpi_id}, key={self.section_key}, order={self.order})>"


class MPIVersion(Base):
    __tablename__ = "mpi_versions"
    id = Column(Integer, primary_key=True)
    mpi_id = Column(Integer, ForeignKey("mpis.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(String, nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    description = Column(String, nullable=False)
    engineer_name = Column(String, nullable=False)

    mpi = relationship("MPI", back_populates="version_history")

    def __repr__(self):
        return f"<MPIVersion(mpi_id={self.mpi_id}, version={self.version})>"


# =========================================
# ===== Case-insensitive natural keys =====
# =========================================

Index(
    "uq_customer_companies_name",
    func.lower(CustomerCompany.company_name),
    unique=True,
    **_active_only(CustomerCompany),
)
Index(
    "uq_forms_id_rev",
    func.lower(Form.form_id),
    func.lower(Form.form_rev),
    unique=True,
    **_active_only(Form),
)
Index(
    "uq_document_ids_doc_id",
    func.lower(DocumentId.doc_id),
    unique=True,
    **_active_only(DocumentId),
)
Index(
    "uq_process_items_category",
    func.lower(ProcessItem.category_name),
    unique=True,
    **_active_only(ProcessItem),
)
Index(
    "uq_tasks_category_step",
    Task.process_item_id,
    func.lower(Task.step),
    unique=True,
    **_active_only(Task),
)
