# routers/v1/document_ids.py
from deps.authz import require_admin, require_user
from generic_router import make_registry_router
from models import DocumentId
from schemas import DocumentIdCreate, DocumentIdOut, DocumentIdUpdate

router = make_registry_router(
    DocumentId,
    "document-ids",
    label="Document ID",
    key_fields=["doc_id"],
    order_by=[DocumentId.doc_id],
    out_schema=DocumentIdOut,
    read_dep=require_user,
)

admin_router = make_registry_router(
    DocumentId,
    "admin/document-ids",
    label="Document ID",
    key_fields=["doc_id"],
    order_by=[DocumentId.doc_id],
    out_schema=DocumentIdOut,
    create_schema=DocumentIdCreate,
    update_schema=DocumentIdUpdate,
    read_dep=require_admin,
    write_dep=require_admin,
    include_inactive=True,
    tags=["admin"],
)
