# routers/v1/forms.py
from deps.authz import require_admin, require_user
from generic_router import make_registry_router
from models import Form
from schemas import FormCreate, FormOut, FormUpdate

_order = [Form.form_id, Form.form_rev]

router = make_registry_router(
    Form,
    "forms",
    label="Form",
    key_fields=["form_id", "form_rev"],
    order_by=_order,
    out_schema=FormOut,
    read_dep=require_user,
)

admin_router = make_registry_router(
    Form,
    "admin/forms",
    label="Form",
    key_fields=["form_id", "form_rev"],
    order_by=_order,
    out_schema=FormOut,
    create_schema=FormCreate,
    update_schema=FormUpdate,
    read_dep=require_admin,
    write_dep=require_admin,
    include_inactive=True,
    tags=["admin"],
)
