# routers/v1/customer_companies.py
from deps.authz import require_admin, require_user
from generic_router import make_registry_router
from models import CustomerCompany
from schemas import CustomerCompanyCreate, CustomerCompanyOut, CustomerCompanyUpdate

# engineers pick and add companies while building an MPI
router = make_registry_router(
    CustomerCompany,
    "customer-companies",
    label="Customer company",
    key_fields=["company_name"],
    order_by=[CustomerCompany.company_name],
    out_schema=CustomerCompanyOut,
    create_schema=CustomerCompanyCreate,
    update_schema=CustomerCompanyUpdate,
    read_dep=require_user,
    write_dep=require_user,
)

admin_router = make_registry_router(
    CustomerCompany,
    "admin/customer-companies",
    label="Customer company",
    key_fields=["company_name"],
    order_by=[CustomerCompany.company_name],
    out_schema=CustomerCompanyOut,
    create_schema=CustomerCompanyCreate,
    update_schema=CustomerCompanyUpdate,
    read_dep=require_admin,
    write_dep=require_admin,
    include_inactive=True,
    tags=["admin"],
)
