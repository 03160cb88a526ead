# routers/v1/__init__.py
from fastapi import APIRouter

from . import (
    auth, customer_companies, forms, document_ids, categories, tasks,
    engineers, mpis, admin_mpis, docs, customers,
)

api_v1 = APIRouter()
api_v1.include_router(auth.router)

# reference data: shared read routes + admin variants
api_v1.include_router(customer_companies.router)
api_v1.include_router(customer_companies.admin_router)
api_v1.include_router(forms.router)
api_v1.include_router(forms.admin_router)
api_v1.include_router(document_ids.router)
api_v1.include_router(document_ids.admin_router)
api_v1.include_router(categories.router)
api_v1.include_router(categories.admin_router)
api_v1.include_router(tasks.router)
api_v1.include_router(tasks.admin_router)

# MPI aggregate and its derived records
api_v1.include_router(mpis.router)
api_v1.include_router(admin_mpis.router)
api_v1.include_router(docs.router)
api_v1.include_router(customers.router)

api_v1.include_router(engineers.router)

__all__ = ["api_v1"]
