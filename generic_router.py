from typing import Callable, List, Optional, Sequence, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from schemas import MessageOut
from services import registry


def make_registry_router(
    Model,
    prefix: str,
    *,
    label: str,
    key_fields: Sequence[str],
    order_by: Sequence,
    out_schema: Type[BaseModel],
    create_schema: Optional[Type[BaseModel]] = None,
    update_schema: Optional[Type[BaseModel]] = None,
    read_dep: Callable,
    write_dep: Optional[Callable] = None,
    include_inactive: bool = False,
    tags: Optional[List[str]] = None,
):
    """
    Build a CRUD router for a soft-deletable registry:
    - GET /{prefix}            : list (active only unless include_inactive)
    - GET /{prefix}/{id}       : get one (inactive rows included)
    - POST /{prefix}           : create          (needs create_schema + write_dep)
    - PUT /{prefix}/{id}       : partial update  (needs update_schema + write_dep)
    - DELETE /{prefix}/{id}    : soft delete     (needs write_dep)
    """
    router = APIRouter(prefix=f"/{prefix}", tags=tags or [prefix])

    @router.get("", response_model=List[out_schema], dependencies=[Depends(read_dep)])
    def list_items(db: Session = Depends(get_db)):
        return registry.list_rows(db, Model, order_by, include_inactive=include_inactive)

    @router.get("/{item_id}", response_model=out_schema, dependencies=[Depends(read_dep)])
    def get_item(item_id: int, db: Session = Depends(get_db)):
        return registry.get_or_404(db, Model, item_id, label)

    if write_dep is None:
        return router

    if create_schema is not None:
        @router.post(
            "",
            response_model=out_schema,
            status_code=status.HTTP_201_CREATED,
            dependencies=[Depends(write_dep)],
        )
        def create_item(payload: create_schema, db: Session = Depends(get_db)):
            return registry.create_row(
                db, Model, payload.model_dump(), key_fields=key_fields, label=label
            )

    if update_schema is not None:
        @router.put("/{item_id}", response_model=out_schema, dependencies=[Depends(write_dep)])
        def update_item(item_id: int, payload: update_schema, db: Session = Depends(get_db)):
            obj = registry.get_or_404(db, Model, item_id, label)
            return registry.update_row(
                db, obj, payload.model_dump(exclude_unset=True), key_fields=key_fields, label=label
            )

    @router.delete("/{item_id}", response_model=MessageOut, dependencies=[Depends(write_dep)])
    def delete_item(item_id: int, db: Session = Depends(get_db)):
        obj = registry.get_or_404(db, Model, item_id, label)
        registry.soft_delete(db, obj)
        return {"message": f"{label} deleted successfully"}

    return router
