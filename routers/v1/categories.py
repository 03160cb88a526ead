# routers/v1/categories.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import caller_id, require_admin, require_user
from errors import HasDependents, NotFound
from models import ProcessItem, ProcessStep, Task
from schemas import CategoryCreate, CategoryOut, CategoryUpdate, MessageOut, StepIn, StepUpdate, UsageOut
from services import registry

router = APIRouter(prefix="/categories", tags=["categories"])
admin_router = APIRouter(prefix="/admin/categories", tags=["admin"])

LABEL = "Category"
KEY = ["category_name"]


def creator_model(claims: dict) -> str:
    return "Admin" if claims["role"] == "admin" else "Engineer"


def _get_step_or_404(category: ProcessItem, step_id: int) -> ProcessStep:
    for s in category.steps:
        if s.id == step_id:
            return s
    raise NotFound("Step not found")


# ---------- categories ----------
@router.get("", response_model=List[CategoryOut], dependencies=[Depends(require_user)])
def list_categories(db: Session = Depends(get_db)):
    return registry.list_rows(db, ProcessItem, [ProcessItem.category_name])


@admin_router.get("", response_model=List[CategoryOut], dependencies=[Depends(require_admin)])
def admin_list_categories(db: Session = Depends(get_db)):
    return registry.list_rows(
        db, ProcessItem, [ProcessItem.category_name], include_inactive=True
    )


@router.get("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_user)])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return registry.get_or_404(db, ProcessItem, category_id, LABEL)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    claims: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    return registry.create_row(
        db,
        ProcessItem,
        payload.model_dump(),
        key_fields=KEY,
        label=LABEL,
        extra={
            "usage_count": 0,
            "created_by": caller_id(claims),
            "created_by_model": creator_model(claims),
        },
    )


@router.put("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_user)])
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    data = payload.model_dump(exclude_unset=True)
    if data.get("category_name"):
        # tasks carry a copy of the name
        for t in c.tasks:
            t.category_name = data["category_name"]
    return registry.update_row(db, c, data, key_fields=KEY, label=LABEL)


@router.delete("/{category_id}", response_model=MessageOut, dependencies=[Depends(require_user)])
def delete_category(category_id: int, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    if c.steps:
        raise HasDependents("Cannot delete category with existing steps. Delete steps first.")
    if db.query(Task.id).filter(Task.process_item_id == c.id).first():
        raise HasDependents("Cannot delete category with existing tasks. Delete tasks first.")
    registry.hard_delete(db, c)
    return {"message": "Category deleted successfully"}


@router.post("/{category_id}/use", response_model=UsageOut, dependencies=[Depends(require_user)])
def use_category(category_id: int, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    c.usage_count = ProcessItem.usage_count + 1
    db.commit()
    db.refresh(c)
    return c


# ---------- steps inside a category ----------
@router.post(
    "/{category_id}/steps",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_user)],
)
def add_step(category_id: int, payload: StepIn, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    c.steps.append(ProcessStep(
        title=payload.title,
        content=payload.content,
        order=len(c.steps),
        is_active=True,
    ))
    db.commit()
    db.refresh(c)
    return c


@router.put(
    "/{category_id}/steps/{step_id}",
    response_model=CategoryOut,
    dependencies=[Depends(require_user)],
)
def update_step(category_id: int, step_id: int, payload: StepUpdate, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    s = _get_step_or_404(c, step_id)
    data = payload.model_dump(exclude_unset=True)
    registry.reject_null_required(ProcessStep, data)
    for k, v in data.items():
        setattr(s, k, v)
    db.commit()
    db.refresh(c)
    return c


@router.delete(
    "/{category_id}/steps/{step_id}",
    response_model=CategoryOut,
    dependencies=[Depends(require_user)],
)
def delete_step(category_id: int, step_id: int, db: Session = Depends(get_db)):
    c = registry.get_or_404(db, ProcessItem, category_id, LABEL)
    s = _get_step_or_404(c, step_id)
    c.steps.remove(s)
    db.commit()
    db.refresh(c)
    return c
