# routers/v1/tasks.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import caller_id, require_admin, require_user
from errors import DuplicateKey
from models import ProcessItem, Task
from routers.v1.categories import creator_model
from schemas import MessageOut, TaskCreate, TaskOut, TaskUpdate, UsageOut
from services import registry

# natural key: step text within its category
KEY_FIELDS = ["process_item_id", "step"]

router = APIRouter(prefix="/tasks", tags=["tasks"])
admin_router = APIRouter(prefix="/admin/tasks", tags=["admin"])


def _list(db: Session, process_item_id: Optional[int], include_inactive: bool):
    q = db.query(Task)
    if not include_inactive:
        q = q.filter(Task.is_active.is_(True))
    if process_item_id is not None:
        q = q.filter(Task.process_item_id == process_item_id)
    return q.order_by(Task.category_name.asc(), Task.created_at.desc(), Task.id.desc()).all()


@router.get("", response_model=List[TaskOut], dependencies=[Depends(require_user)])
def list_tasks(
    process_item: Optional[int] = Query(None, alias="processItem"),
    db: Session = Depends(get_db),
):
    return _list(db, process_item, include_inactive=False)


@admin_router.get("", response_model=List[TaskOut], dependencies=[Depends(require_admin)])
def admin_list_tasks(
    process_item: Optional[int] = Query(None, alias="processItem"),
    db: Session = Depends(get_db),
):
    return _list(db, process_item, include_inactive=True)


@router.get("/{task_id}", response_model=TaskOut, dependencies=[Depends(require_user)])
def get_task(task_id: int, db: Session = Depends(get_db)):
    return registry.get_or_404(db, Task, task_id, "Task")


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    claims: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    category = registry.get_or_404(db, ProcessItem, payload.process_item_id, "Category")
    if registry.find_duplicate(db, Task, KEY_FIELDS, payload.model_dump()):
        raise DuplicateKey("Task already exists in this category")
    t = Task(
        step=payload.step,
        process_item_id=category.id,
        category_name=category.category_name,
        usage_count=0,
        created_by=caller_id(claims),
        created_by_model=creator_model(claims),
        is_active=True,
    )
    db.add(t)
    registry.commit_or_conflict(db, "Task already exists in this category")
    db.refresh(t)
    return t


@router.put("/{task_id}", response_model=TaskOut, dependencies=[Depends(require_user)])
def update_task(task_id: int, payload: TaskUpdate, db: Session = Depends(get_db)):
    t = registry.get_or_404(db, Task, task_id, "Task")
    data = payload.model_dump(exclude_unset=True)
    registry.reject_null_required(Task, data)
    if "process_item_id" in data:
        category = registry.get_or_404(db, ProcessItem, data["process_item_id"], "Category")
        data["category_name"] = category.category_name
    return registry.update_row(db, t, data, key_fields=KEY_FIELDS, label="Task")


@router.delete("/{task_id}", response_model=MessageOut, dependencies=[Depends(require_user)])
def delete_task(task_id: int, db: Session = Depends(get_db)):
    t = registry.get_or_404(db, Task, task_id, "Task")
    registry.hard_delete(db, t)
    return {"message": "Task deleted successfully"}


@router.post("/{task_id}/use", response_model=UsageOut, dependencies=[Depends(require_user)])
def use_task(task_id: int, db: Session = Depends(get_db)):
    t = registry.get_or_404(db, Task, task_id, "Task")
    t.usage_count = Task.usage_count + 1
    db.commit()
    db.refresh(t)
    return t
