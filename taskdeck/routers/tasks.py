from fastapi import APIRouter, HTTPException

from taskdeck.models.tasks import Task, TaskStats
from taskdeck.services import tasks as tasks_service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

# Every mutation answers with the whole list; clients replace their copy with it.
_SNAPSHOT = {"response_model": list[Task], "response_model_exclude_none": True}


@router.get("", **_SNAPSHOT)
def list_tasks():
    return tasks_service.list_tasks()


@router.post("", **_SNAPSHOT)
def add_task(task: Task):
    return tasks_service.add_task(task)


@router.get("/stats")
def task_stats() -> TaskStats:
    return tasks_service.task_stats()


@router.put("", **_SNAPSHOT)
def reorder_tasks(tasks: list[Task]):
    return tasks_service.reorder_tasks(tasks)


@router.post("/reset", **_SNAPSHOT)
def reset_tasks():
    return tasks_service.reset_tasks()


@router.post("/{task_id}/toggle", **_SNAPSHOT)
def toggle_task(task_id: str):
    return tasks_service.toggle_task(task_id)


@router.put("/{task_id}", **_SNAPSHOT)
def update_task(task_id: str, task: Task):
    if task.id != task_id:
        raise HTTPException(status_code=400, detail="Task id in body does not match the URL")
    return tasks_service.update_task(task)


@router.delete("/{task_id}", **_SNAPSHOT)
def delete_task(task_id: str):
    return tasks_service.delete_task(task_id)
