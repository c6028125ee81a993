# scripts/seed_demo.py
"""Seed demo profiles, task templates and one opening workflow.

Idempotent: rows are matched by email / title / name and reused.
Run after `alembic upgrade head`:

    python scripts/seed_demo.py
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from thepass.core.config import settings
from thepass.core.db import SessionLocal
from thepass.core.logging import configure_logging
from thepass.models.profile import Profile
from thepass.models.task import Task
from thepass.models.workflow import Workflow, WorkflowTask

logger = logging.getLogger("seed_demo")

PROFILES = [
    {"email": "admin@example.com", "name": "Admin", "role": "admin"},
    {"email": "jane.smith@example.com", "name": "Jane Smith", "role": "kitchen_manager"},
    {"email": "sarah.johnson@example.com", "name": "Sarah Johnson", "role": "ordering_manager"},
    {"email": "john.doe@example.com", "name": "John Doe", "role": "employee"},
    {"email": "mike.wilson@example.com", "name": "Mike Wilson", "role": "employee"},
]

TASKS = [
    {"title": "Photograph the line before service", "photo_required": True, "notes_required": False},
    {"title": "Count the till float", "photo_required": False, "notes_required": True},
    {"title": "Wipe down host stand", "photo_required": False, "notes_required": False},
]

WORKFLOW_NAME = "FOH Opening"


def _upsert_profile(db: Session, data: dict) -> Profile:
    profile = db.execute(select(Profile).where(Profile.email == data["email"])).scalar_one_or_none()
    if profile is None:
        profile = Profile(**data)
        db.add(profile)
        logger.info("created profile %s (%s)", data["email"], data["role"])
    return profile


def _upsert_task(db: Session, data: dict, created_by: Profile) -> Task:
    task = db.execute(select(Task).where(Task.title == data["title"])).scalar_one_or_none()
    if task is None:
        task = Task(**data, created_by=created_by.id)
        db.add(task)
        logger.info("created task '%s'", data["title"])
    return task


def seed(db: Session) -> None:
    profiles = [_upsert_profile(db, p) for p in PROFILES]
    db.flush()
    admin = profiles[0]

    tasks = [_upsert_task(db, t, admin) for t in TASKS]
    db.flush()

    wf = db.execute(select(Workflow).where(Workflow.name == WORKFLOW_NAME)).scalar_one_or_none()
    if wf is None:
        wf = Workflow(
            name=WORKFLOW_NAME,
            description="Before doors open",
            is_repeatable=True,
            recurrence_type="daily",
            created_by=admin.id,
        )
        for pos, task in enumerate(tasks):
            # last one is optional
            wf.workflow_tasks.append(
                WorkflowTask(task_id=task.id, order_index=pos, is_required=pos < len(tasks) - 1)
            )
        db.add(wf)
        logger.info("created workflow '%s'", WORKFLOW_NAME)

    db.commit()


def main() -> None:
    configure_logging(settings.log_level)
    with SessionLocal() as db:
        seed(db)
    logger.info("seed complete")


if __name__ == "__main__":
    main()
