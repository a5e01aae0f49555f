"""Seed the project catalog with the demo challenges.

Run: python -m projectdesk.seed

Idempotent: projects are matched by title and never overwritten.
"""

import asyncio
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.config import get_settings
from projectdesk.database import close_db, create_schema, get_db_session, get_engine
from projectdesk.datetime_utils import utcnow
from projectdesk.logging_config import configure_logging, get_logger
from projectdesk.models import Project

logger = get_logger(__name__)

# (title, description, project deadline days, application window days)
DEMO_PROJECTS: list[tuple[str, str, int, int]] = [
    (
        "Web Development Challenge",
        "Build a responsive web application using modern frameworks",
        7,
        3,
    ),
    (
        "Mobile App Innovation",
        "Create an innovative mobile app that solves real-world problems",
        10,
        5,
    ),
    (
        "AI Image Generator",
        "Develop an AI-powered tool that generates images from text prompts",
        14,
        7,
    ),
]


async def seed_projects(session: AsyncSession, now: datetime | None = None) -> list[Project]:
    """Insert missing demo projects and return the ones created."""
    now = now or utcnow()
    existing = set((await session.execute(select(Project.title))).scalars().all())

    created: list[Project] = []
    for offset, (title, description, deadline_days, window_days) in enumerate(DEMO_PROJECTS):
        if title in existing:
            logger.info("seed_project_skipped", title=title)
            continue
        project = Project(
            title=title,
            description=description,
            project_deadline=now + timedelta(days=deadline_days),
            application_window_close=now + timedelta(days=window_days),
            is_application_open=True,
            # Distinct timestamps keep catalog order equal to seed order.
            created_at=now + timedelta(microseconds=offset),
        )
        session.add(project)
        created.append(project)

    await session.commit()
    logger.info(
        "seed_projects_complete",
        created=len(created),
        skipped=len(DEMO_PROJECTS) - len(created),
    )
    return created


async def main() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    await create_schema(get_engine())
    async with get_db_session() as session:
        await seed_projects(session)
    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
