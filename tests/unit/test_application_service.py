"""Unit tests for ApplicationService and AdminAssignmentService."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from projectdesk.config import Settings
from projectdesk.datetime_utils import ensure_utc
from projectdesk.exceptions import (
    AlreadyAppliedError,
    ApplicationWindowClosedError,
    NotAuthenticatedError,
    NotAuthorizedError,
    ProjectNotFoundError,
    ValidationError,
)
from projectdesk.models import Application
from projectdesk.services import application_service
from projectdesk.services.admin_service import AdminAssignmentService
from projectdesk.services.application_service import ApplicationService
from projectdesk.services.locks import KeyedLock
from tests.factories import PrincipalFactory, ProjectFactory


async def _count_applications(session) -> int:
    return (await session.execute(select(func.count(Application.id)))).scalar_one()


# ---------------------------------------------------------------------------
# apply
# ---------------------------------------------------------------------------


class TestApply:
    @pytest.mark.asyncio
    async def test_apply_sets_personal_deadline(self, db_session, settings, locks, now):
        """Personal deadline is seven days after applying, not the project deadline."""
        project = await ProjectFactory.create(db_session, now=now, deadline_days=3)
        user = PrincipalFactory.user()

        application = await ApplicationService(db_session, settings, locks).apply(
            user, project.id, now=now
        )

        assert application.user_id == user.id
        assert application.project_id == project.id
        assert ensure_utc(application.applied_at) == now
        assert ensure_utc(application.personal_deadline) == now + timedelta(days=7)
        assert application.submission_id is None
        assert application.assigned_by is None

    @pytest.mark.asyncio
    async def test_deadline_days_configurable(self, db_session, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        service = ApplicationService(
            db_session, Settings(personal_deadline_days=2), locks
        )

        application = await service.apply(PrincipalFactory.user(), project.id, now=now)

        assert ensure_utc(application.personal_deadline) == now + timedelta(days=2)

    @pytest.mark.asyncio
    async def test_apply_twice_raises_already_applied(
        self, db_session, settings, locks, now
    ):
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()
        service = ApplicationService(db_session, settings, locks)
        await service.apply(user, project.id, now=now)

        with pytest.raises(AlreadyAppliedError):
            await service.apply(user, project.id, now=now + timedelta(hours=1))

        assert await _count_applications(db_session) == 1

    @pytest.mark.asyncio
    async def test_apply_after_window_close(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now, window_days=1)

        with pytest.raises(ApplicationWindowClosedError):
            await ApplicationService(db_session, settings, locks).apply(
                PrincipalFactory.user(), project.id, now=now + timedelta(days=1)
            )

        assert await _count_applications(db_session) == 0

    @pytest.mark.asyncio
    async def test_apply_when_flag_closed(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(
            db_session, now=now, is_application_open=False
        )

        with pytest.raises(ApplicationWindowClosedError):
            await ApplicationService(db_session, settings, locks).apply(
                PrincipalFactory.user(), project.id, now=now
            )

    @pytest.mark.asyncio
    async def test_apply_unknown_project(self, db_session, settings, locks, now):
        with pytest.raises(ProjectNotFoundError):
            await ApplicationService(db_session, settings, locks).apply(
                PrincipalFactory.user(), uuid4(), now=now
            )

    @pytest.mark.asyncio
    async def test_apply_requires_principal(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        with pytest.raises(NotAuthenticatedError):
            await ApplicationService(db_session, settings, locks).apply(
                None, project.id, now=now
            )

    @pytest.mark.asyncio
    async def test_list_for_user_only_own(self, db_session, settings, locks, now):
        first = await ProjectFactory.create(db_session, now=now)
        second = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()
        other = PrincipalFactory.user()
        service = ApplicationService(db_session, settings, locks)
        await service.apply(user, first.id, now=now)
        await service.apply(user, second.id, now=now + timedelta(minutes=5))
        await service.apply(other, first.id, now=now)

        mine = await service.list_for_user(user)

        assert [a.project_id for a in mine] == [first.id, second.id]
        assert {a.user_id for a in mine} == {user.id}


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrentApply:
    @pytest.mark.asyncio
    async def test_concurrent_apply_creates_one(
        self, db_session, session_factory, settings, locks, now
    ):
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()

        async def attempt():
            async with session_factory() as session:
                return await ApplicationService(session, settings, locks).apply(
                    user, project.id, now=now
                )

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        created = [r for r in results if isinstance(r, Application)]
        rejected = [r for r in results if isinstance(r, AlreadyAppliedError)]
        assert len(created) == 1
        assert len(rejected) == 1
        assert await _count_applications(db_session) == 1

    @pytest.mark.asyncio
    async def test_unique_constraint_without_shared_lock(
        self, db_session, session_factory, settings, now
    ):
        """Separate lock tables stand in for separate processes."""
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()

        async def attempt():
            async with session_factory() as session:
                return await ApplicationService(session, settings, KeyedLock()).apply(
                    user, project.id, now=now
                )

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        assert sum(isinstance(r, Application) for r in results) == 1
        assert sum(isinstance(r, AlreadyAppliedError) for r in results) == 1
        assert await _count_applications(db_session) == 1


# ---------------------------------------------------------------------------
# assign
# ---------------------------------------------------------------------------


class TestAdminAssign:
    @pytest.mark.asyncio
    async def test_assign_bypasses_closed_window(self, db_session, settings, locks, now):
        project = await ProjectFactory.create_closed(db_session, now)
        admin = PrincipalFactory.admin()

        application = await AdminAssignmentService(db_session, settings, locks).assign(
            admin, "user-42", project.id, now=now
        )

        assert application.user_id == "user-42"
        assert application.assigned_by == admin.id
        assert ensure_utc(application.personal_deadline) == now + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_assign_then_apply_conflicts(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()
        await AdminAssignmentService(db_session, settings, locks).assign(
            PrincipalFactory.admin(), user.id, project.id, now=now
        )

        with pytest.raises(AlreadyAppliedError):
            await ApplicationService(db_session, settings, locks).apply(
                user, project.id, now=now
            )

    @pytest.mark.asyncio
    async def test_apply_then_assign_conflicts(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()
        await ApplicationService(db_session, settings, locks).apply(
            user, project.id, now=now
        )

        with pytest.raises(AlreadyAppliedError):
            await AdminAssignmentService(db_session, settings, locks).assign(
                PrincipalFactory.admin(), user.id, project.id, now=now
            )
        assert await _count_applications(db_session) == 1

    @pytest.mark.asyncio
    async def test_assign_requires_admin(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        with pytest.raises(NotAuthorizedError):
            await AdminAssignmentService(db_session, settings, locks).assign(
                PrincipalFactory.user(), "user-42", project.id, now=now
            )

    @pytest.mark.asyncio
    async def test_assign_unknown_project(self, db_session, settings, locks, now):
        with pytest.raises(ProjectNotFoundError):
            await AdminAssignmentService(db_session, settings, locks).assign(
                PrincipalFactory.admin(), "user-42", uuid4(), now=now
            )

    @pytest.mark.asyncio
    async def test_assign_blank_user(self, db_session, settings, locks, now):
        project = await ProjectFactory.create(db_session, now=now)
        with pytest.raises(ValidationError):
            await AdminAssignmentService(db_session, settings, locks).assign(
                PrincipalFactory.admin(), "   ", project.id, now=now
            )


class TestApplyUniqueConstraint:
    @pytest.mark.asyncio
    async def test_integrity_error_reported_as_already_applied(
        self, db_session, session_factory, settings, now, monkeypatch
    ):
        """A row committed by another process slips past the lookup; the insert fails."""
        project = await ProjectFactory.create(db_session, now=now)
        user = PrincipalFactory.user()
        await ApplicationService(db_session, settings, KeyedLock()).apply(
            user, project.id, now=now
        )
        project_id = project.id

        monkeypatch.setattr(
            application_service, "find_application", AsyncMock(return_value=None)
        )
        async with session_factory() as session:
            with pytest.raises(AlreadyAppliedError) as exc_info:
                await ApplicationService(session, settings, KeyedLock()).apply(
                    user, project_id, now=now
                )
            assert not session.in_transaction()

        assert exc_info.value.project_id == project_id
        assert exc_info.value.user_id == user.id
        assert await _count_applications(db_session) == 1

    @pytest.mark.asyncio
    async def test_assign_integrity_error_reported_as_already_applied(
        self, db_session, session_factory, settings, now, monkeypatch
    ):
        project = await ProjectFactory.create(db_session, now=now)
        await ApplicationService(db_session, settings, KeyedLock()).apply(
            PrincipalFactory.user("user-7"), project.id, now=now
        )
        project_id = project.id

        monkeypatch.setattr(
            application_service, "find_application", AsyncMock(return_value=None)
        )
        async with session_factory() as session:
            with pytest.raises(AlreadyAppliedError):
                await AdminAssignmentService(session, settings, KeyedLock()).assign(
                    PrincipalFactory.admin(), "user-7", project_id, now=now
                )

        assert await _count_applications(db_session) == 1
