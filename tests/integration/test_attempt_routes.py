"""
HTTP tests for assessment attempts.

1. POST /assessments/{id}/attempts - 201 pass completes enrollment and certifies
2. POST /assessments/{id}/attempts - 201 fail
3. POST /assessments/{id}/attempts - 400 missing or malformed fields
4. POST /assessments/{id}/attempts - 404 unknown assessment or employee
5. POST /assessments/{id}/attempts - 500 and full rollback on a write failure
6. POST /assessments/{id}/attempts - 401 without token
7. GET /assessments/{id}/attempts - newest first
"""

from __future__ import annotations

import re

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.services.notifications import Notifier
from src.infrastructure.db.models import (
    AssessmentAttempt,
    Certification,
    EnrollmentStatus,
    Notification,
)
from src.infrastructure.repositories.unit_of_work import CertificationRepository

from tests.utils import (
    auth_headers,
    count_rows,
    seed_assessment,
    seed_course,
    seed_employee,
    seed_enrollment,
)


class TestSubmitAttempt:
    async def test_passing_attempt_with_active_enrollment(
        self, async_client: AsyncClient, db: AsyncSession, notifier: Notifier
    ) -> None:
        employee = await seed_employee(db, user_id="user-dana")
        course = await seed_course(db)
        assessment = await seed_assessment(db, course, passing_score=70)
        enrollment = await seed_enrollment(db, employee, course)

        response = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": employee.id, "score": 72},
            headers=auth_headers(),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Congratulations! You passed!"
        assert body["data"]["status"] == "Passed"
        assert body["data"]["score"] == 72
        assert body["data"]["attempted_at"] == body["data"]["completed_at"]

        await db.refresh(enrollment)
        assert enrollment.status is EnrollmentStatus.COMPLETED
        assert enrollment.completion_percentage == 100

        certifications = (await db.execute(select(Certification))).scalars().all()
        assert len(certifications) == 1
        assert re.match(r"^CERT-\d+-[A-Z0-9]{9}$", certifications[0].certificate_number)

        await notifier.drain()
        assert await count_rows(db, Notification, user_id="user-dana") == 2

    async def test_failing_attempt(self, async_client: AsyncClient, db: AsyncSession) -> None:
        employee = await seed_employee(db)
        course = await seed_course(db)
        assessment = await seed_assessment(db, course, passing_score=70)

        response = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": employee.id, "score": 50},
            headers=auth_headers(),
        )

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "Failed"
        assert response.json()["message"] == "Assessment completed"

    async def test_missing_fields_return_400(
        self, async_client: AsyncClient, db: AsyncSession
    ) -> None:
        course = await seed_course(db)
        assessment = await seed_assessment(db, course)

        missing_score = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": "emp-1"},
            headers=auth_headers(),
        )
        malformed_score = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": "emp-1", "score": "lots"},
            headers=auth_headers(),
        )

        assert missing_score.status_code == 400
        assert missing_score.json()["detail"] == "Employee ID and score are required"
        assert malformed_score.status_code == 400
        assert await count_rows(db, AssessmentAttempt) == 0

    async def test_unknown_assessment_returns_404(
        self, async_client: AsyncClient, db: AsyncSession
    ) -> None:
        employee = await seed_employee(db)

        response = await async_client.post(
            "/assessments/does-not-exist/attempts",
            json={"employee_id": employee.id, "score": 90},
            headers=auth_headers(),
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Assessment not found"
        assert await count_rows(db, AssessmentAttempt) == 0

    @pytest.mark.parametrize("raw_score", ["Infinity", "-Infinity", "NaN"])
    async def test_non_finite_score_returns_400(
        self, async_client: AsyncClient, db: AsyncSession, raw_score: str
    ) -> None:
        employee = await seed_employee(db)
        course = await seed_course(db)
        assessment = await seed_assessment(db, course)
        enrollment = await seed_enrollment(db, employee, course)

        # Bare JSON tokens; a JSON encoder would never emit them
        response = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            content=f'{{"employee_id": "{employee.id}", "score": {raw_score}}}',
            headers={**auth_headers(), "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Score must be a number"
        assert await count_rows(db, AssessmentAttempt) == 0
        assert await count_rows(db, Certification) == 0
        await db.refresh(enrollment)
        assert enrollment.status is EnrollmentStatus.ACTIVE

    async def test_unknown_employee_returns_404(
        self, async_client: AsyncClient, db: AsyncSession
    ) -> None:
        course = await seed_course(db)
        assessment = await seed_assessment(db, course)

        response = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": "no-such-employee", "score": 90},
            headers=auth_headers(),
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Employee not found"
        assert await count_rows(db, AssessmentAttempt) == 0

    async def test_write_failure_returns_500_and_rolls_back(
        self,
        async_client: AsyncClient,
        db: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        employee = await seed_employee(db)
        course = await seed_course(db)
        assessment = await seed_assessment(db, course)
        enrollment = await seed_enrollment(db, employee, course)

        async def failing_add(self: CertificationRepository, **_: object) -> Certification:
            raise RuntimeError("connection reset by peer")

        monkeypatch.setattr(CertificationRepository, "add", failing_add)

        response = await async_client.post(
            f"/assessments/{assessment.id}/attempts",
            json={"employee_id": employee.id, "score": 95},
            headers=auth_headers(),
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to submit attempt"
        assert "connection reset" not in response.text
        assert await count_rows(db, AssessmentAttempt) == 0
        assert await count_rows(db, Certification) == 0
        await db.refresh(enrollment)
        assert enrollment.status is EnrollmentStatus.ACTIVE
        assert enrollment.completion_percentage == 0

    async def test_requires_bearer_token(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/assessments/any/attempts", json={"employee_id": "e", "score": 1}
        )
        assert response.status_code == 401


class TestListAttempts:
    async def test_newest_first_with_employee_name(
        self, async_client: AsyncClient, db: AsyncSession
    ) -> None:
        employee = await seed_employee(db, name="Dana Reyes")
        course = await seed_course(db)
        assessment = await seed_assessment(db, course)
        url = f"/assessments/{assessment.id}/attempts"

        first = await async_client.post(
            url, json={"employee_id": employee.id, "score": 30}, headers=auth_headers()
        )
        second = await async_client.post(
            url, json={"employee_id": employee.id, "score": 60}, headers=auth_headers()
        )

        response = await async_client.get(url, headers=auth_headers())

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["id"] for item in data] == [
            second.json()["data"]["id"],
            first.json()["data"]["id"],
        ]
        assert data[0]["employee_name"] == "Dana Reyes"
