from __future__ import annotations

import re
from datetime import date
from types import SimpleNamespace
from typing import Any

import pytest
from src.domain.errors import TransactionFailureError
from src.domain.services.certificates import (
    CertificateIssuer,
    CertificateNumberExhaustedError,
    add_years,
    generate_certificate,
    generate_certificate_number,
)

CERT_PATTERN = re.compile(r"^CERT-\d+-[A-Z0-9]{9}$")


def test_certificate_number_format() -> None:
    number = generate_certificate_number(now_ms=1760832000123)

    assert number.startswith("CERT-1760832000123-")
    assert CERT_PATTERN.match(number)


def test_generated_numbers_differ() -> None:
    numbers = {generate_certificate_number() for _ in range(50)}
    assert len(numbers) == 50


def test_generate_certificate_uses_calendar_years() -> None:
    details = generate_certificate(today=date(2026, 10, 19))

    assert details.issue_date == date(2026, 10, 19)
    assert details.expiry_date == date(2028, 10, 19)
    assert CERT_PATTERN.match(details.number)


def test_generate_certificate_custom_expiry() -> None:
    details = generate_certificate(5, today=date(2026, 1, 31))
    assert details.expiry_date == date(2031, 1, 31)


def test_add_years_from_leap_day() -> None:
    assert add_years(date(2024, 2, 29), 2) == date(2026, 2, 28)
    assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)


class FakeCertifications:
    def __init__(self, collisions: list[bool]) -> None:
        self.collisions = collisions
        self.checked: list[str] = []
        self.added: list[dict[str, Any]] = []

    async def number_exists(self, certificate_number: str) -> bool:
        self.checked.append(certificate_number)
        return self.collisions.pop(0) if self.collisions else False

    async def add(self, **values: Any) -> SimpleNamespace:
        self.added.append(values)
        return SimpleNamespace(id="cert-1", **values)


async def test_issuer_regenerates_after_collision() -> None:
    certifications = FakeCertifications([True, False])
    uow = SimpleNamespace(certifications=certifications)
    issuer = CertificateIssuer(expiry_years=2, max_attempts=3)

    certification = await issuer.issue(uow, employee_id="emp-1", course_id="course-1")

    assert len(certifications.checked) == 2
    assert certification.certificate_number == certifications.checked[-1]
    assert certification.expiry_date == add_years(certification.issue_date, 2)


async def test_issuer_gives_up_after_max_attempts() -> None:
    certifications = FakeCertifications([True, True, True])
    uow = SimpleNamespace(certifications=certifications)
    issuer = CertificateIssuer(max_attempts=3)

    with pytest.raises(CertificateNumberExhaustedError) as exc_info:
        await issuer.issue(uow, employee_id="emp-1", course_id="course-1")

    assert isinstance(exc_info.value, TransactionFailureError)
    assert certifications.added == []


async def test_issuer_expiry_override() -> None:
    certifications = FakeCertifications([])
    uow = SimpleNamespace(certifications=certifications)

    certification = await CertificateIssuer().issue(
        uow, employee_id="emp-1", course_id="course-1", expiry_years=3
    )

    assert certification.expiry_date == add_years(certification.issue_date, 3)
