"""Certificate numbers, validity windows and issuance."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

import structlog
from dateutil.relativedelta import relativedelta
from src.domain.errors import TransactionFailureError

if TYPE_CHECKING:
    from src.infrastructure.db.models import Certification
    from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()

CERTIFICATE_PREFIX = "CERT"
SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


class CertificateNumberExhaustedError(TransactionFailureError):
    """Raised when every generated certificate number collided with an existing one."""


@dataclass(frozen=True, slots=True)
class CertificateDetails:
    number: str
    issue_date: date
    expiry_date: date


def add_years(start: date, years: int) -> date:
    """Calendar-year addition. Feb 29 maps to Feb 28 in non-leap target years."""
    return start + relativedelta(years=years)


def generate_certificate_number(now_ms: int | None = None) -> str:
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{CERTIFICATE_PREFIX}-{timestamp}-{suffix}"


def generate_certificate(expiry_years: int = 2, *, today: date | None = None) -> CertificateDetails:
    issue_date = today or date.today()
    return CertificateDetails(
        number=generate_certificate_number(),
        issue_date=issue_date,
        expiry_date=add_years(issue_date, expiry_years),
    )


class CertificateIssuer:
    """Mints certificates inside a caller-owned transaction."""

    def __init__(self, *, expiry_years: int = 2, max_attempts: int = 3) -> None:
        self.expiry_years = expiry_years
        self.max_attempts = max_attempts

    async def issue(
        self,
        uow: UnitOfWork,
        *,
        employee_id: str,
        course_id: str,
        expiry_years: int | None = None,
    ) -> Certification:
        years = self.expiry_years if expiry_years is None else expiry_years

        for attempt in range(1, self.max_attempts + 1):
            details = generate_certificate(years)
            if not await uow.certifications.number_exists(details.number):
                break
            logger.warning(
                "certificate_number_collision",
                certificate_number=details.number,
                attempt=attempt,
            )
        else:
            raise CertificateNumberExhaustedError("Could not generate a unique certificate number")

        # The unique constraint on certificate_number still guards concurrent writers
        certification = await uow.certifications.add(
            employee_id=employee_id,
            course_id=course_id,
            certificate_number=details.number,
            issue_date=details.issue_date,
            expiry_date=details.expiry_date,
        )
        logger.info(
            "certificate_issued",
            certification_id=certification.id,
            certificate_number=certification.certificate_number,
            employee_id=employee_id,
            course_id=course_id,
            expiry_date=details.expiry_date.isoformat(),
        )
        return certification
