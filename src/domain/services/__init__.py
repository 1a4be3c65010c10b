"""Domain services."""

from src.domain.services.certificates import (
    CertificateDetails,
    CertificateIssuer,
    generate_certificate,
)
from src.domain.services.certifications import CertificationService
from src.domain.services.enrollments import EnrollmentService
from src.domain.services.notifications import NotificationService, Notifier
from src.domain.services.recommendations import LearningPathService, RecommendationService
from src.domain.services.scoring import ScoringOutcome, decide_outcome
from src.domain.services.submission import SubmissionResult, SubmissionService, list_attempts

__all__ = [
    "CertificateDetails",
    "CertificateIssuer",
    "CertificationService",
    "EnrollmentService",
    "LearningPathService",
    "NotificationService",
    "Notifier",
    "RecommendationService",
    "ScoringOutcome",
    "SubmissionResult",
    "SubmissionService",
    "decide_outcome",
    "generate_certificate",
    "list_attempts",
]
