from enum import Enum
from sqlalchemy import Column, String, ForeignKey, DateTime, JSON
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class CaseStatus(str, Enum):
    UNRESOLVED = "UNRESOLVED"
    PENDING = "PENDING"
    DISPUTED = "DISPUTED"
    AGREED = "AGREED"
    FINAL = "FINAL"


# Cases in these states are never revisited by the resolver.
TERMINAL_STATUSES = (CaseStatus.FINAL,)


class AttestationCase(Base, AuditMixin):
    """Durable resolution record for one polling table."""
    __tablename__ = "attestation_cases"

    table_code = Column(String, unique=True, nullable=False, index=True)
    status = Column(SAEnum(CaseStatus), nullable=False, index=True)
    winning_version_id = Column(ForeignKey("ballot_versions.id"), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    rationale = Column(String, nullable=True)
    summary = Column(JSON, nullable=True)  # {"per_version": {id: {"users": n, "juries": n}}}

    winning_version = relationship("src.ballots.models.BallotVersion")
