from enum import Enum
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class AttestationRole(str, Enum):
    JURY = "JURY"
    OBSERVER = "OBSERVER"


class AttestationStance(str, Enum):
    SUPPORT = "SUPPORT"
    REJECT = "REJECT"


DEDUP_CONSTRAINT = "uq_attestations_submitter_version"


class Attestation(Base, AuditMixin):
    """Endorsement or rejection of one ballot version by one submitter.

    Append-only. The (submitter_id, version_id) constraint is the dedup rule
    and is enforced by the database, not by a prior read.
    """
    __tablename__ = "attestations"
    __table_args__ = (
        UniqueConstraint("submitter_id", "version_id", name=DEDUP_CONSTRAINT),
    )

    version_id = Column(ForeignKey("ballot_versions.id"), nullable=False, index=True)
    submitter_id = Column(String, nullable=False, index=True)
    role = Column(SAEnum(AttestationRole), nullable=False, index=True)
    stance = Column(SAEnum(AttestationStance), nullable=False, index=True)

    version = relationship("src.ballots.models.BallotVersion", back_populates="attestations")
