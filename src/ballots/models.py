from sqlalchemy import Column, String, Integer, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class BallotVersion(Base, AuditMixin):
    """One submitted digitization of a polling table's report.

    Rows are created by the ingestion pipeline. The resolver only ever flips
    ``counts_toward_totals``; at most one version per table carries it.
    """
    __tablename__ = "ballot_versions"
    __table_args__ = (
        UniqueConstraint("table_code", "version", name="uq_ballot_versions_table_version"),
    )

    table_code = Column(String, nullable=False, index=True)
    version = Column(Integer, nullable=False)
    counts_toward_totals = Column(Boolean, default=False, nullable=False, index=True)

    # Content-addressed source of the digitization, filled by ingestion.
    ipfs_cid = Column(String, nullable=True)
    record_id = Column(String, nullable=True)

    attestations = relationship("src.attestations.models.Attestation", back_populates="version")
