from sqlalchemy import Column, String, Boolean, DateTime
from src.database import Base
from src.shared.models import AuditMixin


class ElectionConfig(Base, AuditMixin):
    """Voting and results-release schedule. All instants are stored as naive UTC."""
    __tablename__ = "election_configs"

    name = Column(String, unique=True, nullable=False)
    voting_start = Column(DateTime, nullable=False, index=True)
    voting_end = Column(DateTime, nullable=False, index=True)
    results_start = Column(DateTime, nullable=False, index=True)

    # Keeps mutation endpoints open outside the voting window. Never consulted
    # by the resolver gate.
    allow_override = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    timezone = Column(String, nullable=False, default="America/La_Paz")
