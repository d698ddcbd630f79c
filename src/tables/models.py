from sqlalchemy import Column, String, Boolean
from src.database import Base
from src.shared.models import AuditMixin


class ElectoralTable(Base, AuditMixin):
    """Reference record for a polling table. Location attributes are flattened
    copies of the geographic hierarchy, kept for filtering."""
    __tablename__ = "electoral_tables"

    table_code = Column(String, unique=True, nullable=False, index=True)
    table_number = Column(String, nullable=False)

    department = Column(String, nullable=True, index=True)
    province = Column(String, nullable=True, index=True)
    municipality = Column(String, nullable=True, index=True)
    electoral_location = Column(String, nullable=True)

    # Written by the resolver: true while the table's case is UNRESOLVED.
    observed = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
