# hms/models/metadata.py
"""
Imports every model module so Base.metadata knows all tables.
Used by Alembic autogenerate and by Database.create_all().
"""

from hms.models.base import Base
from hms.models import (  # noqa: F401
    admission,
    audit_log,
    billing,
    consultation,
    hospital,
    inventory,
    lab,
    patient,
    prescription,
    round,
    user,
    visit,
    vital,
    ward,
)

__all__ = ["Base"]
