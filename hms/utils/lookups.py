# hms/utils/lookups.py
import logging
import uuid
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hms.core.errors import Conflict, NotFound, Unexpected
from hms.core.tenant_context import Principal, ensure_tenant_access

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_owned_or_404(
    db: Session,
    model: type[T],
    obj_id: uuid.UUID,
    principal: Principal,
    label: str,
) -> T:
    """
    Load a row by primary key, then apply the tenant guard.

    Missing rows are 404 "<label> not found"; rows of another hospital are 403.
    """
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    ensure_tenant_access(principal, getattr(obj, "hospital_id", None))
    return obj


def commit_or_raise(db: Session, what: str) -> None:
    """
    Commit the current transaction.

    IntegrityError becomes Conflict, any other database error Unexpected;
    both roll back first.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error while trying to %s: %s", what, exc.orig)
        raise Conflict("Duplicate entry")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while trying to %s", what)
        raise Unexpected(f"Failed to {what}")
