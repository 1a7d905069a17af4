"""Request-scoped dependencies shared by the API routers."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.schemas.common import Principal, UserRole
from app.services.consistency_coordinator import ConsistencyCoordinator
from app.services.unit_of_work import UnitOfWork


def get_principal(request: Request) -> Principal:
    """Principal forwarded by the authenticating gateway."""
    settings = get_settings()
    raw_id = request.headers.get(settings.PRINCIPAL_ID_HEADER)
    raw_role = request.headers.get(settings.PRINCIPAL_ROLE_HEADER)
    if not raw_id or not raw_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        return Principal(id=int(raw_id), role=UserRole(raw_role.strip().lower()))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid principal")


def unit_of_work(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_coordinator(uow: UnitOfWork = Depends(unit_of_work)) -> ConsistencyCoordinator:
    return ConsistencyCoordinator(uow)
