# hms/api/v1/router.py
from fastapi import APIRouter

from hms.api.v1.endpoints import (
    admissions,
    audit,
    auth,
    billing,
    consultations,
    dashboard,
    hospitals,
    inventory,
    labs,
    live,
    patients,
    payments,
    prescriptions,
    reviews,
    rounds,
    settings,
    users,
    visits,
    vitals,
    wards,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(visits.router, prefix="/visits", tags=["visits"])
api_router.include_router(vitals.router, prefix="/vitals", tags=["vitals"])
api_router.include_router(consultations.router, prefix="/consultations", tags=["consultations"])
api_router.include_router(admissions.router, prefix="/admissions", tags=["admissions"])
api_router.include_router(wards.router, prefix="/wards", tags=["wards"])
api_router.include_router(rounds.router, prefix="/rounds", tags=["rounds"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(labs.router, prefix="/labs", tags=["labs"])
api_router.include_router(prescriptions.router, prefix="/prescriptions", tags=["prescriptions"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(hospitals.router, prefix="/hospitals", tags=["hospitals"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(live.router, tags=["live"])
