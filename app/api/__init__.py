"""
API router aggregation
"""

from fastapi import APIRouter
from app.api.endpoints import (
    accounts, catalog, devices, logs, maintenances, operations, sims, system, terms, users
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    system.router,
    prefix="/system",
    tags=["System"]
)

api_router.include_router(
    devices.router,
    prefix="/devices",
    tags=["Devices"]
)

api_router.include_router(
    maintenances.router,
    prefix="/maintenances",
    tags=["Devices"]
)

api_router.include_router(
    sims.router,
    prefix="/sims",
    tags=["SIM Cards"]
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"]
)

api_router.include_router(
    accounts.router,
    prefix="/accounts",
    tags=["Accounts"]
)

api_router.include_router(
    catalog.router,
    prefix="/catalog",
    tags=["Catalog"]
)

api_router.include_router(
    operations.router,
    prefix="/operations",
    tags=["Assignment"]
)

api_router.include_router(
    terms.router,
    prefix="/terms",
    tags=["Terms"]
)

api_router.include_router(
    logs.router,
    prefix="",
    tags=["Audit"]
)
