"""V1 API router aggregation."""

from fastapi import APIRouter

from doccredits.api.v1.analytics import router as analytics_router
from doccredits.api.v1.document_types import public_router as catalog_router
from doccredits.api.v1.document_types import router as document_types_router
from doccredits.api.v1.me import router as me_router
from doccredits.api.v1.permissions import router as permissions_router
from doccredits.api.v1.schools import router as schools_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(schools_router)
v1_router.include_router(permissions_router)
v1_router.include_router(document_types_router)
v1_router.include_router(catalog_router)
v1_router.include_router(me_router)
v1_router.include_router(analytics_router)
