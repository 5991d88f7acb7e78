# avocado_api/api/router.py
from fastapi import APIRouter

from avocado_api.api.endpoints import status
from avocado_api.modules.sales.routers import sales_router

api_router = APIRouter()

api_router.include_router(sales_router)
api_router.include_router(status.router)
