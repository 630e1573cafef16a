from fastapi import APIRouter
from app.api.routes import convert, jobs

api_router = APIRouter()

api_router.include_router(convert.router, prefix="/convert", tags=["Convert"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
