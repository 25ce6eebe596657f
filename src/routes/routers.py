"""Initialize all the routers for the API."""

from fastapi import APIRouter

webhook_router = APIRouter(tags=["webhook"])
status_check_bp = APIRouter(tags=["status_check"])
