from fastapi import APIRouter

from app.api.routes import (
    choice_providers,
    jobs,
    login,
    script_approval,
    utils,
)

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(utils.router)
api_router.include_router(jobs.router)
api_router.include_router(choice_providers.router)
api_router.include_router(script_approval.router)
