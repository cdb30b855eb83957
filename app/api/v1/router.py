from fastapi import APIRouter
from app.api.v1 import projects, teams

router = APIRouter()
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(teams.router, prefix="/teams", tags=["Teams"])
