from fastapi import APIRouter
from .endpoints import users, tasks, tags

router = APIRouter()

# Include all API endpoints
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
