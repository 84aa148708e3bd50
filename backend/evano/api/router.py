"""Main API router - aggregates all route modules."""
from fastapi import APIRouter

from evano.api.routes import account, admin, creator, home, library, videos

api_router = APIRouter(prefix="/api")

api_router.include_router(home.router)
api_router.include_router(videos.router)
api_router.include_router(library.router)
api_router.include_router(creator.router)
api_router.include_router(admin.router)
api_router.include_router(account.router)


@api_router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
