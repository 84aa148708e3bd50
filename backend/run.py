"""Run the backend server locally."""
import uvicorn

from evano.core.config import settings

if __name__ == "__main__":
    if not settings.supabase_url or not settings.supabase_anon_key:
        print("Warning: SUPABASE_URL / SUPABASE_ANON_KEY not set")

    uvicorn.run(
        "evano.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
