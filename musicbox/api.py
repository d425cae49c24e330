from fastapi import FastAPI
from .database.init_db import check_database_connection
from .songs.controller import router as songs_router
from .playlists.controller import router as playlists_router
from .users.controller import router as users_router


def register_routes(app: FastAPI):
    app.include_router(songs_router)
    app.include_router(playlists_router)
    app.include_router(users_router)

    @app.get("/health", tags=["health"])
    def health():
        database_ok = check_database_connection()
        return {"status": "ok" if database_ok else "degraded", "database": database_ok}
