from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.credits.router import router as credits_router
from app.api.v1.maintenance.router import router as maintenance_router
from app.api.v1.recovery_classes.router import router as recovery_classes_router
from app.api.v1.students.router import router as students_router
from app.core.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Recovery Credits Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(credits_router)
    app.include_router(recovery_classes_router)
    app.include_router(students_router)
    app.include_router(maintenance_router)

    return app


app = create_app()
