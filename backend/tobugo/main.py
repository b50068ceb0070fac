from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tobugo.core.config import APP_NAME, APP_VERSION, CORS_ORIGINS, DEBUG, ENVIRONMENT, SERVER_HOST, SERVER_PORT
from tobugo.router.ai import router as ai_router
from tobugo.router.chat import router as chat_router
from tobugo.router.review import router as review_router
from tobugo.router.saved_trip import router as saved_trip_router
from tobugo.router.system import router as system_router
from tobugo.router.trip import router as trip_router
from tobugo.services import Services, build_services


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build collaborators once, unless tests injected them
    print(f"🚀 Starting up {APP_NAME}...")
    print(f"   Environment: {ENVIRONMENT} | Debug: {DEBUG}")
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()
    await app.state.services.storage.init()
    yield
    # Shutdown: close storage
    print(f"🛑 Shutting down {APP_NAME}...")
    await app.state.services.storage.close()


def create_app(services: Services | None = None) -> FastAPI:
    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system_router)
    app.include_router(ai_router)
    app.include_router(chat_router)
    app.include_router(trip_router)
    app.include_router(review_router)
    app.include_router(saved_trip_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
