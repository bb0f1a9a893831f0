from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chillpoints.config import load_settings
from chillpoints.logging_config import setup_logging
from chillpoints.services.store_registry import StoreRegistry

from chillpoints.routes.rewards import router as rewards_router


def create_app(settings=None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="ChillPoints")
    app.state.settings = settings
    app.state.stores = StoreRegistry(settings)

    # ─── CORS ─────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ui.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("shutdown")
    def shutdown():
        app.state.stores.close()

    app.include_router(rewards_router)

    @app.get("/")
    def read_root():
        return {"message": "ChillPoints is running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chillpoints.main:app", host="127.0.0.1", port=8001, reload=True)
