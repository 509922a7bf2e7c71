"""StreakMind - Main entry point."""
from fastapi import FastAPI
from streakmind.api.routes import router
from streakmind.core.logging import logger
from streakmind.core.config import settings

app = FastAPI(
    title="StreakMind: Habit Tracker",
    description="Log habits in plain language; points, streaks and badges",
    version="1.0.0"
)

app.include_router(router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("=" * 60)
    logger.info("StreakMind starting up")
    logger.info(f"Data path: {settings.data_path}")
    logger.info(f"LLM endpoint: {settings.llm_base_url}")
    logger.info(f"LLM model: {settings.llm_model_name}")
    logger.info(f"Streak policy: {settings.tracking.streak_policy}")
    logger.info(f"Log level: {settings.logging.level}")
    logger.info("=" * 60)


def run():
    """Console entry point for the API server."""
    import uvicorn
    import os
    reload = os.getenv("STREAKMIND_DEV_MODE", "false").lower() == "true"
    uvicorn.run(
        "streakmind.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    run()
