from fastapi import FastAPI
from rumb.core.database import init_db
from rumb.routers import level_routers, schedule_routers
from rumb.utils.logger_config import configure_logging

configure_logging()

# Create database tables
init_db()

# create FastAPI
app = FastAPI(title="Rumb Level Generator API", version="1.0")

# get routers
app.include_router(level_routers.router, prefix="/levels", tags=["Levels"])
app.include_router(schedule_routers.router, prefix="/schedule", tags=["Schedule"])


@app.get("/health")
async def health():
    return {"status": "ok"}
