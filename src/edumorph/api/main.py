from fastapi import Depends, FastAPI

from edumorph import __version__
from edumorph.api.dependencies import get_status_info
from edumorph.api.routes import (
    auth,
    dashboard,
    difficulty,
    gaps,
    insights,
    matches,
    metrics,
    privacy,
    progress,
    reports,
)

app = FastAPI(title="EduMorph API", version=__version__)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(progress.router)
app.include_router(metrics.router)
app.include_router(gaps.router)
app.include_router(difficulty.router)
app.include_router(insights.router)
app.include_router(reports.router)
app.include_router(matches.router)
app.include_router(privacy.router)


@app.get("/api/status")
async def get_status(info: dict = Depends(get_status_info)):
    return {"status": "online", "version": __version__, **info}
