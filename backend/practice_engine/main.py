import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .db import init_db
from .errors import PracticeError
from .settings import settings
from .routers import catalog
from .routers import submissions

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Practice Assessment API")
app.include_router(catalog.router)
app.include_router(submissions.router)


@app.exception_handler(PracticeError)
async def practice_error_handler(request: Request, exc: PracticeError):
	return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/info")
def root():
	return {"status": "ok", "auto_graded_skills": settings.auto_graded_skills}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	init_db()
