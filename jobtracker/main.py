from fastapi import FastAPI
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
import os # for .env files
from dotenv import load_dotenv #for .env files
import logging
import uvicorn
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from jobtracker.api import jobs, metrics, resume, trophies # importing routers
from jobtracker.create_tables import init_db

load_dotenv()

logger = logging.getLogger("uvicorn.error")


app = FastAPI(title="Job Tracker")


frontend_url = os.getenv('FRONTEND_URL', "http://localhost:3000")
logging.basicConfig(level=logging.INFO)
logging.info(f"Allowed frontend URL: {frontend_url}")
origins = [frontend_url]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],  # ALlow all HTTP methods (GET, POST, etc..)
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    response = JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred"}
    )
    #Manually add CORS headers
    response.headers["Access-Control-Allow-Origin"] = frontend_url
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # 400 instead of the default 422
    logger.info(f"Validation error on {request.method} {request.url.path}")
    response = JSONResponse(status_code=400, content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}))
    response.headers["Access-Control-Allow-Origin"] = frontend_url
    return response

#Include routers from separate modules.
# metrics before jobs so /api/jobs/summary is matched ahead of /api/jobs/{job_id}
app.include_router(metrics.router)
app.include_router(jobs.router)
app.include_router(resume.router)
app.include_router(trophies.router)


if __name__ == "__main__":
    init_db()
    port = int(os.environ.get("PORT", 8000))
    host = os.environ.get("HOST", "localhost")
    uvicorn.run("jobtracker.main:app", host=host, port=port, reload=True)
