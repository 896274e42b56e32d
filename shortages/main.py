import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortages.core.config import config
from shortages.core.db.engine import check_database_connection
from shortages.core.error_handler import global_exception_handler
from shortages.core.response_interceptor import (
    SuccessResponseInterceptor,
    CustomAPIRoute,
    skip_interceptor,
)
from shortages.modules.directory.router import router as directory_router
from shortages.modules.directory.service import DirectoryService
from shortages.modules.exports.pdf_generator import check_font_coverage
from shortages.modules.exports.router import router as export_router
from shortages.modules.reports.router import router as form_router
from shortages.modules.reports.sessions import FormSessionRegistry
from shortages.modules.users import router as users_router

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Branch Shortages API...")
    app.state.directory = DirectoryService.load(config.directory_file)
    check_font_coverage(app.state.directory, config.pdf_font_path)
    app.state.form_sessions = FormSessionRegistry()
    yield
    # stop autosave timers; in-flight saves are left to finish
    app.state.form_sessions.close_all()
    logger.info("Branch Shortages API stopped")


app = FastAPI(
    title="Branch Shortages API",
    description="Daily branch shortage forms with autosaved drafts, PDF export and WhatsApp sharing",
    version="1.0.0",
    lifespan=lifespan,
)

# Override the default route class to support skip_interceptor decorator
app.router.route_class = CustomAPIRoute

# Add global exception handler
app.add_exception_handler(Exception, global_exception_handler)

origins = [
    "http://localhost",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Success Response Interceptor (must be added after CORS)
app.add_middleware(SuccessResponseInterceptor)

# Include routers with /api prefix
app.include_router(users_router, prefix="/api")
app.include_router(directory_router, prefix="/api")
app.include_router(form_router, prefix="/api")
app.include_router(export_router, prefix="/api")


@app.get("/health")
@skip_interceptor
async def health() -> dict:
    return {"status": "ok", "database": await check_database_connection()}
