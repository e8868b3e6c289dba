import logging
import json
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.api import api_router
from app.core.config import settings
from app.core.exceptions import AppError
from app.db import create_all, engine
from app.middleware.request_metrics import RequestMetricsMiddleware


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {'level': record.levelname, 'time': self.formatTime(record, self.datefmt), 'name': record.name, 'message': record.getMessage()}
        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(log_record)


handler = logging.StreamHandler()
handler.setFormatter(JsonFormatter())
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO), handlers=[handler])
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    logger.info("Starting application...")
    if settings.create_tables_on_startup:
        await create_all()
        logger.info("Database tables ensured")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await engine.dispose()
    logger.info("Closed database connections")


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.message, 'code': exc.code})


app = FastAPI(title='PromptShare API', lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_middleware(RequestMetricsMiddleware, slow_request_ms=1000, log_requests=False)
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=['*'], allow_headers=['*'])
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.include_router(api_router, prefix='/api')


@app.get('/')
async def root():
    return {'message': 'Welcome to the PromptShare API'}


if __name__ == '__main__':
    uvicorn.run('app.main:app', host='0.0.0.0', port=8000, reload=True)
