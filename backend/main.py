import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.logging_config import ensure_logging, setup_logging
from backend.database import init_db
from backend.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from backend.routes import health_routes

logger = logging.getLogger(__name__)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={'error': 'Internal Server Error'})


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_logging()
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
    logger.info('Server running on http://localhost:%d', config.PORT)
    logger.info('Health check: http://localhost:%d/api/health', config.PORT)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title=config.APP_NAME, lifespan=lifespan)

    # Starlette wraps the stack in reverse: the last middleware added sees the
    # request first. Requests pass security headers, CORS, gzip, then logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=config.GZIP_MINIMUM_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_routes.router, prefix='/api')
    return app


app = create_app()


def run() -> None:
    import uvicorn

    setup_logging()
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None, server_header=False)


if __name__ == '__main__':
    run()
