import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from .config import settings, Settings
from .api.routes import api_router
from .database import MongoConnection
from .services.error_handling import ServiceError, DatabaseError
from .services.event import EventService
from .services.event_store import MongoEventStore
from fastapi.openapi.utils import get_openapi

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(
    config: Settings = settings,
    mongo: Optional[MongoConnection] = None,
    event_service: Optional[EventService] = None
) -> FastAPI:
    """
    Build the application.

    The Mongo connection and the event service are created once in the
    lifespan and kept on app.state. Either can be supplied instead, in
    which case the caller owns its lifetime.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        connection = mongo if mongo is not None else MongoConnection(config)
        app.state.mongo = connection
        app.state.event_service = event_service
        if event_service is None:
            app.state.event_service = EventService(MongoEventStore(connection.events), config)

        if config.CREATE_INDEXES:
            try:
                await connection.create_indexes()
            except DatabaseError as e:
                logger.warning(f"Index creation skipped: {e.message}")

        logger.info(f"{config.API_TITLE} started, database {connection.info()['url']}")
        yield

        logger.info(f"Shutting down {config.API_TITLE}")
        if mongo is None:
            connection.close()

    app = FastAPI(
        title=config.API_TITLE,
        description=config.API_DESCRIPTION,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Access token issued by the auth service"
            }
        }

        for path, path_item in openapi_schema['paths'].items():
            for method, operation in path_item.items():
                if path.startswith("/events"):
                    operation['security'] = [{"BearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGIN_LIST,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Last-Modified", "Location"],
    )

    app.include_router(api_router)

    app.openapi = custom_openapi

    @app.get("/")
    async def root():
        return {
            "version": config.API_VERSION,
            "status": "operational"
        }

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        """Handle service-specific errors with appropriate status codes and formatting."""
        if exc.status_code >= 500:
            logger.error(f"Service error: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": exc.message,
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first_error = errors[0] if errors else {"msg": "Validation error"}
        return JSONResponse(
            status_code=400,
            content={
                "message": first_error["msg"]
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": message
            },
            headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions with a simplified 500 error response."""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "message": "An unexpected error occurred"
            }
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "contribution_api.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False
    )
