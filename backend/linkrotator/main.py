import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from .database import Base, build_engine, build_session_factory
from .api import admin, admin_analytics, ai_assist, pages, visitor
from .config import Settings, settings as default_settings
from .core.errors import InvalidInputError, NotFoundError
from .middleware.logging import LoggingMiddleware
from .services.ai_gateway import AIGatewayError

logger = logging.getLogger(__name__)


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def ai_gateway_handler(request: Request, exc: AIGatewayError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Operation failed, please try again"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own engine and session factory"""
    settings = settings or default_settings

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = build_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title=f"{settings.SITE_NAME} Link Rotator",
        description="Related searches, web results and pre-landing redirects with click tracking",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(LoggingMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(AIGatewayError, ai_gateway_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Include routers
    app.include_router(visitor.router, prefix="/api", tags=["visitor"])
    app.include_router(admin.router, prefix="/api", tags=["admin"])
    app.include_router(admin_analytics.router, prefix="/api", tags=["analytics"])
    app.include_router(ai_assist.router, prefix="/api", tags=["ai"])
    app.include_router(pages.router, tags=["pages"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": settings.SITE_NAME}

    logger.info(f"{settings.SITE_NAME} app created (database: {engine.url.render_as_string(hide_password=True)})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
