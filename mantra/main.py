"""
Mantra Helpdesk - Main Application
==================================

Helpdesk service for support tickets.

Modules:
- SLA: Deadline classification, live countdowns and the overdue sweep
- Timeline: Comments and audit entries merged into one narrative
- Tickets: Status changes, reassignment and L3 escalation
- Reports: Chart aggregations, status summary and CSV export

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and pure calculations
- Infrastructure: Database, rules file watcher, scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from mantra.config import Settings, settings as default_settings
from mantra.core import ApplicationException
from mantra.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from mantra.reports.interfaces import reports_router
from mantra.shared.api.dependencies import rules_manager
from mantra.shared.api.middleware import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from mantra.shared.infrastructure.logging import get_logger, setup_logging
from mantra.sla.application import SLAMonitor
from mantra.sla.infrastructure import SLAScheduler
from mantra.sla.interfaces import sla_router
from mantra.tickets.infrastructure import SQLAlchemyTicketRepository
from mantra.tickets.interfaces import tickets_router, urgency_levels_router
from mantra.timeline.interfaces import timeline_router

logger = get_logger(__name__)


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP:
        1. Setup structured logging
        2. Initialize database
        3. Load helpdesk rules and watch the file
        4. Start the SLA sweep

        SHUTDOWN runs the same steps in reverse.
        """
        setup_logging(settings.log_level, settings.environment)
        logger.info("Starting Mantra Helpdesk", extra={
            "version": settings.app_version,
            "environment": settings.environment
        })

        init_database()
        if settings.environment == "development":
            try:
                await create_tables()
            except (SQLAlchemyError, OSError) as e:
                logger.warning("Database not available - running in degraded mode", extra={"error": str(e)})

        rules_manager.load(settings.rules_config_path)
        rules_manager.start_watching()

        monitor = SLAMonitor(rules_manager)

        async def sla_sweep_job():
            async with get_session_context() as session:
                tz_name = rules_manager.get_rules().display_timezone
                await monitor.run(SQLAlchemyTicketRepository(session, tz_name))

        scheduler = SLAScheduler(interval_seconds=settings.sla_refresh_interval)
        await scheduler.start(sla_sweep_job)

        app.state.sla_monitor = monitor
        app.state.sla_scheduler = scheduler
        logger.info("Mantra Helpdesk started")

        yield

        logger.info("Shutting down Mantra Helpdesk")
        await scheduler.stop()
        rules_manager.stop_watching()
        await close_database()
        logger.info("Mantra Helpdesk shutdown complete")

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Mantra Helpdesk API",
        description="""
    ## Helpdesk ticketing service

    - `GET /sla/tickets/{id}`, `GET /sla/dashboard`, `GET /sla/preview` - SLA readings and countdowns
    - `GET /tickets/{id}/timeline` - merged comment and audit history
    - `POST /tickets`, `POST /tickets/{id}/status|reassign|l3|comments` - ticket actions
    - `GET /reports/overview`, `GET /reports/summary`, `GET /reports/export.csv` - reporting

    The acting user is taken from the `X-User-Id` and `X-User-Role` headers set by the gateway.
    Dates for people are rendered in the configured display timezone (IST by default).
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=build_lifespan(settings),
    )
    app.state.settings = settings

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    # Added last so it runs first and the other middleware see the id
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Include Module Routers ===
    app.include_router(sla_router)
    app.include_router(timeline_router)
    app.include_router(tickets_router)
    app.include_router(urgency_levels_router)
    app.include_router(reports_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        scheduler = getattr(request.app.state, "sla_scheduler", None)
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "rules": rules_manager.source,
                "sla_scheduler": "running" if scheduler and scheduler.is_running else "stopped",
            },
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "sla": {"prefix": "/sla"},
                "timeline": {"prefix": "/tickets/{id}/timeline"},
                "tickets": {"prefix": "/tickets"},
                "urgency_levels": {"prefix": "/urgency-levels"},
                "reports": {"prefix": "/reports"},
            },
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mantra.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.environment == "development",
        log_level="info"
    )
