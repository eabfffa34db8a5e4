import logging
from fastapi import FastAPI

from underwraps.config.settings import settings
from underwraps.core.errors import register_exception_handlers
from underwraps.core.middleware import OriginAllowListMiddleware, SecurityHeadersMiddleware
from underwraps.core.rate_limit import limiter
from underwraps.modules.auth import routes as auth_routes
from underwraps.modules.users import routes as users_routes
from underwraps.modules.groups import routes as groups_routes
from underwraps.modules.roles import routes as roles_routes
from underwraps.modules.invitations import routes as invitations_routes
from underwraps.modules.wishlists import routes as wishlists_routes
from underwraps.modules.items import routes as items_routes
from underwraps.modules.claims import routes as claims_routes
from underwraps.modules.metadata import routes as metadata_routes
from underwraps.modules.reports import routes as reports_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(OriginAllowListMiddleware, allow_origins=settings.get_cors_origins_list())

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(users_routes.router, prefix="/api/v1")
app.include_router(groups_routes.router, prefix="/api/v1")
app.include_router(roles_routes.router, prefix="/api/v1")
app.include_router(invitations_routes.router, prefix="/api/v1")
app.include_router(wishlists_routes.router, prefix="/api/v1")
app.include_router(items_routes.router, prefix="/api/v1")
app.include_router(claims_routes.router, prefix="/api/v1")
app.include_router(metadata_routes.router, prefix="/api/v1")
app.include_router(reports_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup (%s)", settings.environment)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to underwraps-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with DB checks if needed."""
    return {"status": "ready"}
