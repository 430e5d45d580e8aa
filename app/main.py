from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from app.utils.supabase_client_handlers import create_supabase_client, close_supabase_client
from app.configs.app_settings import settings
from app.services.booking_feed_services import BookingsState, SupabaseBookingSnapshotSource, bookings_subscription, get_dashboard_timezone
from app.routes.admin.admin_dashboard_routes import admin_dashboard_router
from app.routes.admin.admin_booking_routes import admin_booking_router
from app.routes.admin.admin_driver_routes import admin_driver_router
from app.routes.admin.admin_customer_routes import admin_customer_router
from app.routes.admin.admin_reward_routes import admin_reward_router
from app.routes.admin.admin_vehicle_routes import admin_vehicle_router
import logging

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # before yield = startup
    supabase_client = await create_supabase_client()
    logger.info("✅ Supabase async client initialized")

    # one bookings subscription for the whole process, released on shutdown even if serving fails
    app.state.bookings_state = BookingsState(tz=get_dashboard_timezone())
    async with bookings_subscription(SupabaseBookingSnapshotSource(supabase_client), app.state.bookings_state):
        logger.info("✅ Bookings subscription started")
        yield

    # after yield = shutdown
    logger.info("✅ Bookings subscription released")
    await close_supabase_client()
    logger.info("✅ Supabase client closed")


app = FastAPI(title="SaqerService Admin API", version="1.0.0", lifespan=lifespan)


# catches validation errors from request bodies, query and path params across the whole app
@app.exception_handler(RequestValidationError)
async def custom_request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic v2 puts the raw exception object under "ctx", which is not JSON serializable
    return [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_DOMAIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(admin_dashboard_router, prefix=settings.API_V1_STR)
app.include_router(admin_booking_router, prefix=settings.API_V1_STR)
app.include_router(admin_driver_router, prefix=settings.API_V1_STR)
app.include_router(admin_customer_router, prefix=settings.API_V1_STR)
app.include_router(admin_reward_router, prefix=settings.API_V1_STR)
app.include_router(admin_vehicle_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "Welcome to SaqerService Admin API"}
