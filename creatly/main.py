"""Creatly API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from creatly.catalog.repository import (
    CassandraCourseRepository,
    CassandraLessonRepository,
    CassandraModuleRepository,
    CassandraPackageRepository,
)
from creatly.catalog.resolver import CatalogResolver
from creatly.catalog.router import router as catalog_router
from creatly.config import get_settings
from creatly.core.context import get_request_id
from creatly.core.database import init_async_cassandra, shutdown_async_cassandra
from creatly.core.errors import DomainError, ErrorKind
from creatly.core.logging import configure_structlog, get_logger
from creatly.core.middleware import RequestContextMiddleware
from creatly.core.redis import init_redis, shutdown_redis
from creatly.email import (
    EmailService,
    EmailVerificationNotifier,
    LoggingVerificationNotifier,
    VerificationNotifier,
)
from creatly.entitlements.service import EntitlementChecker, LessonService
from creatly.health import router as health_router
from creatly.offers.repository import CassandraOfferRepository
from creatly.offers.router import admin_router as offers_admin_router
from creatly.offers.service import OfferService
from creatly.orders.callbacks import PaymentCallbackProcessor
from creatly.orders.repository import CassandraTransactionRepository
from creatly.orders.router import payments_router
from creatly.orders.router import router as orders_router
from creatly.orders.service import OrderService
from creatly.promocodes.repository import CassandraPromocodeRepository
from creatly.promocodes.router import admin_router as promocodes_admin_router
from creatly.promocodes.router import router as promocodes_router
from creatly.promocodes.service import PromocodeService
from creatly.promocodes.validator import PromoValidator
from creatly.students.repository import CassandraStudentRepository
from creatly.students.router import router as students_router
from creatly.students.service import StudentService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    offer_service: OfferService | None = None
    promocode_service: PromocodeService | None = None
    order_service: OrderService | None = None
    callback_processor: PaymentCallbackProcessor | None = None
    lesson_service: LessonService | None = None
    student_service: StudentService | None = None


app_state = AppState()


def get_offer_service() -> OfferService:
    if app_state.offer_service is None:
        msg = "OfferService not initialized"
        raise RuntimeError(msg)
    return app_state.offer_service


def get_promocode_service() -> PromocodeService:
    if app_state.promocode_service is None:
        msg = "PromocodeService not initialized"
        raise RuntimeError(msg)
    return app_state.promocode_service


def get_order_service() -> OrderService:
    if app_state.order_service is None:
        msg = "OrderService not initialized"
        raise RuntimeError(msg)
    return app_state.order_service


def get_callback_processor() -> PaymentCallbackProcessor:
    if app_state.callback_processor is None:
        msg = "PaymentCallbackProcessor not initialized"
        raise RuntimeError(msg)
    return app_state.callback_processor


def get_lesson_service() -> LessonService:
    if app_state.lesson_service is None:
        msg = "LessonService not initialized"
        raise RuntimeError(msg)
    return app_state.lesson_service


def get_student_service() -> StudentService:
    if app_state.student_service is None:
        msg = "StudentService not initialized"
        raise RuntimeError(msg)
    return app_state.student_service


def build_notifier() -> VerificationNotifier:
    """Gmail delivery when configured, otherwise codes go to the log."""
    settings = get_settings()
    if not settings.email_configured:
        logger.info("verification_notifier_logging_only")
        return LoggingVerificationNotifier()

    email_service = EmailService(
        credentials_path=settings.email_credentials_path,
        sender_address=settings.email_sender_address,
        sender_name=settings.email_sender_name,
    )
    logger.info("email_service_initialized", sender=settings.email_sender_address)
    return EmailVerificationNotifier(email_service)


def init_services(session: Any, redis_client: Any = None) -> None:
    """Wire repositories and services over one Cassandra session."""
    settings = get_settings()
    keyspace = settings.cassandra_keyspace

    courses = CassandraCourseRepository(session, keyspace)
    packages = CassandraPackageRepository(session, keyspace)
    modules = CassandraModuleRepository(session, keyspace)
    lessons = CassandraLessonRepository(session, keyspace)
    offers = CassandraOfferRepository(session, keyspace)
    promocodes = CassandraPromocodeRepository(session, keyspace)
    transactions = CassandraTransactionRepository(session, keyspace)
    students = CassandraStudentRepository(session, keyspace)

    resolver = CatalogResolver(
        offers=offers, modules=modules, packages=packages, courses=courses
    )
    app_state.offer_service = OfferService(offers, resolver)
    app_state.promocode_service = PromocodeService(promocodes)
    app_state.order_service = OrderService(
        offers=offers,
        transactions=transactions,
        promo_validator=PromoValidator(promocodes),
        reference_prefix=settings.order_reference_prefix,
    )
    app_state.callback_processor = PaymentCallbackProcessor(transactions)

    checker = EntitlementChecker(
        modules=modules,
        transactions=transactions,
        offers=offers,
        redis=redis_client,
        cache_ttl=settings.entitlement_cache_ttl_seconds,
    )
    app_state.lesson_service = LessonService(checker, lessons)
    app_state.student_service = StudentService(
        repo=students,
        notifier=build_notifier(),
        code_length=settings.verification_code_length,
        token_ttl_minutes=settings.auth_access_token_expire_minutes,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Redis (non-critical - app works without it)
    redis_client = None
    try:
        redis_client = await init_redis()
        logger.info("redis_initialized")
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - entitlement cache disabled",
        )

    try:
        app_state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        init_services(app_state.cassandra_session, redis_client)
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Creatly - online course storefront API",
        debug=False,  # Never expose stack traces in responses
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        default_school_id=settings.default_school_id,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    def _error_response(
        request: Request, status_code: int, message: str, **extra: Any
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "message": message,
                "status_code": status_code,
                "request_id": _get_request_id_safe(request),
                **extra,
            },
        )

    # Global exception handlers (security: never expose stack traces)
    @app.exception_handler(DomainError)
    async def domain_error_handler(
        request: Request, exc: DomainError
    ) -> ORJSONResponse:
        """Domain errors that no router mapped explicitly: status by kind."""
        status_code = KIND_STATUS[exc.kind]
        logger.warning(
            "domain_error",
            error_code=exc.code.value,
            status_code=status_code,
            path=request.url.path,
        )
        return _error_response(request, status_code, exc.message, code=exc.code.value)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": message,
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            details=[
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all for driver errors, timeouts and bugs.

        Details go to the log only.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(students_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    app.include_router(catalog_router)
    app.include_router(promocodes_router)
    app.include_router(offers_admin_router)
    app.include_router(promocodes_admin_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "Creatly API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


# Configure router dependencies before creating app
from creatly.entitlements.dependencies import set_lesson_service_getter  # noqa: E402
from creatly.offers.dependencies import set_offer_service_getter  # noqa: E402
from creatly.orders.dependencies import (  # noqa: E402
    set_callback_processor_getter,
    set_order_service_getter,
)
from creatly.promocodes.dependencies import set_promocode_service_getter  # noqa: E402
from creatly.students.dependencies import set_student_service_getter  # noqa: E402


set_offer_service_getter(get_offer_service)
set_promocode_service_getter(get_promocode_service)
set_order_service_getter(get_order_service)
set_callback_processor_getter(get_callback_processor)
set_lesson_service_getter(get_lesson_service)
set_student_service_getter(get_student_service)


app = create_app()
