#!/usr/bin/env python3
"""
Rosterdesk - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional, Union

import redis.asyncio as redis
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rosterdesk import __version__
from rosterdesk.config.provider import ConfigProvider, EnvConfigProvider
from rosterdesk.logging_config import configure_logging, get_logging_config
from rosterdesk.modules.api import (
    AttendanceRequest,
    BulkAttendanceEntry,
    BulkAttendanceRequest,
    LoginRequest,
    RegisterRequest,
    StaffRequest,
    UpdateAttendanceRequest,
    UpdateUserRequest,
)
from rosterdesk.modules.attendance import AttendanceModule, StaffNotFoundError
from rosterdesk.modules.auth import (
    ConfigurationError,
    InvalidCredentialsError,
    LoginService,
    MissingLoginFieldsError,
)
from rosterdesk.modules.auth.factory import AuthFactory
from rosterdesk.modules.middleware import (
    create_access_gate_middleware,
    current_principal,
    format_error,
)
from rosterdesk.modules.staff import StaffModule
from rosterdesk.modules.storage import DuplicateKeyError, RecordNotFoundError, StorageModule
from rosterdesk.modules.users import UNIQUE_FIELDS, Principal, UserModule

logger = logging.getLogger("rosterdesk.main")


def ok(data: Any, **extra) -> dict:
    """Success envelope."""
    return {"success": True, **extra, "data": data}


# Dependency injection helpers


def _module(request: Request, name: str):
    module = getattr(request.app.state, name, None)
    if module is None:
        raise StarletteHTTPException(503, "Service not initialized")
    return module


def get_users(request: Request) -> UserModule:
    return _module(request, "users")


def get_staff(request: Request) -> StaffModule:
    return _module(request, "staff")


def get_attendance(request: Request) -> AttendanceModule:
    return _module(request, "attendance")


def get_login(request: Request) -> LoginService:
    return _module(request, "auth").login


# Auth Endpoints

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/login")
async def login(
    payload: Optional[LoginRequest] = None,
    login_service: LoginService = Depends(get_login),
):
    """
    Exchange username and password for a token.

    Returns:
        200: Token and user profile
        400: Username or password missing
        401: Invalid credentials
    """
    payload = payload or LoginRequest()
    result = await login_service.login(payload.user_name, payload.password)
    return ok(result.to_dict())


@auth_router.post("/register", status_code=201)
async def register(
    payload: RegisterRequest,
    login_service: LoginService = Depends(get_login),
):
    """
    Create an account and return its first token.

    Returns:
        201: Token and user profile
        400: Missing field or username/email already taken
    """
    result = await login_service.register(
        name=payload.name,
        user_name=payload.user_name,
        email=payload.email,
        password=payload.password,
    )
    return ok(result.to_dict())


@auth_router.get("/me")
async def me(principal: Principal = Depends(current_principal)):
    """Profile of the authenticated user."""
    return ok(principal.to_dict())


# User Endpoints

users_router = APIRouter(prefix="/api/users", tags=["users"])


@users_router.get("")
async def list_users(users: UserModule = Depends(get_users)):
    principals = await users.list_principals()
    return ok([p.to_dict() for p in principals], count=len(principals))


@users_router.post("", status_code=201)
async def create_user(payload: RegisterRequest, users: UserModule = Depends(get_users)):
    principal = await users.create_user(
        name=payload.name,
        user_name=payload.user_name,
        email=payload.email,
        password=payload.password,
    )
    return ok(principal.to_dict())


@users_router.get("/{user_id}")
async def get_user(user_id: str, users: UserModule = Depends(get_users)):
    principal = await users.get_principal(user_id)
    if principal is None:
        raise RecordNotFoundError("users", user_id)
    return ok(principal.to_dict())


@users_router.put("/{user_id}")
async def update_user(
    user_id: str, payload: UpdateUserRequest, users: UserModule = Depends(get_users)
):
    principal = await users.update_user(
        user_id,
        name=payload.name,
        user_name=payload.user_name,
        email=payload.email,
        password=payload.password,
    )
    return ok(principal.to_dict())


@users_router.delete("/{user_id}")
async def delete_user(user_id: str, users: UserModule = Depends(get_users)):
    await users.delete_user(user_id)
    return ok({})


# Staff Endpoints

staff_router = APIRouter(prefix="/api/staff", tags=["staff"])


@staff_router.get("")
async def list_staff(
    role: Optional[str] = None,
    shift: Optional[str] = None,
    staff: StaffModule = Depends(get_staff),
):
    members = await staff.list_staff(role=role, shift=shift)
    return ok([m.to_dict() for m in members], count=len(members))


@staff_router.post("", status_code=201)
async def create_staff(payload: StaffRequest, staff: StaffModule = Depends(get_staff)):
    member = await staff.create_staff(
        name=payload.name,
        staff_id=payload.staff_id,
        role=payload.role,
        shift=payload.shift,
    )
    return ok(member.to_dict())


@staff_router.get("/{record_id}")
async def get_staff_member(record_id: str, staff: StaffModule = Depends(get_staff)):
    member = await staff.get_staff(record_id)
    if member is None:
        raise RecordNotFoundError("staff", record_id)
    return ok(member.to_dict())


@staff_router.put("/{record_id}")
async def update_staff(
    record_id: str, payload: StaffRequest, staff: StaffModule = Depends(get_staff)
):
    member = await staff.update_staff(record_id, payload.model_dump(by_alias=True, exclude_none=True))
    return ok(member.to_dict())


@staff_router.delete("/{record_id}")
async def delete_staff(record_id: str, staff: StaffModule = Depends(get_staff)):
    await staff.delete_staff(record_id)
    return ok({})


# Attendance Endpoints

attendance_router = APIRouter(prefix="/api/attendance", tags=["attendance"])


def _attendance_entry(payload: Union[AttendanceRequest, BulkAttendanceEntry]) -> dict:
    """Plain entry for the attendance module, which validates date and status."""
    return {
        "staff": payload.staff or payload.staff_id,
        "date": payload.date,
        "status": payload.status,
        "shift": payload.shift,
        "remarks": payload.remarks,
    }


@attendance_router.get("")
async def list_attendance(
    date: Optional[str] = None,
    shift: Optional[str] = None,
    staff_id: Optional[str] = Query(None, alias="staffId"),
    status: Optional[str] = None,
    attendance: AttendanceModule = Depends(get_attendance),
):
    """
    Attendance records with filters, grouped by shift.

    Returns:
        200: Records and grouping
        400: Invalid date or status filter
    """
    result = await attendance.list(day=date, shift=shift, staff_id=staff_id, status=status)
    records = [r.to_dict() for r in result["records"]]
    grouped = {
        shift_name: [r.to_dict() for r in items]
        for shift_name, items in result["grouped"].items()
    }
    return ok(records, count=len(records), grouped=grouped)


@attendance_router.post("")
async def mark_attendance(
    payload: AttendanceRequest,
    response: Response,
    principal: Principal = Depends(current_principal),
    attendance: AttendanceModule = Depends(get_attendance),
):
    """
    Mark attendance for a staff member.

    Returns:
        201: Attendance marked
        200: Existing record for that day updated
        404: Staff not found
    """
    entry = _attendance_entry(payload)
    record, created = await attendance.mark(
        entry["staff"],
        entry["date"],
        entry["status"],
        remarks=entry["remarks"],
        shift=entry["shift"],
        marked_by=principal.id,
    )
    response.status_code = 201 if created else 200
    return ok(record.to_dict())


@attendance_router.post("/bulk", status_code=201)
async def mark_bulk_attendance(
    payload: BulkAttendanceRequest,
    principal: Principal = Depends(current_principal),
    attendance: AttendanceModule = Depends(get_attendance),
):
    result = await attendance.mark_bulk(
        [_attendance_entry(entry) for entry in payload.attendance_records],
        marked_by=principal.id,
    )
    return ok(
        [r.to_dict() for r in result["marked"]],
        count=len(result["marked"]),
        errors=result["errors"],
    )


@attendance_router.get("/staff/{staff_ref}")
async def staff_attendance_history(
    staff_ref: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    attendance: AttendanceModule = Depends(get_attendance),
):
    result = await attendance.history(staff_ref, start=start_date, end=end_date)
    return ok({
        "staff": result["staff"].to_dict(),
        "records": [r.to_dict() for r in result["records"]],
        "stats": result["stats"],
    })


@attendance_router.put("/{record_id}")
async def update_attendance(
    record_id: str,
    payload: UpdateAttendanceRequest,
    attendance: AttendanceModule = Depends(get_attendance),
):
    record = await attendance.update(
        record_id,
        status=payload.status.value if payload.status else None,
        remarks=payload.remarks,
    )
    return ok(record.to_dict())


@attendance_router.delete("/{record_id}")
async def delete_attendance(
    record_id: str, attendance: AttendanceModule = Depends(get_attendance)
):
    await attendance.delete(record_id)
    return ok({})


# Health/Monitoring Endpoints

health_router = APIRouter(tags=["health"])


@health_router.get("/")
async def root():
    return {
        "message": "Welcome to the Staff Scheduler & Attendance Tracker API",
        "documentation": "/docs",
    }


@health_router.get("/healthz")
async def healthz():
    """Minimal unauthenticated liveness check."""
    return {"status": "ok"}


@health_router.get("/api/health")
async def health_check(request: Request):
    """
    Health check including storage reachability.

    Returns:
        200: Service healthy
        503: Storage unreachable or modules not initialized
    """
    storage: Optional[StorageModule] = getattr(request.app.state, "storage", None)
    try:
        reachable = bool(storage) and await storage.ping()
    except redis.RedisError as e:
        logger.error(f"Health check failed: {e}")
        reachable = False

    if not reachable:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "message": "Storage unavailable"},
        )
    return {"status": "OK", "message": "Server is running", "version": __version__}


# Error handlers


def register_exception_handlers(app: FastAPI) -> None:
    """Map module errors to structured HTTP rejections."""

    @app.exception_handler(MissingLoginFieldsError)
    async def missing_login_fields_handler(request, exc):
        return JSONResponse(status_code=400, content=format_error(str(exc)))

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(request, exc):
        return JSONResponse(status_code=401, content=format_error(str(exc)))

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request, exc):
        logger.error(f"Configuration error: {exc}")
        return JSONResponse(status_code=500, content=format_error("Server misconfigured"))

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(request, exc):
        return JSONResponse(
            status_code=400, content=format_error(f"{exc.field} already exists")
        )

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request, exc):
        label = exc.collection.capitalize().rstrip("s")
        return JSONResponse(status_code=404, content=format_error(f"{label} not found"))

    @app.exception_handler(StaffNotFoundError)
    async def staff_not_found_handler(request, exc):
        return JSONResponse(status_code=404, content=format_error("Staff not found"))

    @app.exception_handler(ValueError)
    async def validation_error_handler(request, exc):
        logger.info(f"Validation error: {exc}")
        return JSONResponse(status_code=400, content=format_error(str(exc)))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content=format_error(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request, exc):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=format_error(message))

    @app.exception_handler(redis.ConnectionError)
    async def redis_error_handler(request, exc):
        logger.error(f"Redis connection error: {exc}")
        return JSONResponse(status_code=503, content=format_error("Database connection failed"))


def create_app(config_provider: Optional[ConfigProvider] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config_provider: Configuration source (defaults to environment variables)
    """
    provider: ConfigProvider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        auth_config = provider.get_auth_config()
        store_config = provider.get_store_config()
        configure_logging(provider.get_api_config().log_level)

        logger.info("Starting Rosterdesk API...")

        storage = StorageModule(store_config.backend, store_config.redis_url)
        await storage.connect()

        users = UserModule(
            storage.collection("users", unique=UNIQUE_FIELDS),
            AuthFactory.build_credentials(auth_config),
        )
        staff = StaffModule(storage.collection("staff", unique=("staffId",)))
        attendance = AttendanceModule(
            storage.collection("attendance", unique=AttendanceModule.UNIQUE_FIELDS), staff
        )

        try:
            auth = AuthFactory.build(auth_config, users)
        except ConfigurationError:
            logger.critical("Refusing to start: JWT_SECRET is not configured")
            await storage.disconnect()
            raise

        app.state.storage = storage
        app.state.users = users
        app.state.staff = staff
        app.state.attendance = attendance
        app.state.auth = auth
        app.state.gate = auth.gate
        logger.info(f"Rosterdesk API started (storage={store_config.backend})")

        yield

        logger.info("Shutting down Rosterdesk API...")
        await storage.disconnect()
        app.state.gate = None
        logger.info("Rosterdesk API shutdown complete")

    app = FastAPI(
        title="Rosterdesk API",
        description="Staff shift scheduling and attendance tracking",
        version=__version__,
        lifespan=lifespan,
    )

    gate_middleware = create_access_gate_middleware()

    @app.middleware("http")
    async def enforce_access_gate(request: Request, call_next):
        return await gate_middleware(request, call_next)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(staff_router)
    app.include_router(attendance_router)
    return app


app = create_app()


def run():
    """Run the API server with uvicorn."""
    api_config = EnvConfigProvider().get_api_config()
    # Use dict config for logging, not file path
    uvicorn.run(
        "rosterdesk.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    run()
