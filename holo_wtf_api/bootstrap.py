"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from holo_wtf_api.adapters import CalendarFeedAdapter
from holo_wtf_api.api import API_HEALTH_PATHS, create_api_application
from holo_wtf_api.calendar import CalendarFeedHealthService, ConcertCalendarService
from holo_wtf_api.config import AppSettings
from holo_wtf_api.handlers import ConcertListHandler, ConcertPlatformHandler
from holo_wtf_api.routing import RequestDispatcher, RouteTable
from holo_wtf_api.service import HealthState, ReadinessMonitor, RunningService, service_start


@dataclass(frozen=True)
class ServiceAssembly:
    """Fully wired service components, built before any socket is bound.

    Attributes:
        settings: Validated runtime settings.
        health_state: Process health cell.
        dispatcher: Dispatcher over the frozen route table.
        application: ASGI application.
        readiness_monitor: Optional dependency monitor.
    """

    settings: AppSettings
    health_state: HealthState
    dispatcher: RequestDispatcher
    application: FastAPI
    readiness_monitor: ReadinessMonitor | None


def bootstrap_create_route_table(calendar_service: ConcertCalendarService) -> RouteTable:
    """Register every business route.

    Args:
        calendar_service: Shared calendar service handed to concert handlers.

    Returns:
        RouteTable: Populated, still writable route table.

    Raises:
        RouteRegistrationError: Raised when a route is duplicated, ambiguous, or malformed.
    """

    route_table = RouteTable(reserved_paths=API_HEALTH_PATHS)
    route_table.table_register("GET", "/", ConcertListHandler(calendar_service=calendar_service))
    route_table.table_register("GET", "/platforms/{platform}", ConcertPlatformHandler(calendar_service=calendar_service))
    return route_table


def bootstrap_assemble_service(settings: AppSettings) -> ServiceAssembly:
    """Assemble the runtime components after validating startup configuration.

    Args:
        settings: Validated runtime settings.

    Returns:
        ServiceAssembly: Components ready to be served.

    Raises:
        RouteRegistrationError: Raised when the route table cannot be built.
        ValueError: Raised when adapter configuration is invalid.
    """

    feed_adapter = CalendarFeedAdapter(
        feed_url=settings.calendar_feed_url,
        request_timeout_seconds=settings.calendar_request_timeout_seconds,
    )
    calendar_service = ConcertCalendarService(
        feed_adapter=feed_adapter,
        calendar_zone=settings.settings_calendar_zone(),
    )
    route_table = bootstrap_create_route_table(calendar_service=calendar_service)
    dispatcher = RequestDispatcher(
        route_table=route_table,
        request_timeout_seconds=settings.request_timeout_seconds,
        worker_count=settings.handler_worker_count,
    )
    health_state = HealthState()
    readiness_monitor = None
    if settings.readiness_check_interval_seconds > 0:
        readiness_monitor = ReadinessMonitor(
            health_state=health_state,
            dependencies=[CalendarFeedHealthService(feed_adapter=feed_adapter)],
            interval_seconds=settings.readiness_check_interval_seconds,
        )
    application = create_api_application(
        settings=settings,
        health_state=health_state,
        dispatcher=dispatcher,
        ready_on_startup=readiness_monitor is None,
    )
    return ServiceAssembly(
        settings=settings,
        health_state=health_state,
        dispatcher=dispatcher,
        application=application,
        readiness_monitor=readiness_monitor,
    )


def bootstrap_start_service(settings: AppSettings) -> RunningService:
    """Assemble components, bind the socket, and start serving.

    Args:
        settings: Validated runtime settings.

    Returns:
        RunningService: Handle to the serving process.

    Raises:
        RouteRegistrationError: Raised when the route table cannot be built.
        ServiceStartupError: Raised when the socket cannot be bound or the server fails to start.
    """

    assembly = bootstrap_assemble_service(settings)
    return service_start(
        settings=assembly.settings,
        application=assembly.application,
        health_state=assembly.health_state,
        dispatcher=assembly.dispatcher,
        readiness_monitor=assembly.readiness_monitor,
    )
