"""
Google Calendar Tool

Identity-scoped tool managing the caller's Google Calendar events through the
Calendar v3 REST API. The caller's ``userId`` is injected by the executor;
the access token for it is resolved through the configured TokenProvider.

Operations:
    list:   Events of a calendar, expanded and ordered by start time
    read:   A single event by id
    create: Insert a new event
    update: Merge changes into an existing event and write it back
    delete: Remove an event

Pattern: Ports and Adapters - token resolution and HTTP client come from the
ToolContext, so tests substitute both
"""

import logging
from typing import Any

import httpx

from assistant_gateway.core.exceptions import ToolExecutionError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition
from assistant_gateway.tools.builtin._google import (
    api_error,
    open_client,
    path_segment,
    resolve_access_token,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "googleCalendar"
EVENTS_PATH = "/calendar/v3/calendars/{calendar_id}/events"
DEFAULT_CALENDAR_ID = "primary"
DEFAULT_MAX_RESULTS = 10

_TIME_SCHEMA = {
    "type": "object",
    "properties": {
        "dateTime": {
            "type": "string",
            "description": "Date and time in ISO 8601 format (e.g., '2024-01-15T10:00:00')",
        },
        "timeZone": {
            "type": "string",
            "description": "Timezone (e.g., 'America/New_York', 'Europe/London')",
        },
    },
    "required": ["dateTime", "timeZone"],
}

CALENDAR_DEFINITION = ToolDefinition(
    name=TOOL_NAME,
    description="Manage Google Calendar events with full CRUD operations. Use this to "
    "create, read, update, delete, or list calendar events.",
    instructions="""Use this tool to manage Google Calendar events. Always:
1. Provide clear event details including title, start time, and end time
2. Handle timezone information properly
3. Include location and description when provided
4. Use ISO 8601 format for dates and times""",
    parameters={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": ["create", "read", "update", "delete", "list"],
                "description": "The operation to perform",
            },
            "userId": {
                "type": "string",
                "description": "The user ID whose calendar is used",
            },
            "eventId": {
                "type": "string",
                "description": "Event ID (required for read, update, and delete)",
            },
            "event": {
                "type": "object",
                "description": "Event data (required for create and update)",
                "properties": {
                    "summary": {"type": "string", "description": "Event title"},
                    "description": {"type": "string"},
                    "location": {"type": "string"},
                    "start": _TIME_SCHEMA,
                    "end": _TIME_SCHEMA,
                    "attendees": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "email": {"type": "string"},
                                "displayName": {"type": "string"},
                            },
                        },
                    },
                },
            },
            "calendarId": {
                "type": "string",
                "description": "Calendar ID (defaults to 'primary')",
                "default": DEFAULT_CALENDAR_ID,
            },
            "maxResults": {
                "type": "number",
                "description": "Maximum number of events to return for list (default: 10)",
                "default": DEFAULT_MAX_RESULTS,
            },
            "timeMin": {
                "type": "string",
                "description": "Lower bound for event start times (ISO 8601)",
            },
            "timeMax": {
                "type": "string",
                "description": "Upper bound for event start times (ISO 8601)",
            },
        },
        "required": ["operation"],
    },
    requires_identity=True,
)


class GoogleCalendarTool:
    """
    Async handler for the googleCalendar tool.

    Each call resolves a fresh access token and opens one HTTP client for the
    duration of the operation.
    """

    async def __call__(self, args: dict[str, Any]) -> dict[str, Any]:
        operation = args.get("operation")
        handlers = {
            "list": self._list_events,
            "read": self._get_event,
            "create": self._create_event,
            "update": self._update_event,
            "delete": self._delete_event,
        }
        handler = handlers.get(operation)  # type: ignore[arg-type]
        if handler is None:
            raise ToolExecutionError(f"Unsupported operation: {operation}", tool_name=TOOL_NAME)

        token = await resolve_access_token(args.get("userId"), TOOL_NAME)
        calendar_id = str(args.get("calendarId") or DEFAULT_CALENDAR_ID)
        path = EVENTS_PATH.format(
            calendar_id=path_segment(calendar_id, "calendar ID", TOOL_NAME)
        )

        async with open_client(token) as client:
            try:
                return await handler(client, path, args)
            except httpx.HTTPError as e:
                raise api_error(e, "calendar operation", TOOL_NAME) from e

    # =========================================================================
    # Operations
    # =========================================================================

    async def _list_events(
        self, client: httpx.AsyncClient, path: str, args: dict[str, Any]
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "maxResults": int(args.get("maxResults") or DEFAULT_MAX_RESULTS),
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        if args.get("timeMin"):
            params["timeMin"] = args["timeMin"]
        if args.get("timeMax"):
            params["timeMax"] = args["timeMax"]

        response = await client.get(path, params=params)
        response.raise_for_status()
        items = response.json().get("items") or []
        return {
            "success": True,
            "operation": "list",
            "events": items,
            "total": len(items),
            "message": "Events retrieved successfully",
        }

    async def _get_event(
        self, client: httpx.AsyncClient, path: str, args: dict[str, Any]
    ) -> dict[str, Any]:
        event_id = _require_event_id(args, "read")
        response = await client.get(_event_path(path, event_id))
        response.raise_for_status()
        return {
            "success": True,
            "operation": "read",
            "event": response.json(),
            "message": "Event retrieved successfully",
        }

    async def _create_event(
        self, client: httpx.AsyncClient, path: str, args: dict[str, Any]
    ) -> dict[str, Any]:
        data = args.get("event") or {}
        missing = [key for key in ("summary", "start", "end") if not data.get(key)]
        if missing:
            raise ToolExecutionError(
                f"Event is missing required fields: {', '.join(missing)}",
                tool_name=TOOL_NAME,
            )

        body = {
            "summary": data["summary"],
            "description": data.get("description") or "",
            "location": data.get("location") or "",
            "start": data["start"],
            "end": data["end"],
            "attendees": data.get("attendees") or [],
        }
        response = await client.post(path, json=body)
        response.raise_for_status()
        logger.info("Calendar event created")
        return {
            "success": True,
            "operation": "create",
            "event": response.json(),
            "message": "Event created successfully",
        }

    async def _update_event(
        self, client: httpx.AsyncClient, path: str, args: dict[str, Any]
    ) -> dict[str, Any]:
        event_id = _require_event_id(args, "update")
        changes = args.get("event") or {}

        current = await client.get(_event_path(path, event_id))
        current.raise_for_status()
        existing = current.json()

        # Keys absent from the change set keep their stored values
        merged = {**existing}
        for key in ("summary", "start", "end", "attendees"):
            if changes.get(key):
                merged[key] = changes[key]
        for key in ("description", "location"):
            if key in changes:
                merged[key] = changes[key]

        response = await client.put(_event_path(path, event_id), json=merged)
        response.raise_for_status()
        return {
            "success": True,
            "operation": "update",
            "event": response.json(),
            "message": "Event updated successfully",
        }

    async def _delete_event(
        self, client: httpx.AsyncClient, path: str, args: dict[str, Any]
    ) -> dict[str, Any]:
        event_id = _require_event_id(args, "delete")
        response = await client.delete(_event_path(path, event_id))
        response.raise_for_status()
        return {
            "success": True,
            "operation": "delete",
            "eventId": event_id,
            "message": "Event deleted successfully",
        }


def _require_event_id(args: dict[str, Any], operation: str) -> str:
    event_id = args.get("eventId")
    if not event_id:
        raise ToolExecutionError(
            f"Event ID is required for {operation} operation", tool_name=TOOL_NAME
        )
    return str(event_id)


def _event_path(path: str, event_id: str) -> str:
    return f"{path}/{path_segment(event_id, 'event ID', TOOL_NAME)}"


TOOL = RegisteredTool(definition=CALENDAR_DEFINITION, handler=GoogleCalendarTool())
