"""
Google Sheets Tool

Identity-scoped tool for the caller's spreadsheets. Cell data goes through
the Sheets v4 REST API; listing spreadsheets goes through Drive v3, which is
the only API that enumerates a user's files.

Operations:
    create: New spreadsheet, optionally seeded with rows
    read:   Values of a range
    update: Overwrite a range
    append: Add rows after the last row of a range
    clear:  Clear the values of a range
    list:   The caller's spreadsheets
"""

import logging
from typing import Any, Optional

import httpx

from assistant_gateway.core.exceptions import ToolExecutionError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition
from assistant_gateway.tools.builtin._google import (
    api_error,
    open_client,
    path_segment,
    resolve_access_token,
)
from assistant_gateway.tools.context import get_tool_context

logger = logging.getLogger(__name__)

TOOL_NAME = "googleSheets"
SPREADSHEETS_PATH = "/v4/spreadsheets"
DRIVE_FILES_PATH = "/drive/v3/files"
SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_VALUE_INPUT_OPTION = "USER_ENTERED"
LIST_PAGE_SIZE = 20

SHEETS_DEFINITION = ToolDefinition(
    name=TOOL_NAME,
    description="Manage Google Sheets. Use this to create spreadsheets and to read, "
    "update, append, clear, and list spreadsheet data.",
    instructions="""Use this tool to manage Google Sheets. Always:
1. Provide clear sheet details including title, data, and range
2. Handle cell ranges properly (e.g., 'A1:C10')
3. Include proper data formatting when provided
4. Validate range formats before operations

Google Sheets best practices:
- Use proper range notation (A1:C10, Sheet1!A1:B5)
- Include headers in data when appropriate""",
    parameters={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": ["create", "read", "update", "append", "clear", "list"],
                "description": "The operation to perform",
            },
            "userId": {
                "type": "string",
                "description": "The user ID whose spreadsheets are used",
            },
            "spreadsheetId": {
                "type": "string",
                "description": "Spreadsheet ID (required for read, update, append and clear)",
            },
            "range": {
                "type": "string",
                "description": "Cell range (e.g., 'A1:C10', 'Sheet1!A1:B5'); required for "
                "read, update and clear",
            },
            "data": {
                "type": "array",
                "description": "Rows to write (array of arrays); required for update and "
                "append, optional for create",
                "items": {"type": "array", "items": {"type": "string"}},
            },
            "title": {
                "type": "string",
                "description": "Spreadsheet title (required for create)",
            },
            "sheetName": {
                "type": "string",
                "description": "Sheet name within the spreadsheet (default: 'Sheet1')",
            },
            "valueInputOption": {
                "type": "string",
                "enum": ["RAW", "USER_ENTERED"],
                "description": "How to interpret input data (default: USER_ENTERED)",
                "default": DEFAULT_VALUE_INPUT_OPTION,
            },
        },
        "required": ["operation"],
    },
    requires_identity=True,
)


class GoogleSheetsTool:
    """Async handler for the googleSheets tool; one HTTP client per execution."""

    async def __call__(self, args: dict[str, Any]) -> dict[str, Any]:
        operation = args.get("operation")
        handlers = {
            "create": self._create_spreadsheet,
            "read": self._read_values,
            "update": self._update_values,
            "append": self._append_values,
            "clear": self._clear_values,
            "list": self._list_spreadsheets,
        }
        handler = handlers.get(operation)  # type: ignore[arg-type]
        if handler is None:
            raise ToolExecutionError(f"Unsupported operation: {operation}", tool_name=TOOL_NAME)

        token = await resolve_access_token(args.get("userId"), TOOL_NAME)
        # Listing goes through Drive on the general Google API host
        base_url: Optional[str] = None
        if operation != "list":
            base_url = get_tool_context().settings.google_sheets_base_url

        async with open_client(token, base_url) as client:
            try:
                return await handler(client, args)
            except httpx.HTTPError as e:
                raise api_error(e, "Sheets operation", TOOL_NAME) from e

    # =========================================================================
    # Operations
    # =========================================================================

    async def _create_spreadsheet(
        self, client: httpx.AsyncClient, args: dict[str, Any]
    ) -> dict[str, Any]:
        title = args.get("title")
        if not title:
            raise ToolExecutionError(
                "Title is required for create operation", tool_name=TOOL_NAME
            )
        sheet_name = args.get("sheetName") or DEFAULT_SHEET_NAME

        response = await client.post(
            SPREADSHEETS_PATH,
            json={
                "properties": {"title": title},
                "sheets": [{"properties": {"title": sheet_name}}],
            },
        )
        response.raise_for_status()
        created = response.json()
        spreadsheet_id = created["spreadsheetId"]

        rows = args.get("data") or []
        if rows:
            seeded = await client.put(
                _values_path(spreadsheet_id, f"{sheet_name}!A1"),
                params={"valueInputOption": _value_input_option(args)},
                json={"values": rows},
            )
            seeded.raise_for_status()

        logger.info("Spreadsheet created")
        return {
            "success": True,
            "operation": "create",
            "spreadsheetId": spreadsheet_id,
            "spreadsheetUrl": created.get("spreadsheetUrl"),
            "title": title,
            "rowsWritten": len(rows),
            "message": "Spreadsheet created successfully",
        }

    async def _read_values(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        spreadsheet_id = _require(args, "spreadsheetId", "Spreadsheet ID", "read")
        cell_range = _require(args, "range", "Range", "read")

        response = await client.get(_values_path(spreadsheet_id, cell_range))
        response.raise_for_status()
        body = response.json()
        values = body.get("values") or []
        return {
            "success": True,
            "operation": "read",
            "spreadsheetId": spreadsheet_id,
            "range": body.get("range", cell_range),
            "values": values,
            "rowCount": len(values),
            "message": "Data retrieved successfully",
        }

    async def _update_values(
        self, client: httpx.AsyncClient, args: dict[str, Any]
    ) -> dict[str, Any]:
        spreadsheet_id = _require(args, "spreadsheetId", "Spreadsheet ID", "update")
        cell_range = _require(args, "range", "Range", "update")
        rows = _require_rows(args, "update")

        response = await client.put(
            _values_path(spreadsheet_id, cell_range),
            params={"valueInputOption": _value_input_option(args)},
            json={"range": cell_range, "majorDimension": "ROWS", "values": rows},
        )
        response.raise_for_status()
        body = response.json()
        return {
            "success": True,
            "operation": "update",
            "spreadsheetId": spreadsheet_id,
            "updatedRange": body.get("updatedRange", cell_range),
            "updatedCells": body.get("updatedCells", 0),
            "message": "Data updated successfully",
        }

    async def _append_values(
        self, client: httpx.AsyncClient, args: dict[str, Any]
    ) -> dict[str, Any]:
        spreadsheet_id = _require(args, "spreadsheetId", "Spreadsheet ID", "append")
        cell_range = args.get("range") or args.get("sheetName") or DEFAULT_SHEET_NAME
        rows = _require_rows(args, "append")

        response = await client.post(
            f"{_values_path(spreadsheet_id, cell_range)}:append",
            params={
                "valueInputOption": _value_input_option(args),
                "insertDataOption": "INSERT_ROWS",
            },
            json={"majorDimension": "ROWS", "values": rows},
        )
        response.raise_for_status()
        updates = response.json().get("updates") or {}
        return {
            "success": True,
            "operation": "append",
            "spreadsheetId": spreadsheet_id,
            "updatedRange": updates.get("updatedRange"),
            "updatedRows": updates.get("updatedRows", len(rows)),
            "message": "Data appended successfully",
        }

    async def _clear_values(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        spreadsheet_id = _require(args, "spreadsheetId", "Spreadsheet ID", "clear")
        cell_range = _require(args, "range", "Range", "clear")

        response = await client.post(f"{_values_path(spreadsheet_id, cell_range)}:clear", json={})
        response.raise_for_status()
        return {
            "success": True,
            "operation": "clear",
            "spreadsheetId": spreadsheet_id,
            "clearedRange": response.json().get("clearedRange", cell_range),
            "message": "Data cleared successfully",
        }

    async def _list_spreadsheets(
        self, client: httpx.AsyncClient, args: dict[str, Any]
    ) -> dict[str, Any]:
        response = await client.get(
            DRIVE_FILES_PATH,
            params={
                "q": f"mimeType='{SPREADSHEET_MIME_TYPE}' and trashed=false",
                "fields": "files(id,name,modifiedTime,webViewLink)",
                "orderBy": "modifiedTime desc",
                "pageSize": LIST_PAGE_SIZE,
            },
        )
        response.raise_for_status()
        files = response.json().get("files") or []
        return {
            "success": True,
            "operation": "list",
            "spreadsheets": files,
            "total": len(files),
            "message": "Spreadsheets retrieved successfully",
        }


def _require(args: dict[str, Any], key: str, label: str, operation: str) -> str:
    value = args.get(key)
    if not value:
        raise ToolExecutionError(
            f"{label} is required for {operation} operation", tool_name=TOOL_NAME
        )
    return str(value)


def _require_rows(args: dict[str, Any], operation: str) -> list[list[Any]]:
    rows = args.get("data")
    if not rows or not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
        raise ToolExecutionError(
            f"Data (array of rows) is required for {operation} operation",
            tool_name=TOOL_NAME,
        )
    return rows


def _value_input_option(args: dict[str, Any]) -> str:
    option = args.get("valueInputOption") or DEFAULT_VALUE_INPUT_OPTION
    if option not in ("RAW", "USER_ENTERED"):
        raise ToolExecutionError(
            f"Unsupported valueInputOption: {option}", tool_name=TOOL_NAME
        )
    return option


def _values_path(spreadsheet_id: str, cell_range: str) -> str:
    spreadsheet = path_segment(spreadsheet_id, "spreadsheet ID", TOOL_NAME)
    return f"{SPREADSHEETS_PATH}/{spreadsheet}/values/{path_segment(cell_range, 'range', TOOL_NAME)}"


TOOL = RegisteredTool(definition=SHEETS_DEFINITION, handler=GoogleSheetsTool())
