"""
Gmail Tool

Identity-scoped tool for the caller's mailbox through the Gmail v1 REST API.
Uses the same Google credential as the calendar tool.

Operations:
    send:        Send a plain-text or HTML email
    list:        Messages matching a Gmail search query, with their headers
    read:        One message with its decoded text body
    delete:      Permanently delete a message
    mark_read:   Remove the UNREAD label
    mark_unread: Add the UNREAD label
"""

import base64
import logging
from email.message import EmailMessage
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

logger = logging.getLogger(__name__)

TOOL_NAME = "gmail"
MESSAGES_PATH = "/gmail/v1/users/me/messages"
DEFAULT_MAX_RESULTS = 10
METADATA_HEADERS = ["From", "To", "Subject", "Date"]

GMAIL_DEFINITION = ToolDefinition(
    name=TOOL_NAME,
    description="Manage Gmail emails. Use this to send, read, list, delete, and mark "
    "emails as read or unread.",
    instructions="""Use this tool to manage Gmail emails. Always:
1. Provide clear email details including recipient, subject, and body
2. Handle email IDs properly for read, delete, and mark operations
3. Use appropriate queries for listing emails
4. Provide helpful error messages for failed operations

Gmail best practices:
- Use clear, descriptive email subjects
- Include proper email formatting
- Validate email addresses before sending""",
    parameters={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": ["send", "list", "read", "delete", "mark_read", "mark_unread"],
                "description": "The operation to perform",
            },
            "userId": {
                "type": "string",
                "description": "The user ID whose mailbox is used",
            },
            "messageId": {
                "type": "string",
                "description": "Email message ID (required for read, delete, mark_read "
                "and mark_unread)",
            },
            "emailData": {
                "type": "object",
                "description": "Email data (required for send)",
                "properties": {
                    "to": {"type": "string", "description": "Recipient email address"},
                    "subject": {"type": "string", "description": "Email subject"},
                    "body": {"type": "string", "description": "Email body content"},
                    "isHtml": {
                        "type": "boolean",
                        "description": "Whether the body is HTML (default: false)",
                    },
                },
                "required": ["to", "subject", "body"],
            },
            "query": {
                "type": "string",
                "description": "Gmail search query for list (e.g., 'is:unread', "
                "'from:example@gmail.com', 'subject:meeting')",
            },
            "maxResults": {
                "type": "number",
                "description": "Maximum number of emails to return for list (default: 10)",
                "default": DEFAULT_MAX_RESULTS,
            },
        },
        "required": ["operation"],
    },
    requires_identity=True,
)


class GmailTool:
    """Async handler for the gmail tool; one HTTP client per execution."""

    async def __call__(self, args: dict[str, Any]) -> dict[str, Any]:
        operation = args.get("operation")
        handlers = {
            "send": self._send_email,
            "list": self._list_emails,
            "read": self._get_email,
            "delete": self._delete_email,
            "mark_read": self._mark_read,
            "mark_unread": self._mark_unread,
        }
        handler = handlers.get(operation)  # type: ignore[arg-type]
        if handler is None:
            raise ToolExecutionError(f"Unsupported operation: {operation}", tool_name=TOOL_NAME)

        token = await resolve_access_token(args.get("userId"), TOOL_NAME)
        async with open_client(token) as client:
            try:
                return await handler(client, args)
            except httpx.HTTPError as e:
                raise api_error(e, "Gmail operation", TOOL_NAME) from e

    # =========================================================================
    # Operations
    # =========================================================================

    async def _send_email(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        data = args.get("emailData") or {}
        missing = [key for key in ("to", "subject", "body") if not data.get(key)]
        if missing:
            raise ToolExecutionError(
                f"Email is missing required fields: {', '.join(missing)}",
                tool_name=TOOL_NAME,
            )

        raw = encode_message(
            data["to"], data["subject"], data["body"], is_html=bool(data.get("isHtml"))
        )
        response = await client.post(f"{MESSAGES_PATH}/send", json={"raw": raw})
        response.raise_for_status()
        logger.info("Email sent")
        return {
            "success": True,
            "operation": "send",
            "messageId": response.json().get("id"),
            "message": "Email sent successfully",
        }

    async def _list_emails(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        query = args.get("query") or ""
        response = await client.get(
            MESSAGES_PATH,
            params={"q": query, "maxResults": int(args.get("maxResults") or DEFAULT_MAX_RESULTS)},
        )
        response.raise_for_status()

        emails = []
        for summary in response.json().get("messages") or []:
            detail = await client.get(
                _message_path(summary["id"]),
                params={"format": "metadata", "metadataHeaders": METADATA_HEADERS},
            )
            detail.raise_for_status()
            message = detail.json()
            emails.append(
                {
                    "id": summary["id"],
                    **_summary_headers(message),
                    "snippet": message.get("snippet"),
                    "threadId": message.get("threadId"),
                }
            )

        return {
            "success": True,
            "operation": "list",
            "emails": emails,
            "total": len(emails),
            "query": query,
            "message": "Emails retrieved successfully",
        }

    async def _get_email(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        message_id = _require_message_id(args, "read")
        response = await client.get(_message_path(message_id), params={"format": "full"})
        response.raise_for_status()
        message = response.json()
        return {
            "success": True,
            "operation": "read",
            "email": {
                "id": message_id,
                **_summary_headers(message),
                "body": extract_text_body(message.get("payload") or {}),
                "snippet": message.get("snippet"),
                "threadId": message.get("threadId"),
            },
            "message": "Email retrieved successfully",
        }

    async def _delete_email(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        message_id = _require_message_id(args, "delete")
        response = await client.delete(_message_path(message_id))
        response.raise_for_status()
        return {
            "success": True,
            "operation": "delete",
            "messageId": message_id,
            "message": "Email deleted successfully",
        }

    async def _mark_read(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        return await self._modify_unread(client, args, "mark_read", {"removeLabelIds": ["UNREAD"]})

    async def _mark_unread(self, client: httpx.AsyncClient, args: dict[str, Any]) -> dict[str, Any]:
        return await self._modify_unread(client, args, "mark_unread", {"addLabelIds": ["UNREAD"]})

    async def _modify_unread(
        self,
        client: httpx.AsyncClient,
        args: dict[str, Any],
        operation: str,
        change: dict[str, list[str]],
    ) -> dict[str, Any]:
        message_id = _require_message_id(args, operation)
        response = await client.post(f"{_message_path(message_id)}/modify", json=change)
        response.raise_for_status()
        state = "read" if operation == "mark_read" else "unread"
        return {
            "success": True,
            "operation": operation,
            "messageId": message_id,
            "message": f"Email marked as {state}",
        }


# =============================================================================
# Message encoding
# =============================================================================


def encode_message(to: str, subject: str, body: str, is_html: bool = False) -> str:
    """Build an RFC 2822 message and encode it as unpadded base64url for ``raw``."""
    message = EmailMessage()
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body, subtype="html" if is_html else "plain")
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


def extract_text_body(payload: dict[str, Any]) -> str:
    """Decode the message body, preferring the top-level body over text/plain parts."""
    data = (payload.get("body") or {}).get("data")
    if not data:
        for part in payload.get("parts") or []:
            if part.get("mimeType") == "text/plain" and (part.get("body") or {}).get("data"):
                data = part["body"]["data"]
                break
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _summary_headers(message: dict[str, Any]) -> dict[str, str]:
    headers = (message.get("payload") or {}).get("headers") or []
    return {
        "subject": _header(headers, "Subject") or "No Subject",
        "from": _header(headers, "From") or "Unknown Sender",
        "to": _header(headers, "To") or "Unknown Recipient",
        "date": _header(headers, "Date") or "Unknown Date",
    }


def _header(headers: list[dict[str, str]], name: str) -> Optional[str]:
    for header in headers:
        if header.get("name") == name:
            return header.get("value")
    return None


def _require_message_id(args: dict[str, Any], operation: str) -> str:
    message_id = args.get("messageId")
    if not message_id:
        raise ToolExecutionError(
            f"Message ID is required for {operation} operation", tool_name=TOOL_NAME
        )
    return str(message_id)


def _message_path(message_id: str) -> str:
    return f"{MESSAGES_PATH}/{path_segment(message_id, 'message ID', TOOL_NAME)}"


TOOL = RegisteredTool(definition=GMAIL_DEFINITION, handler=GmailTool())
