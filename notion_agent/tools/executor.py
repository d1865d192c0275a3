"""
Tool executor for the Notion REST API.

Turns a tool name plus generated arguments into a single HTTP call and
wraps the outcome in a tagged ToolResult. API rejections and transport
errors become failed results (they feed the retry loop); an unknown tool
name raises, since callers are expected to validate names first.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from notion_agent.shared.contracts.tool_call import ToolResult
from notion_agent.shared.errors import UnknownToolError


logger = logging.getLogger(__name__)


NOTION_API_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"


class ToolExecutor(Protocol):
    """Anything that can invoke a named tool with arguments."""

    def execute(self, tool_name: str, args: Dict[str, Any]) -> ToolResult:
        ...


@dataclass(frozen=True)
class Route:
    """HTTP method and path template for one tool."""

    method: str
    path: str
    action: str

    @property
    def path_params(self) -> List[str]:
        return re.findall(r"{(\w+)}", self.path)


ROUTES: Dict[str, Route] = {
    # Pages
    "create_page": Route("POST", "/pages", "create page"),
    "get_page": Route("GET", "/pages/{page_id}", "get page"),
    "update_page": Route("PATCH", "/pages/{page_id}", "update page"),
    "get_page_property": Route(
        "GET", "/pages/{page_id}/properties/{property_id}", "get page property"
    ),
    # Databases
    "create_database": Route("POST", "/databases", "create database"),
    "get_database": Route("GET", "/databases/{database_id}", "get database"),
    "update_database": Route("PATCH", "/databases/{database_id}", "update database"),
    "query_database": Route("POST", "/databases/{database_id}/query", "query database"),
    # Blocks
    "get_block": Route("GET", "/blocks/{block_id}", "get block"),
    "update_block": Route("PATCH", "/blocks/{block_id}", "update block"),
    "delete_block": Route("DELETE", "/blocks/{block_id}", "delete block"),
    "list_block_children": Route(
        "GET", "/blocks/{block_id}/children", "list block children"
    ),
    "append_block_children": Route(
        "PATCH", "/blocks/{block_id}/children", "append block children"
    ),
    # Users
    "get_user": Route("GET", "/users/{user_id}", "get user"),
    "list_users": Route("GET", "/users", "list users"),
    "get_self": Route("GET", "/users/me", "get bot user"),
    # Comments
    "create_comment": Route("POST", "/comments", "create comment"),
    "list_comments": Route("GET", "/comments", "list comments"),
    "get_comment": Route("GET", "/comments/{comment_id}", "get comment"),
    # Search
    "search": Route("POST", "/search", "search"),
    # File uploads
    "create_file_upload": Route("POST", "/file_uploads", "create file upload"),
    "get_file_upload": Route("GET", "/file_uploads/{file_upload_id}", "get file upload"),
    "list_file_uploads": Route("GET", "/file_uploads", "list file uploads"),
}


def _error_message(response: httpx.Response) -> str:
    """Extract Notion's error message from a rejected response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or response.reason_phrase


class NotionToolExecutor:
    """
    Executes Notion tools over HTTP.

    Path parameters are lifted out of the arguments; for GET and DELETE
    the remaining arguments become query parameters, otherwise they are
    sent as the JSON body.
    """

    def __init__(
        self,
        api_key: str,
        notion_version: str = DEFAULT_NOTION_VERSION,
        base_url: str = NOTION_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
        )

    def __enter__(self) -> "NotionToolExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def execute(self, tool_name: str, args: Dict[str, Any]) -> ToolResult:
        """
        Invoke a tool.

        Args:
            tool_name: Name of a routed tool
            args: Generated arguments

        Returns:
            ToolResult with the API response, or a failure message

        Raises:
            UnknownToolError: If no route exists for tool_name
        """
        route = ROUTES.get(tool_name)
        if route is None:
            raise UnknownToolError(tool_name)

        params = dict(args or {})
        try:
            path = route.path.format(**{p: params.pop(p) for p in route.path_params})
        except KeyError as e:
            return ToolResult.failure(
                f"Failed to {route.action}: missing required argument {e.args[0]}"
            )

        if route.method in ("GET", "DELETE"):
            request_kwargs = {"params": params} if params else {}
        else:
            request_kwargs = {"json": params}

        logger.debug(f"[tool={tool_name}] {route.method} {path}")
        try:
            response = self._client.request(route.method, path, **request_kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"[tool={tool_name}] Transport error: {e}")
            return ToolResult.failure(f"Failed to {route.action}: {e}")

        if response.is_error:
            message = _error_message(response)
            logger.info(
                f"[tool={tool_name}] Rejected | status={response.status_code}, "
                f"message={message[:200]}"
            )
            return ToolResult.failure(f"Failed to {route.action}: {message}")

        try:
            payload = response.json()
        except ValueError:
            logger.info(f"[tool={tool_name}] Non-JSON success body | status={response.status_code}")
            payload = response.text
        return ToolResult.success(payload)
