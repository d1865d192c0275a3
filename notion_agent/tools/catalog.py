"""
Notion tool catalog.

Argument shapes (JSON schema) and descriptions for every Notion operation
the planner may put in a plan. The schemas are handed to the LLM when it
generates arguments; the Notion API itself does the real validation.
"""

from typing import Any, Dict, List


def _object(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


def _id(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


_PAGINATION = {
    "start_cursor": {"type": "string", "description": "Cursor for pagination"},
    "page_size": {
        "type": "number",
        "description": "Number of results to return",
        "minimum": 1,
        "maximum": 100,
    },
}

_RICH_TEXT = {
    "type": "array",
    "description": "Rich text objects, e.g. [{'text': {'content': 'Hello'}}]",
    "items": {"type": "object"},
}

_PARENT = {
    "type": "object",
    "description": "Parent page or database, e.g. {'page_id': '...'} or {'database_id': '...'}",
    "properties": {
        "page_id": {"type": "string"},
        "database_id": {"type": "string"},
        "type": {"type": "string", "enum": ["page_id", "database_id"]},
    },
}

_ICON = {
    "type": "object",
    "description": "Icon (emoji or external file)",
    "properties": {
        "type": {"type": "string", "enum": ["emoji", "external", "file"]},
        "emoji": {"type": "string"},
        "external": {"type": "object", "properties": {"url": {"type": "string"}}},
    },
}

_COVER = {
    "type": "object",
    "description": "Cover image (external file)",
    "properties": {
        "type": {"type": "string", "enum": ["external", "file"]},
        "external": {"type": "object", "properties": {"url": {"type": "string"}}},
    },
}

_BLOCKS = {
    "type": "array",
    "description": (
        "Block objects, e.g. {'object': 'block', 'type': 'paragraph', "
        "'paragraph': {'rich_text': [...]}}"
    ),
    "items": {"type": "object"},
}


# =============================================================================
# Pages
# =============================================================================

CREATE_PAGE = {
    "name": "create_page",
    "description": "Create a new page as a child of a page or a database.",
    "parameters": _object(
        {
            "parent": _PARENT,
            "properties": {
                "type": "object",
                "description": "Page properties; a page under a page needs a 'title' property",
                "additionalProperties": True,
            },
            "children": _BLOCKS,
            "icon": _ICON,
            "cover": _COVER,
        },
        ["parent", "properties"],
    ),
}

GET_PAGE = {
    "name": "get_page",
    "description": "Retrieve a page by its id.",
    "parameters": _object(
        {
            "page_id": _id("ID of the page to retrieve"),
            "filter_properties": {
                "type": "array",
                "description": "Property ids to include in the response",
                "items": {"type": "string"},
            },
        },
        ["page_id"],
    ),
}

UPDATE_PAGE = {
    "name": "update_page",
    "description": "Update page properties, icon, cover, or archive status.",
    "parameters": _object(
        {
            "page_id": _id("ID of the page to update"),
            "properties": {"type": "object", "additionalProperties": True},
            "archived": {"type": "boolean"},
            "in_trash": {"type": "boolean"},
            "icon": _ICON,
            "cover": _COVER,
        },
        ["page_id"],
    ),
}

GET_PAGE_PROPERTY = {
    "name": "get_page_property",
    "description": "Retrieve a single property item of a page.",
    "parameters": _object(
        {
            "page_id": _id("ID of the page"),
            "property_id": _id("ID of the property"),
            **_PAGINATION,
        },
        ["page_id", "property_id"],
    ),
}

# =============================================================================
# Databases
# =============================================================================

CREATE_DATABASE = {
    "name": "create_database",
    "description": "Create a database as a child of a page.",
    "parameters": _object(
        {
            "parent": _PARENT,
            "title": _RICH_TEXT,
            "properties": {
                "type": "object",
                "description": "Property schema, must include exactly one 'title' property",
                "additionalProperties": True,
            },
            "is_inline": {"type": "boolean"},
            "icon": _ICON,
            "cover": _COVER,
        },
        ["parent", "title", "properties"],
    ),
}

GET_DATABASE = {
    "name": "get_database",
    "description": "Retrieve a database and its property schema.",
    "parameters": _object({"database_id": _id("ID of the database")}, ["database_id"]),
}

UPDATE_DATABASE = {
    "name": "update_database",
    "description": "Update a database's title, description or property schema.",
    "parameters": _object(
        {
            "database_id": _id("ID of the database"),
            "title": _RICH_TEXT,
            "description": _RICH_TEXT,
            "properties": {"type": "object", "additionalProperties": True},
            "archived": {"type": "boolean"},
        },
        ["database_id"],
    ),
}

QUERY_DATABASE = {
    "name": "query_database",
    "description": "Query a database for pages matching a filter.",
    "parameters": _object(
        {
            "database_id": _id("ID of the database to query"),
            "filter": {
                "type": "object",
                "description": "Filter conditions ('and'/'or' or a single property filter)",
            },
            "sorts": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "property": {"type": "string"},
                        "timestamp": {
                            "type": "string",
                            "enum": ["created_time", "last_edited_time"],
                        },
                        "direction": {
                            "type": "string",
                            "enum": ["ascending", "descending"],
                        },
                    },
                },
            },
            **_PAGINATION,
        },
        ["database_id"],
    ),
}

# =============================================================================
# Blocks
# =============================================================================

GET_BLOCK = {
    "name": "get_block",
    "description": "Retrieve a block by its id.",
    "parameters": _object({"block_id": _id("ID of the block")}, ["block_id"]),
}

UPDATE_BLOCK = {
    "name": "update_block",
    "description": "Update a block's content (keyed by its type) or archive it.",
    "parameters": {
        "type": "object",
        "properties": {
            "block_id": _id("ID of the block"),
            "archived": {"type": "boolean"},
        },
        "required": ["block_id"],
        "additionalProperties": True,
    },
}

DELETE_BLOCK = {
    "name": "delete_block",
    "description": "Delete (archive) a block.",
    "parameters": _object({"block_id": _id("ID of the block")}, ["block_id"]),
}

LIST_BLOCK_CHILDREN = {
    "name": "list_block_children",
    "description": "Retrieve the children of a block, e.g. the content of a page.",
    "parameters": _object(
        {"block_id": _id("ID of the parent block"), **_PAGINATION}, ["block_id"]
    ),
}

APPEND_BLOCK_CHILDREN = {
    "name": "append_block_children",
    "description": "Append new blocks as children of a block or page.",
    "parameters": _object(
        {
            "block_id": _id("ID of the parent block or page"),
            "children": _BLOCKS,
            "after": _id("ID of the block after which to insert"),
        },
        ["block_id", "children"],
    ),
}

# =============================================================================
# Users
# =============================================================================

GET_USER = {
    "name": "get_user",
    "description": "Retrieve a user by their id.",
    "parameters": _object({"user_id": _id("ID of the user")}, ["user_id"]),
}

LIST_USERS = {
    "name": "list_users",
    "description": "List all users in the workspace.",
    "parameters": _object(dict(_PAGINATION), []),
}

GET_SELF = {
    "name": "get_self",
    "description": "Retrieve the bot user of the integration.",
    "parameters": _object({}, []),
}

# =============================================================================
# Comments
# =============================================================================

CREATE_COMMENT = {
    "name": "create_comment",
    "description": "Create a comment on a page or in an existing discussion.",
    "parameters": _object(
        {
            "parent": {
                "type": "object",
                "properties": {"page_id": {"type": "string"}},
            },
            "discussion_id": _id("ID of an existing discussion thread"),
            "rich_text": _RICH_TEXT,
        },
        ["rich_text"],
    ),
}

LIST_COMMENTS = {
    "name": "list_comments",
    "description": "List unresolved comments of a page or block.",
    "parameters": _object(
        {"block_id": _id("ID of the page or block"), **_PAGINATION}, ["block_id"]
    ),
}

GET_COMMENT = {
    "name": "get_comment",
    "description": "Retrieve a comment by its id.",
    "parameters": _object({"comment_id": _id("ID of the comment")}, ["comment_id"]),
}

# =============================================================================
# Search
# =============================================================================

SEARCH = {
    "name": "search",
    "description": "Search pages and databases by title.",
    "parameters": _object(
        {
            "query": {"type": "string", "description": "Text to search for in titles"},
            "filter": {
                "type": "object",
                "properties": {
                    "property": {"type": "string", "enum": ["object"]},
                    "value": {"type": "string", "enum": ["page", "database"]},
                },
                "required": ["property", "value"],
                "additionalProperties": False,
            },
            "sort": {
                "type": "object",
                "properties": {
                    "timestamp": {"type": "string", "enum": ["last_edited_time"]},
                    "direction": {"type": "string", "enum": ["ascending", "descending"]},
                },
                "required": ["timestamp", "direction"],
                "additionalProperties": False,
            },
            **_PAGINATION,
        },
        ["query"],
    ),
}

# =============================================================================
# File uploads
# =============================================================================

CREATE_FILE_UPLOAD = {
    "name": "create_file_upload",
    "description": "Create a file upload, e.g. importing a file from an external URL.",
    "parameters": _object(
        {
            "mode": {"type": "string", "enum": ["single_part", "external_url"]},
            "external_url": {"type": "string", "description": "URL to import from"},
            "filename": {"type": "string"},
            "content_type": {"type": "string", "description": "MIME type of the file"},
        },
        ["mode", "filename"],
    ),
}

GET_FILE_UPLOAD = {
    "name": "get_file_upload",
    "description": "Retrieve a file upload and its status.",
    "parameters": _object(
        {"file_upload_id": _id("ID of the file upload")}, ["file_upload_id"]
    ),
}

LIST_FILE_UPLOADS = {
    "name": "list_file_uploads",
    "description": "List file uploads of the integration.",
    "parameters": _object(dict(_PAGINATION), []),
}


ALL_TOOLS: List[Dict[str, Any]] = [
    CREATE_PAGE,
    GET_PAGE,
    UPDATE_PAGE,
    GET_PAGE_PROPERTY,
    CREATE_DATABASE,
    GET_DATABASE,
    UPDATE_DATABASE,
    QUERY_DATABASE,
    GET_BLOCK,
    UPDATE_BLOCK,
    DELETE_BLOCK,
    LIST_BLOCK_CHILDREN,
    APPEND_BLOCK_CHILDREN,
    GET_USER,
    LIST_USERS,
    GET_SELF,
    CREATE_COMMENT,
    LIST_COMMENTS,
    GET_COMMENT,
    SEARCH,
    CREATE_FILE_UPLOAD,
    GET_FILE_UPLOAD,
    LIST_FILE_UPLOADS,
]

CATEGORIES: Dict[str, List[str]] = {
    "pages": ["create_page", "get_page", "update_page", "get_page_property"],
    "databases": ["create_database", "get_database", "update_database", "query_database"],
    "blocks": [
        "get_block",
        "update_block",
        "delete_block",
        "list_block_children",
        "append_block_children",
    ],
    "users": ["get_user", "list_users", "get_self"],
    "comments": ["create_comment", "list_comments", "get_comment"],
    "search": ["search"],
    "files": ["create_file_upload", "get_file_upload", "list_file_uploads"],
}
