#!/usr/bin/env python3
"""
Reminder MCP Server
Schedule one-shot reminders that appear as native OS notifications.

Tools:
  create_reminder  - Create a reminder for an absolute or relative time
  list_reminders   - List active reminders with time left
  cancel_reminder  - Cancel a reminder by ID

Reminders go to CCCore (CCCORE_HOST:CCCORE_HTTP_PORT) when it answers within
CCCORE_TIMEOUT_MS; otherwise they are stored in ~/.reminder-skill-data and
delivered by a background worker process.
"""

import asyncio
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from logger import logger
from reminders import Dispatcher, create_reminder, list_reminders, cancel_reminder

server = Server("reminder-server")
dispatcher: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    global dispatcher
    if dispatcher is None:
        dispatcher = Dispatcher.from_config()
    return dispatcher


@server.list_tools()
async def list_tools():
    return [
        Tool(
            name="create_reminder",
            description=(
                "Create a new reminder with a system notification. Supports absolute times "
                "(ISO format) or relative delays (e.g., \"in 5 minutes\", \"in 2 hours\"). "
                "The notification appears as a system-level alert even over fullscreen applications."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": "Title of the reminder",
                    },
                    "message": {
                        "type": "string",
                        "description": "Detailed message for the reminder",
                    },
                    "time": {
                        "type": "string",
                        "description": (
                            "When to trigger the reminder. ISO datetime (e.g., \"2025-10-29T15:30:00\") "
                            "or relative time (e.g., \"in 30 minutes\", \"in 2 hours\", \"in 1 day\")"
                        ),
                    },
                },
                "required": ["title", "message", "time"],
            },
        ),
        Tool(
            name="list_reminders",
            description="List all active reminders",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
        Tool(
            name="cancel_reminder",
            description="Cancel a specific reminder by ID",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "ID of the reminder to cancel",
                    },
                },
                "required": ["id"],
            },
        ),
    ]


async def handle_tool(name: str, arguments: Optional[dict]) -> str:
    """Run a tool and return its text report."""
    arguments = arguments or {}

    if name == "create_reminder":
        return await create_reminder(
            get_dispatcher(),
            str(arguments.get("title", "")),
            str(arguments.get("message", "")),
            str(arguments.get("time", "")),
        )

    if name == "list_reminders":
        return await list_reminders(get_dispatcher())

    if name == "cancel_reminder":
        return await cancel_reminder(get_dispatcher(), str(arguments.get("id", "")))

    return f"Unknown tool: {name}"


@server.call_tool()
async def call_tool(name: str, arguments: dict):
    logger.info(f"Tool call: {name}")
    text = await handle_tool(name, arguments)
    return [TextContent(type="text", text=text)]


async def main():
    logger.info("Reminder MCP server starting up")

    # Reschedule reminders persisted before this process started
    active = get_dispatcher().startup()
    logger.info(f"Server startup complete ({len(active)} active reminders)")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
