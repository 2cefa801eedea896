"""Dispatch of model-issued tool calls onto local utilities.

A tool call arrives in OpenAI shape:
    `{"id": ..., "type": "function", "function": {"name": ..., "arguments": "<json>"}}`
and is answered with a `role="tool"` message carrying the stringified result.

Failures inside a tool (bad arguments, unknown tool) are reported back to the
model as text so the conversation can continue; they never abort the request.
"""

import json
import logging
from typing import Any, Callable, Dict

from app.tools.utility_tools import TOOL_SCHEMAS, default_tools


logger = logging.getLogger(__name__)

ToolFunc = Callable[[Dict[str, Any]], Any]


class ToolExecutor:
    def __init__(self, tools: Dict[str, ToolFunc] | None = None, schemas: list[dict] | None = None):
        self._tools = tools if tools is not None else default_tools()
        self.schemas = schemas if schemas is not None else TOOL_SCHEMAS

    def execute(self, call: dict) -> dict:
        """Run one tool call and return the `role="tool"` reply message."""
        function = call.get("function") or {}
        name = function.get("name", "")
        raw_arguments = function.get("arguments") or "{}"

        func = self._tools.get(name)
        if func is None:
            content = "Tool not registered"
        else:
            try:
                arguments = json.loads(raw_arguments) if isinstance(raw_arguments, str) else raw_arguments
                if not isinstance(arguments, dict):
                    raise TypeError("tool arguments must be a JSON object")
                content = str(func(arguments))
            except (ValueError, TypeError, KeyError, ArithmeticError) as err:
                logger.warning("Tool %s failed with arguments %r: %s", name, raw_arguments, err)
                content = f"Error: {err}"

        return {
            "role": "tool",
            "tool_call_id": call.get("id", ""),
            "content": content,
        }
