"""Edit the document currently open in the editor"""

from scribe.session.message import ToolResult
from .base import Tool
from .context import ToolContext

OPERATIONS = ("append", "replace", "insert_at")


class EditFileTool(Tool):
    name = "edit_file"
    description = (
        "Modify the file open in the editor. Operations: append, "
        "replace (first occurrence of target_text), insert_at (character position)."
    )

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "operation": {
                    "type": "string",
                    "enum": list(OPERATIONS),
                    "description": "Operation type",
                },
                "content": {
                    "type": "string",
                    "description": "Content to add or substitute",
                },
                "target_text": {
                    "type": "string",
                    "description": "Text to replace (replace only)",
                },
                "position": {
                    "type": "integer",
                    "description": "Insert position (insert_at only)",
                },
            },
            "required": ["operation", "content"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        old = context.editor_content
        if not old:
            return ToolResult.fail("Editor content is empty")

        operation = args.get("operation")
        content = args.get("content")
        if not isinstance(content, str):
            return ToolResult.fail("content must be a string")

        if operation == "append":
            new = old + "\n\n" + content
        elif operation == "replace":
            target = args.get("target_text")
            if not target or target not in old:
                return ToolResult.fail("Target text not found")
            new = old.replace(target, content, 1)
        elif operation == "insert_at":
            position = args.get("position")
            if not isinstance(position, int) or isinstance(position, bool) or not 0 <= position <= len(old):
                return ToolResult.fail("Invalid insert position")
            new = old[:position] + content + old[position:]
        else:
            return ToolResult.fail(f"Unsupported operation: {operation}")

        context.update_editor(new)

        old_lines = len(old.split("\n"))
        new_lines = len(new.split("\n"))
        return ToolResult.ok({
            "operation": operation,
            "new_content": new,
            "message": f"File updated ({operation})",
            "stats": {
                "old_lines": old_lines,
                "new_lines": new_lines,
                "lines_added": new_lines - old_lines,
            },
        })
