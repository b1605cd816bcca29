"""View the document currently open in the editor"""

from scribe.session.message import ToolResult
from .base import Tool
from .context import ToolContext

PREVIEW_LENGTH = 1000


class ViewFileTool(Tool):
    name = "view_file"
    description = "View the content of the file open in the editor."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "File path",
                    "default": "main.tex",
                },
            },
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        content = context.editor_content
        if not content:
            return ToolResult.fail("Editor content is empty")

        preview = content[:PREVIEW_LENGTH]
        if len(content) > PREVIEW_LENGTH:
            preview += "..."

        return ToolResult.ok({
            "file_path": args.get("file_path") or "main.tex",
            "content": content,
            "stats": {
                "lines": len(content.split("\n")),
                "characters": len(content),
            },
            "preview": preview,
        })
