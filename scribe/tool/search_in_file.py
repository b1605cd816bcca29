"""Search the document currently open in the editor"""

from scribe.session.message import ToolResult
from .base import Tool
from .context import ToolContext

CONTEXT_CHARS = 20
MAX_MATCHES = 20


class SearchInFileTool(Tool):
    name = "search_in_file"
    description = "Search for text in the file open in the editor."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "search_text": {
                    "type": "string",
                    "description": "Text to search for",
                },
                "case_sensitive": {
                    "type": "boolean",
                    "description": "Match case",
                    "default": False,
                },
            },
            "required": ["search_text"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        content = context.editor_content
        if not content:
            return ToolResult.fail("Editor content is empty")

        search_text = args.get("search_text")
        if not search_text:
            return ToolResult.fail("search_text must not be empty")
        case_sensitive = bool(args.get("case_sensitive", False))
        needle = search_text if case_sensitive else search_text.lower()

        matches = []
        for lineno, line in enumerate(content.split("\n"), 1):
            haystack = line if case_sensitive else line.lower()
            pos = haystack.find(needle)
            while pos != -1:
                start = max(0, pos - CONTEXT_CHARS)
                end = min(len(line), pos + len(search_text) + CONTEXT_CHARS)
                matches.append({
                    "line": lineno,
                    "position": pos,
                    "context": line[start:end],
                })
                pos = haystack.find(needle, pos + 1)

        return ToolResult.ok({
            "search_text": search_text,
            "case_sensitive": case_sensitive,
            "total_matches": len(matches),
            "matches": matches[:MAX_MATCHES],
        })
