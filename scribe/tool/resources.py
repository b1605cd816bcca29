"""Resource library tools - list, add and cite resources"""

from scribe.resource.library import RESOURCE_TYPES
from scribe.session.message import ToolResult
from .base import Tool
from .context import ToolContext

NOTE_EXCERPT = 100


def _note_excerpt(resource: dict) -> str:
    text = resource.get("content") or ""
    excerpt = text[:NOTE_EXCERPT]
    if len(text) > NOTE_EXCERPT:
        excerpt += "..."
    return f"Note: {resource.get('title', '')} - {excerpt}"


def generate_insert_content(resource: dict, resource_type: str, fmt: str = "latex") -> str:
    """Render a resource as a LaTeX or Markdown snippet for the document"""
    latex = fmt == "latex"
    name = resource.get("name") or ""
    description = resource.get("description") or name

    if resource_type == "references":
        key = resource.get("citationKey") or resource.get("id")
        return f"\\cite{{{key}}}" if latex else f"[{key}] {resource.get('title', '')}"

    if resource_type == "images":
        if latex:
            return (
                "\\begin{figure}[htbp]\n"
                "  \\centering\n"
                f"  \\includegraphics[width=0.8\\textwidth]{{{name}}}\n"
                f"  \\caption{{{description}}}\n"
                f"  \\label{{fig:{resource.get('id')}}}\n"
                "\\end{figure}"
            )
        return f"![{description}]({resource.get('dataUrl') or name})"

    if resource_type == "pdfs":
        label = name or resource.get("title", "")
        url = resource.get("url") or name
        return f"\\href{{{url}}}{{{label}}}" if latex else f"[{label}]({url})"

    if resource_type == "datafiles":
        source = f"{name} ({resource.get('fileType', '')})"
        return f"\\textbf{{Data source:}} {source}" if latex else f"**Data source:** {source}"

    if resource_type == "codesnippets":
        language = resource.get("language", "")
        code = resource.get("code", "")
        if latex:
            return f"\\begin{{lstlisting}}[language={language}]\n{code}\n\\end{{lstlisting}}"
        return f"```{language}\n{code}\n```"

    if resource_type == "notes":
        note = _note_excerpt(resource)
        return f"\\textit{{{note}}}" if latex else f"*{note}*"

    return ""


class ListResourcesTool(Tool):
    name = "list_resources"
    description = "List resources in the library, filtered by type."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "resource_type": {
                    "type": "string",
                    "enum": RESOURCE_TYPES + ["all"],
                    "description": "Resource type, or 'all'",
                },
            },
            "required": ["resource_type"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        resource_type = args.get("resource_type")
        if not resource_type:
            return ToolResult.fail("resource_type must not be empty")

        if resource_type == "all":
            return ToolResult.ok({
                "resource_type": "all",
                "resources": context.library.list_all(),
            })

        if resource_type not in RESOURCE_TYPES:
            return ToolResult.fail(f"Invalid resource type: {resource_type}")

        resources = context.library.list_type(resource_type)
        return ToolResult.ok({
            "resource_type": resource_type,
            "resources": resources,
            "count": len(resources),
        })


class AddResourceTool(Tool):
    name = "add_resource"
    description = "Add a resource to the library, or update it if the id already exists."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "resource_type": {
                    "type": "string",
                    "enum": RESOURCE_TYPES,
                },
                "resource_data": {
                    "type": "object",
                    "description": "Resource fields such as name, title, description",
                },
            },
            "required": ["resource_type", "resource_data"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        resource_type = args.get("resource_type")
        data = args.get("resource_data")

        if resource_type not in RESOURCE_TYPES:
            return ToolResult.fail(f"Invalid resource type: {resource_type}")
        if not isinstance(data, dict) or not data:
            return ToolResult.fail("resource_data must be a non-empty object")

        resource_id, updated = context.library.upsert(resource_type, data)
        return ToolResult.ok({
            "message": "Resource updated" if updated else "Resource added",
            "resource_type": resource_type,
            "resource_id": resource_id,
            "updated": updated,
        })


class InsertResourceTool(Tool):
    name = "insert_resource"
    description = "Generate a citation or embed snippet for a library resource."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "resource_type": {
                    "type": "string",
                    "enum": RESOURCE_TYPES,
                },
                "resource_id": {"type": "string"},
                "insert_format": {
                    "type": "string",
                    "enum": ["latex", "markdown"],
                    "default": "latex",
                },
            },
            "required": ["resource_type", "resource_id"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        resource_type = args.get("resource_type")
        resource_id = args.get("resource_id")
        fmt = args.get("insert_format") or "latex"

        if resource_type not in RESOURCE_TYPES:
            return ToolResult.fail(f"Invalid resource type: {resource_type}")
        if not resource_id:
            return ToolResult.fail("resource_id must not be empty")

        resource = context.library.get(resource_type, resource_id)
        if resource is None:
            return ToolResult.fail(f"Resource not found: {resource_id}")

        return ToolResult.ok({
            "resource_type": resource_type,
            "resource_id": resource_id,
            "insert_format": fmt,
            "content": generate_insert_content(resource, resource_type, fmt),
        })
