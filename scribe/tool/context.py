"""Per-request state threaded through tool calls"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scribe.resource.library import ResourceLibrary


@dataclass
class ToolContext:
    """Ambient editor state plus session-scoped tool memory.

    ``search_results`` holds the papers returned by the most recent
    ``search_papers`` call of this session so ``download_paper`` can match
    by title. It belongs to one session and is never shared.
    """

    editor_content: str = ""
    search_results: list[dict[str, Any]] = field(default_factory=list)
    library: ResourceLibrary = field(default_factory=ResourceLibrary)
    downloads_dir: Path | None = None
    editor_changed: bool = False

    def update_editor(self, content: str):
        self.editor_content = content
        self.editor_changed = True
