"""Fold-back: render a tool result as the next user turn"""

import json
from typing import Any

from scribe.session.message import ToolCall, ToolResult

DEFAULT_MAX_TEXT_LENGTH = 40000
ABSTRACT_PREVIEW = 200
MAX_AUTHORS = 3


def _summarize_papers(data: dict) -> dict:
    papers = []
    for paper in data.get("papers") or []:
        authors = paper.get("authors") or []
        author_text = ", ".join(authors[:MAX_AUTHORS])
        if len(authors) > MAX_AUTHORS:
            author_text += " et al."
        abstract = paper.get("abstract") or ""
        papers.append({
            "arxiv_id": paper.get("arxiv_id"),
            "title": paper.get("title"),
            "authors": author_text,
            "published": (paper.get("published") or "").split("T")[0],
            "abstract": abstract[:ABSTRACT_PREVIEW] + ("..." if len(abstract) > ABSTRACT_PREVIEW else ""),
        })
    return {"count": data.get("count", len(papers)), "papers": papers}


def _summarize_pdf(data: dict, max_text_length: int) -> dict:
    text = data.get("text") or ""
    summary: dict[str, Any] = {
        "name": data.get("name"),
        "text_length": len(text),
        "text_stats": data.get("text_stats"),
    }
    if len(text) > max_text_length:
        summary["text"] = text[:max_text_length]
        summary["truncated"] = True
        summary["truncated_message"] = (
            f"Text too long, showing the first {max_text_length} of {len(text)} characters"
        )
    else:
        summary["text"] = text
        summary["truncated"] = False
    return summary


def _summarize_resources(data: dict) -> dict:
    resources = data.get("resources")
    resource_type = data.get("resource_type")
    if isinstance(resources, dict):
        # resource_type == "all"
        listed = [
            {"id": r.get("id"), "name": r.get("name") or r.get("title"), "type": rtype}
            for rtype, items in resources.items()
            for r in items
        ]
    else:
        listed = [
            {"id": r.get("id"), "name": r.get("name") or r.get("title"), "type": resource_type}
            for r in resources or []
        ]
    return {"count": data.get("count", len(listed)), "resources": listed}


def summarize_tool_result(
    call: ToolCall,
    result: ToolResult,
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
) -> dict:
    """Tool-specific summary of a result, sized for the model's context"""
    summary: dict[str, Any] = {"tool": call.name, "success": result.success}
    if not result.success:
        summary["error"] = result.error
        return summary

    data = result.data
    if not isinstance(data, dict):
        if data is not None:
            summary["data"] = data
        return summary

    if call.name == "search_papers" and "papers" in data:
        summary.update(_summarize_papers(data))
    elif call.name == "download_paper":
        summary["message"] = data.get("message")
        summary["filename"] = data.get("filename")
        summary["resource_id"] = data.get("resource_id")
    elif call.name == "read_pdf_content":
        summary.update(_summarize_pdf(data, max_text_length))
    elif call.name == "list_resources":
        summary.update(_summarize_resources(data))
    else:
        summary["data"] = data
    return summary


def fold_tool_result(
    call: ToolCall,
    result: ToolResult,
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
) -> str:
    """Text of the synthetic user turn that carries a tool result"""
    rendered = json.dumps(
        summarize_tool_result(call, result, max_text_length),
        indent=2,
        ensure_ascii=False,
        default=str,
    )
    return (
        f'Tool "{call.name}" result:\n{rendered}\n\n'
        "Continue answering the user's request based on this result. "
        "To download a paper, call download_paper with its arxiv_id. "
        "Call at most one tool per reply."
    )
