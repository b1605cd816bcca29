"""Prompt assembly for the writing agent"""

import json

from scribe.session.message import Message

TOOL_USAGE = """You can use the following academic writing tools:
{catalog}

Tool call format (exactly one JSON object after the marker):
TOOL_CALL: {{"tool_name": "<tool name>", "parameters": {{"<name>": "<value>"}}}}

Hard rules:
1. Call AT MOST ONE tool per reply. Never put two TOOL_CALL markers in one reply.
2. After writing TOOL_CALL, stop immediately. Do not write anything after it.
3. The system runs the tool and sends you its result; then continue or call the next tool.
4. For several steps, work one tool at a time: call, wait for the result, call again.

Example:
User: find papers on deep learning and download the first one
Reply 1: I'll search for relevant papers.
TOOL_CALL: {{"tool_name": "search_papers", "parameters": {{"query": "deep learning"}}}}
Reply 2 (after the search result): Found them, downloading the first paper now.
TOOL_CALL: {{"tool_name": "download_paper", "parameters": {{"arxiv_id": "2401.00001"}}}}

Editing tools change the document only in write mode; search, download and
reading tools are available in every mode."""

DISCUSS_TEMPLATE = """As a professional academic writing assistant, I will discuss the following material with you in depth.

{tools}

{history}

Discussion topic: {input}

{content}

Guidelines:
1. Give professional academic insight and in-depth analysis
2. Suggest constructive improvements grounded in the existing text
3. Keep the discussion rigorous and logically structured
4. Use the tools to find literature that supports your points when useful
5. Do not rewrite the paper; discuss and advise only"""

WRITE_TEMPLATE = """As a professional academic writing assistant, I will draft or revise the following paper as requested.

{tools}

{history}

Revision request: {input}

{content}

Writing requirements:
1. Follow academic writing conventions strictly
2. Keep the paper coherent and structurally complete
3. Use precise, professional and concise language
4. Search the literature first if references are needed
5. Use the tools as often as needed to view and edit the document

Output: the complete revised content, keeping existing markup (such as LaTeX) intact,
with a short note on any major structural change."""

DEFAULT_TEMPLATE = """Process the following academic paper content:

{content}

Request: {input}

Follow academic writing conventions and keep the result professional and clear."""

FOLLOW_UP_CONTENT = "(The paper content was provided in the first request; use the view_file tool to see it again.)"


def render_tool_catalog(tools: list[dict]) -> str:
    lines = []
    for tool in tools:
        lines.append(f"- {tool['name']}: {tool['description']}")
        lines.append(f"  Parameters: {json.dumps(tool.get('parameters', {}), ensure_ascii=False)}")
    return "\n".join(lines)


def render_history(history: list[Message]) -> str:
    if not history:
        return ""
    turns = []
    for msg in history:
        speaker = "User" if msg.role == "user" else "Assistant"
        turns.append(f"{speaker}: {msg.content}")
    return "Conversation so far:\n" + "\n\n".join(turns)


def build_prompt(
    content: str,
    user_input: str,
    mode: str,
    tools: list[dict],
    history: list[Message] | None = None,
    follow_up: bool = False,
) -> str:
    """Build the single-message prompt sent to the model.

    Follow-up prompts carry a tool result as ``user_input`` and leave the
    document body out, since the model has already seen it.
    """
    tools_section = TOOL_USAGE.format(catalog=render_tool_catalog(tools)) if tools else ""
    content_section = FOLLOW_UP_CONTENT if follow_up else f"Current paper content:\n{content}"

    if mode == "discuss":
        template = DISCUSS_TEMPLATE
    elif mode == "write":
        template = WRITE_TEMPLATE
    else:
        template = DEFAULT_TEMPLATE

    return template.format(
        tools=tools_section,
        history=render_history(history or []),
        input=user_input,
        content=content_section,
    )
