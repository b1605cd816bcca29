"""Tests for prompt assembly and tool result fold-back"""

import json

from scribe.agent.fold import fold_tool_result, summarize_tool_result
from scribe.agent.prompt import FOLLOW_UP_CONTENT, build_prompt
from scribe.session.message import Message, ToolCall, ToolResult

TOOLS = [{"name": "view_file", "description": "View the file", "parameters": {"type": "object"}}]


class TestBuildPrompt:
    def test_discuss_prompt_contains_everything(self):
        prompt = build_prompt("Body text", "Is this clear?", "discuss", TOOLS)

        assert "Discussion topic: Is this clear?" in prompt
        assert "Current paper content:\nBody text" in prompt
        assert "- view_file: View the file" in prompt
        assert "TOOL_CALL:" in prompt

    def test_write_mode_template(self):
        prompt = build_prompt("Body text", "Shorten it", "write", TOOLS)

        assert "Revision request: Shorten it" in prompt

    def test_unknown_mode_uses_default_template(self):
        prompt = build_prompt("Body text", "Fix typos", "proofread", [])

        assert "Request: Fix typos" in prompt
        assert "TOOL_CALL" not in prompt

    def test_follow_up_omits_content(self):
        prompt = build_prompt("Body text", 'Tool "view_file" result: ...', "discuss", TOOLS, follow_up=True)

        assert "Body text" not in prompt
        assert FOLLOW_UP_CONTENT in prompt

    def test_history_rendering(self):
        history = [Message(role="user", content="Q1"), Message(role="agent", content="A1")]

        prompt = build_prompt("", "Q2", "discuss", TOOLS, history=history)

        assert "User: Q1\n\nAssistant: A1" in prompt


class TestFold:
    def test_failed_result_reports_error(self):
        summary = summarize_tool_result(ToolCall("view_file"), ToolResult.fail("Editor content is empty"))

        assert summary == {"tool": "view_file", "success": False, "error": "Editor content is empty"}

    def test_search_results_are_condensed(self):
        data = {
            "count": 1,
            "papers": [{
                "arxiv_id": "1706.03762",
                "title": "Attention Is All You Need",
                "authors": ["A", "B", "C", "D"],
                "abstract": "z" * 300,
                "published": "2017-06-12T17:57:34Z",
            }],
        }

        summary = summarize_tool_result(ToolCall("search_papers", {"query": "x"}), ToolResult.ok(data))
        paper = summary["papers"][0]

        assert paper["authors"] == "A, B, C et al."
        assert paper["published"] == "2017-06-12"
        assert paper["abstract"] == "z" * 200 + "..."

    def test_pdf_text_is_truncated(self):
        result = ToolResult.ok({"name": "p.pdf", "text": "w" * 50})

        summary = summarize_tool_result(ToolCall("read_pdf_content"), result, max_text_length=20)

        assert summary["text"] == "w" * 20
        assert summary["truncated"] is True
        assert summary["text_length"] == 50
        assert "20 of 50" in summary["truncated_message"]

    def test_pdf_text_at_limit_is_kept(self):
        result = ToolResult.ok({"name": "p.pdf", "text": "w" * 20})

        summary = summarize_tool_result(ToolCall("read_pdf_content"), result, max_text_length=20)

        assert summary["truncated"] is False
        assert summary["text"] == "w" * 20

    def test_other_tools_pass_data_through(self):
        result = ToolResult.ok({"operation": "append"})

        summary = summarize_tool_result(ToolCall("edit_file"), result)

        assert summary["data"] == {"operation": "append"}

    def test_fold_text(self):
        text = fold_tool_result(ToolCall("view_file"), ToolResult.fail("Editor content is empty"))

        header, rest = text.split("\n", 1)
        body = rest.split("\n\n")[0]
        assert header == 'Tool "view_file" result:'
        assert json.loads(body)["error"] == "Editor content is empty"
        assert text.endswith("Call at most one tool per reply.")
