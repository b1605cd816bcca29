"""Single-tool ReAct loop: model turn, parse, run one tool, fold back"""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Union

from scribe.provider.base import Provider
from scribe.session.message import Message, ToolCall, ToolResult
from scribe.tool.context import ToolContext
from scribe.tool.parser import ToolCallParser, visible_prefix
from scribe.tool.registry import ToolRegistry
from .errors import IterationLimitExceeded
from .events import AgentOutcome, ChunkEvent, CompleteEvent
from .fold import fold_tool_result

logger = logging.getLogger(__name__)

# (history, user_input, follow_up) -> prompt
PromptBuilder = Callable[[list[Message], str, bool], str]


@dataclass
class ModelReply:
    text: str
    reasoning: str = ""


@dataclass
class AgentLoop:
    """Runs one user turn to completion.

    Each model reply is parsed for at most one tool call. When one is found
    the tool runs under ``tool_timeout`` and its result, successful or not,
    becomes the next user turn. The loop stops when a reply asks for no tool,
    and raises ``IterationLimitExceeded`` when the model asks for more than
    ``max_iterations`` tools. Model failures propagate unchanged.
    """

    max_iterations: int = 10
    tool_timeout: float = 30.0
    max_tool_text_length: int = 40000
    strip_dangling_markers: bool = False

    async def _call_model(
        self,
        provider: Provider,
        prompt: str,
        streaming: bool,
        iteration: int,
        reply: ModelReply,
    ) -> AsyncIterator[ChunkEvent]:
        """Fill ``reply`` from the provider, yielding chunks when streaming"""
        if streaming and provider.supports_streaming:
            async with aclosing(provider.stream(prompt)) as chunks:
                async for chunk in chunks:
                    content_delta = chunk.content if chunk.type == "text" else ""
                    reasoning_delta = chunk.content if chunk.type == "reasoning" else ""
                    if not content_delta and not reasoning_delta:
                        continue
                    reply.text += content_delta
                    reply.reasoning += reasoning_delta
                    yield ChunkEvent(
                        content_delta=content_delta,
                        reasoning_delta=reasoning_delta,
                        cumulative_content=reply.text,
                        cumulative_reasoning=reply.reasoning,
                        iteration=iteration,
                    )
            return

        completion = await provider.complete(prompt)
        reply.text = completion.text
        reply.reasoning = completion.reasoning
        if streaming and (reply.text or reply.reasoning):
            yield ChunkEvent(
                content_delta=reply.text,
                reasoning_delta=reply.reasoning,
                cumulative_content=reply.text,
                cumulative_reasoning=reply.reasoning,
                iteration=iteration,
            )

    async def _run_tool(self, tools: ToolRegistry, call: ToolCall, context: ToolContext) -> ToolResult:
        try:
            result = await asyncio.wait_for(
                tools.execute(call.name, call.parameters, context),
                timeout=self.tool_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Tool {call.name} timed out after {self.tool_timeout:g}s")
            return ToolResult.fail(f"Tool {call.name} timed out after {self.tool_timeout:g} seconds")
        except Exception as e:
            logger.warning(f"Tool {call.name} failed: {e}")
            return ToolResult.fail(str(e) or f"Tool {call.name} failed")

        if not isinstance(result, ToolResult):
            return ToolResult.fail(f"Tool {call.name} returned an invalid result")
        return result

    def _visible(self, text: str, calls: list[ToolCall]) -> str:
        if calls or self.strip_dangling_markers:
            return visible_prefix(text)
        return text

    async def execute(
        self,
        provider: Provider,
        build_prompt: PromptBuilder,
        tools: ToolRegistry,
        parser: ToolCallParser,
        history: list[Message],
        user_input: str,
        context: ToolContext,
        streaming: bool = True,
    ) -> AsyncIterator[Union[ChunkEvent, CompleteEvent]]:
        conversation = list(history)
        new_messages: list[Message] = []
        calls_made: list[ToolCall] = []
        results: list[ToolResult] = []

        current_input = user_input
        follow_up = False
        tool_iterations = 0
        model_turn = 0

        while True:
            model_turn += 1
            prompt = build_prompt(conversation, current_input, follow_up)
            turn_message = Message(role="user", content=current_input)
            conversation.append(turn_message)
            if follow_up:
                new_messages.append(turn_message)

            logger.info(f"Model turn {model_turn} ({provider.name}/{provider.model})")
            reply = ModelReply(text="")
            async with aclosing(self._call_model(provider, prompt, streaming, model_turn, reply)) as chunks:
                async for event in chunks:
                    yield event

            calls = parser.parse(reply.text)
            agent_message = Message(
                role="agent",
                content=self._visible(reply.text, calls),
                reasoning=reply.reasoning or None,
                tool_calls=calls or None,
            )
            conversation.append(agent_message)
            new_messages.append(agent_message)

            if not calls:
                yield CompleteEvent(outcome=AgentOutcome(
                    content=agent_message.content,
                    reasoning=reply.reasoning,
                    tool_calls=calls_made,
                    tool_results=results,
                    messages=new_messages,
                    editor_content=context.editor_content if context.editor_changed else None,
                    search_results=context.search_results,
                    iterations=tool_iterations,
                ))
                return

            tool_iterations += 1
            if tool_iterations > self.max_iterations:
                logger.warning(f"Iteration limit {self.max_iterations} exceeded, aborting turn")
                raise IterationLimitExceeded(self.max_iterations)

            call = calls[0]
            logger.info(f"Tool iteration {tool_iterations}: {call.name}")
            result = await self._run_tool(tools, call, context)
            logger.info(f"Tool {call.name} finished: {'ok' if result.success else result.error}")

            agent_message.tool_results = [result]
            calls_made.append(call)
            results.append(result)

            current_input = fold_tool_result(call, result, self.max_tool_text_length)
            follow_up = True
