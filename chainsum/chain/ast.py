# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Chain AST — structured, size-aware view of a flat message chain.

A chain is split into sections at human-message boundaries:

    ChainAST
      └─ ChainSection*          one question and the work done for it
           ├─ Header            system message (first section only) + human message
           └─ BodyPair*         one AI turn with its matched tool responses

Body pairs come in three shapes (``BodyPairType``):

  COMPLETION        AI text only, no tool messages
  REQUEST_RESPONSE  AI tool calls + exactly one response per call ID
  SUMMARIZATION     compacted output of earlier pairs, wrapped as a fake
                    ``execute_task_and_return_summary`` call/response

``ChainAST.messages()`` flattens the tree back to the original sequence;
``parse`` followed by ``messages`` is the identity for any valid chain.
Sizes are computed on demand, so in-place edits never leave stale totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from chainsum.chain.tool_ids import generate_from_pattern, matches_pattern
from chainsum.errors import ChainParseError, ToolCallNotFoundError
from chainsum.models import (
    ChatMessageType,
    ContentReasoning,
    Message,
    TextContent,
    ToolCall,
    ToolCallResponse,
)

logger = logging.getLogger(__name__)

FALLBACK_REQUEST_ARGS = "{}"
FALLBACK_RESPONSE_CONTENT = "the call was not handled, please try again"
SUMMARIZATION_TOOL_NAME = "execute_task_and_return_summary"
SUMMARIZATION_TOOL_ARGS = '{"question": "delegate and execute the task, then return the summary of the result"}'
SUMMARIZED_CONTENT_PREFIX = "**summarized content:**\n"

# Gemini accepts this value in place of a real thought signature.
FAKE_REASONING_SIGNATURE_GEMINI = b"skip_thought_signature_validator"


class BodyPairType(str, Enum):
    """Shape of a body pair.

    Attributes:
        REQUEST_RESPONSE (str): AI tool calls with their responses.
        COMPLETION (str): AI text without tool calls.
        SUMMARIZATION (str): Compacted output of earlier pairs.
    """

    REQUEST_RESPONSE = "request-response"
    COMPLETION = "completion"
    SUMMARIZATION = "summarization"

    def __str__(self) -> str:
        return self.value


@dataclass
class ToolCallPair:
    """A tool call and its response; either side may be missing."""

    tool_call: Optional[ToolCall] = None
    response: Optional[ToolCallResponse] = None


@dataclass
class ToolCallsInfo:
    """Matching state of the tool calls in a body pair.

    Attributes:
        pending_ids (List[str]): Sorted IDs of calls without a response.
        unmatched_ids (List[str]): Sorted IDs of responses without a call.
        pending (Dict[str, ToolCallPair]): Calls without a response.
        completed (Dict[str, ToolCallPair]): Calls with their response.
        unmatched (Dict[str, ToolCallPair]): Responses without a call.
    """

    pending_ids: List[str]
    unmatched_ids: List[str]
    pending: Dict[str, ToolCallPair]
    completed: Dict[str, ToolCallPair]
    unmatched: Dict[str, ToolCallPair]


@dataclass
class Header:
    """Opening messages of a section.

    Attributes:
        system_message (Optional[Message]): System prompt, first section only.
        human_message (Optional[Message]): The question opening the section.
    """

    system_message: Optional[Message] = None
    human_message: Optional[Message] = None

    @property
    def size(self) -> int:
        return sum(msg.size for msg in self.messages())

    def messages(self) -> List[Message]:
        return [msg for msg in (self.system_message, self.human_message) if msg is not None]


@dataclass
class BodyPair:
    """One AI turn plus the tool messages answering its calls.

    Attributes:
        type (BodyPairType): Shape of the pair.
        ai_message (Message): The AI message.
        tool_messages (List[Message]): Tool responses, empty for completions.
    """

    type: BodyPairType
    ai_message: Message
    tool_messages: List[Message] = field(default_factory=list)

    @classmethod
    def build(cls, ai_message: Message, tool_messages: Optional[List[Message]] = None) -> "BodyPair":
        """Create a pair, detecting its type from the AI message.

        The first tool call decides: the reserved summarization tool name
        gives SUMMARIZATION, any other name REQUEST_RESPONSE. Without tool
        calls the pair is a COMPLETION.

        Args:
            ai_message (Message): The AI message.
            tool_messages (Optional[List[Message]]): Tool responses.

        Returns:
            BodyPair: The new pair.
        """
        pair_type = BodyPairType.COMPLETION
        for call in ai_message.tool_calls():
            if call.name == SUMMARIZATION_TOOL_NAME:
                pair_type = BodyPairType.SUMMARIZATION
            else:
                pair_type = BodyPairType.REQUEST_RESPONSE
            break
        return cls(type=pair_type, ai_message=ai_message, tool_messages=list(tool_messages or []))

    @classmethod
    def from_messages(cls, messages: Sequence[Message]) -> "BodyPair":
        """Create a pair from an AI message followed by tool messages.

        Args:
            messages (Sequence[Message]): AI message then tool messages.

        Returns:
            BodyPair: The new pair.

        Raises:
            ChainParseError: If the list is empty, does not start with an
                AI message or contains anything but tool messages after it.
        """
        if not messages:
            raise ChainParseError("cannot create body pair from empty message slice")
        if messages[0].role != ChatMessageType.AI:
            raise ChainParseError("first message in body pair must be an AI message")
        for idx, msg in enumerate(messages[1:], start=1):
            if msg.role != ChatMessageType.TOOL:
                raise ChainParseError(f"non-tool message found in body pair at position {idx}")
        return cls.build(messages[0], list(messages[1:]))

    @classmethod
    def from_completion(cls, text: str, reasoning: Optional[ContentReasoning] = None) -> "BodyPair":
        """Create a COMPLETION pair holding a single text part."""
        ai_message = Message(role=ChatMessageType.AI, parts=[TextContent(text=text, reasoning=reasoning)])
        return cls.build(ai_message)

    @classmethod
    def from_summarization(
        cls,
        text: str,
        tool_call_id_template: str,
        reasoning_part: Optional[TextContent] = None,
        signature: Optional[bytes] = None,
    ) -> "BodyPair":
        """Create a SUMMARIZATION pair wrapping *text* as a fake tool call.

        Args:
            text (str): Summary returned as the tool response content.
            tool_call_id_template (str): Template for the generated call ID.
            reasoning_part (Optional[TextContent]): Text part carrying
                reasoning, placed first in the AI message as-is.
            signature (Optional[bytes]): Reasoning signature put on the
                synthetic tool call.

        Returns:
            BodyPair: The new pair.
        """
        tool_call_id = generate_from_pattern(tool_call_id_template, SUMMARIZATION_TOOL_NAME)
        call = ToolCall(
            id=tool_call_id,
            name=SUMMARIZATION_TOOL_NAME,
            arguments=SUMMARIZATION_TOOL_ARGS,
            reasoning=ContentReasoning(signature=signature) if signature is not None else None,
        )
        parts: list = [reasoning_part, call] if reasoning_part is not None else [call]
        ai_message = Message(role=ChatMessageType.AI, parts=parts)
        tool_message = Message(
            role=ChatMessageType.TOOL,
            parts=[ToolCallResponse(tool_call_id=tool_call_id, name=SUMMARIZATION_TOOL_NAME, content=text)],
        )
        return cls.build(ai_message, [tool_message])

    @property
    def size(self) -> int:
        return self.ai_message.size + sum(msg.size for msg in self.tool_messages)

    def messages(self) -> List[Message]:
        return [self.ai_message, *self.tool_messages]

    def tool_calls_info(self) -> ToolCallsInfo:
        """Match the pair's tool calls against its tool responses."""
        pending: Dict[str, ToolCallPair] = {}
        completed: Dict[str, ToolCallPair] = {}
        unmatched: Dict[str, ToolCallPair] = {}

        for call in self.ai_message.tool_calls():
            pending[call.id] = ToolCallPair(tool_call=call)

        for msg in self.tool_messages:
            for resp in msg.tool_responses():
                matched = pending.pop(resp.tool_call_id, None)
                if matched is None:
                    unmatched[resp.tool_call_id] = ToolCallPair(response=resp)
                else:
                    matched.response = resp
                    completed[resp.tool_call_id] = matched

        return ToolCallsInfo(
            pending_ids=sorted(pending),
            unmatched_ids=sorted(unmatched),
            pending=pending,
            completed=completed,
            unmatched=unmatched,
        )

    def is_valid(self) -> bool:
        """Whether the pair has the shape its type requires."""
        if self.type == BodyPairType.COMPLETION:
            if self.tool_messages:
                return False
        elif self.type == BodyPairType.REQUEST_RESPONSE:
            if not self.tool_messages:
                return False
        elif self.type == BodyPairType.SUMMARIZATION:
            if len(self.tool_messages) != 1:
                return False
        else:
            return False

        info = self.tool_calls_info()
        return not info.pending and not info.unmatched

    def is_summarized(self) -> bool:
        return contains_summarized_content(self)


def contains_summarized_content(pair: Optional[BodyPair]) -> bool:
    """Whether *pair* is the output of an earlier summarization.

    True for SUMMARIZATION pairs and for COMPLETION pairs whose first part
    is text starting with ``SUMMARIZED_CONTENT_PREFIX``.

    Args:
        pair (Optional[BodyPair]): Pair to inspect.

    Returns:
        bool: ``True`` if the pair holds summarized content.
    """
    if pair is None:
        return False
    if pair.type == BodyPairType.SUMMARIZATION:
        return True
    if pair.type == BodyPairType.REQUEST_RESPONSE:
        return False
    if pair.type == BodyPairType.COMPLETION:
        parts = pair.ai_message.parts
        if not parts or not isinstance(parts[0], TextContent):
            return False
        return parts[0].text.startswith(SUMMARIZED_CONTENT_PREFIX)
    return False


@dataclass
class ChainSection:
    """A header followed by the body pairs answering it."""

    header: Header
    body: List[BodyPair] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.header.size + sum(pair.size for pair in self.body)

    def messages(self) -> List[Message]:
        result = self.header.messages()
        for pair in self.body:
            result.extend(pair.messages())
        return result

    def add_body_pair(self, pair: BodyPair) -> None:
        self.body.append(pair)


@dataclass
class ChainAST:
    """Ordered list of sections built from a flat message chain."""

    sections: List[ChainSection] = field(default_factory=list)

    @classmethod
    def parse(cls, chain: Sequence[Message], force: bool = False) -> "ChainAST":
        """Build a ChainAST from a flat message chain.

        Input messages are copied; the caller's messages are never changed.

        Args:
            chain (Sequence[Message]): Flat message chain.
            force (bool): Repair inconsistencies instead of failing: answer
                pending tool calls with a fallback response, add fallback
                calls for unmatched responses, merge consecutive human
                messages and skip stray tool messages.

        Returns:
            ChainAST: The parsed chain.

        Raises:
            ChainParseError: If the chain is malformed (and ``force`` cannot
                repair it).
        """
        ast = cls()
        if not chain:
            return ast

        if chain[0].role not in (ChatMessageType.SYSTEM, ChatMessageType.HUMAN):
            raise ChainParseError(
                f"unexpected chain begin: first message must be System or Human, got {chain[0].role.value}"
            )

        section: Optional[ChainSection] = None
        pair: Optional[BodyPair] = None

        for original in chain:
            msg = original.copy_shallow()

            if msg.role == ChatMessageType.SYSTEM:
                if section is not None:
                    raise ChainParseError("unexpected system message in the middle of a chain")
                section = ChainSection(header=Header(system_message=msg))
                ast.add_section(section)
                pair = None

            elif msg.role == ChatMessageType.HUMAN:
                if section is not None and section.header.human_message is not None:
                    if not section.body:
                        if not force:
                            raise ChainParseError("double human messages in the middle of a chain")
                        section.header.human_message.parts.extend(msg.parts)
                    else:
                        _close_body_pair(pair, force)
                        section = ChainSection(header=Header(human_message=msg))
                        ast.add_section(section)
                        pair = None
                elif section is not None:
                    if section.body and not force:
                        raise ChainParseError("got human message after AI message in the middle of a chain")
                    section.header = Header(system_message=section.header.system_message, human_message=msg)
                else:
                    section = ChainSection(header=Header(human_message=msg))
                    ast.add_section(section)
                    pair = None

            elif msg.role == ChatMessageType.AI:
                if section is None:
                    raise ChainParseError("unexpected AI message without a preceding header")
                _close_body_pair(pair, force)
                pair = BodyPair.build(msg)
                section.add_body_pair(pair)

            elif msg.role == ChatMessageType.TOOL:
                if section is None:
                    raise ChainParseError("unexpected tool message without a preceding header")
                if pair is None or pair.type == BodyPairType.COMPLETION:
                    if not force:
                        raise ChainParseError(
                            "unexpected tool message without a preceding AI message with tool calls"
                        )
                    logger.debug("Skipping stray tool message")
                    continue
                pair.tool_messages.append(msg)
                _fix_unmatched_tool_calls(pair, force)

            else:
                raise ChainParseError(f"unexpected message role: {msg.role}")

        _close_body_pair(pair, force)
        return ast

    @property
    def size(self) -> int:
        return sum(section.size for section in self.sections)

    def messages(self) -> List[Message]:
        """Flatten the chain back into its message sequence."""
        result: List[Message] = []
        for section in self.sections:
            result.extend(section.messages())
        return result

    def add_section(self, section: ChainSection) -> None:
        self.sections.append(section)

    def append_human_message(self, content: str) -> None:
        """Add user input to the end of the chain.

        Opens a new section when the chain is empty or the last section
        already has answers, fills a header that has no human message yet,
        and otherwise appends a text part to the pending human message.

        Args:
            content (str): Text of the human message.
        """
        part = TextContent(text=content)

        if not self.sections or self.sections[-1].body:
            human = Message(role=ChatMessageType.HUMAN, parts=[part])
            self.add_section(ChainSection(header=Header(human_message=human)))
            return

        last = self.sections[-1]
        if last.header.human_message is None:
            last.header = Header(
                system_message=last.header.system_message,
                human_message=Message(role=ChatMessageType.HUMAN, parts=[part]),
            )
            return

        last.header.human_message.parts.append(part)

    def add_tool_response(self, tool_call_id: str, tool_name: str, content: str) -> None:
        """Set the response of a tool call, replacing any previous one.

        Args:
            tool_call_id (str): ID of the answered call.
            tool_name (str): Name of the tool.
            content (str): Tool output.

        Raises:
            ToolCallNotFoundError: If no request/response pair holds the call.
        """
        for section in self.sections:
            for pair in section.body:
                if pair.type != BodyPairType.REQUEST_RESPONSE:
                    continue
                if not any(call.id == tool_call_id for call in pair.ai_message.tool_calls()):
                    continue

                for msg in pair.tool_messages:
                    for idx, part in enumerate(msg.parts):
                        if isinstance(part, ToolCallResponse) and part.tool_call_id == tool_call_id:
                            msg.parts[idx] = part.model_copy(update={"content": content})
                            return

                response = ToolCallResponse(tool_call_id=tool_call_id, name=tool_name, content=content)
                if pair.tool_messages:
                    pair.tool_messages[-1].parts.append(response)
                else:
                    pair.tool_messages.append(Message(role=ChatMessageType.TOOL, parts=[response]))
                return

        raise ToolCallNotFoundError(tool_call_id)

    def find_tool_call_responses(self, tool_call_id: str) -> List[ToolCallResponse]:
        """All responses to *tool_call_id* in request/response pairs."""
        responses: List[ToolCallResponse] = []
        for section in self.sections:
            for pair in section.body:
                if pair.type != BodyPairType.REQUEST_RESPONSE:
                    continue
                for msg in pair.tool_messages:
                    responses.extend(r for r in msg.tool_responses() if r.tool_call_id == tool_call_id)
        return responses

    def normalize_tool_call_ids(self, template: str) -> Dict[str, str]:
        """Regenerate tool call IDs that do not match *template*.

        Needed when a chain recorded with one provider is replayed to
        another that validates a different ID format. Responses are renamed
        along with their calls.

        Args:
            template (str): Tool call ID template of the new provider.

        Returns:
            Dict[str, str]: Old ID mapped to the new one for every
                replaced ID.
        """
        mapping: Dict[str, str] = {}
        for section in self.sections:
            for pair in section.body:
                if pair.type not in (BodyPairType.REQUEST_RESPONSE, BodyPairType.SUMMARIZATION):
                    continue

                parts = pair.ai_message.parts
                for idx, part in enumerate(parts):
                    if not isinstance(part, ToolCall):
                        continue
                    if matches_pattern(template, part.id, part.name):
                        continue
                    new_id = generate_from_pattern(template, part.name)
                    mapping[part.id] = new_id
                    parts[idx] = part.model_copy(update={"id": new_id})

                for msg in pair.tool_messages:
                    for idx, part in enumerate(msg.parts):
                        if isinstance(part, ToolCallResponse) and part.tool_call_id in mapping:
                            msg.parts[idx] = part.model_copy(update={"tool_call_id": mapping[part.tool_call_id]})

        if mapping:
            logger.info("Normalized %d tool call ID(s) to template %s", len(mapping), template)
        return mapping

    def clear_reasoning(self) -> None:
        """Drop reasoning from every text and tool call part.

        Reasoning signatures are provider specific and rejected by any
        other provider.
        """
        for section in self.sections:
            for msg in section.header.messages():
                _clear_message_reasoning(msg)
            for pair in section.body:
                for msg in pair.messages():
                    _clear_message_reasoning(msg)

    def __str__(self) -> str:
        lines = ["ChainAST {"]
        for sdx, section in enumerate(self.sections):
            lines.append(f"  Section {sdx} {{")
            lines.append("    Header {")
            if section.header.system_message is not None:
                lines.append("      SystemMessage")
            if section.header.human_message is not None:
                lines.append("      HumanMessage")
            lines.append("    }")
            lines.append("    Body {")
            for pdx, pair in enumerate(section.body):
                lines.append(f"      BodyPair {pdx} ({pair.type}) {{")
                lines.append("        AIMessage")
                lines.append(f"        ToolMessages: {len(pair.tool_messages)}")
                lines.append("      }")
            lines.append("    }")
            lines.append("  }")
        lines.append("}")
        return "\n".join(lines) + "\n"


def _close_body_pair(pair: Optional[BodyPair], force: bool) -> None:
    """Answer calls still pending when the pair ends, or fail."""
    if pair is None or pair.type == BodyPairType.COMPLETION:
        return

    info = pair.tool_calls_info()
    if not info.pending_ids:
        return
    if not force:
        raise ChainParseError(f"tool calls with IDs [{', '.join(info.pending_ids)}] have no response")

    for call_id in info.pending_ids:
        call = info.pending[call_id].tool_call
        pair.tool_messages.append(
            Message(
                role=ChatMessageType.TOOL,
                parts=[
                    ToolCallResponse(
                        tool_call_id=call_id,
                        name=call.name if call is not None else "",
                        content=FALLBACK_RESPONSE_CONTENT,
                    )
                ],
            )
        )
    logger.debug("Added fallback responses for pending tool calls: %s", info.pending_ids)


def _fix_unmatched_tool_calls(pair: BodyPair, force: bool) -> None:
    """Add fallback calls for responses nobody asked for, or fail."""
    info = pair.tool_calls_info()
    if not info.unmatched_ids:
        return
    if not force:
        raise ChainParseError(f"tool calls with IDs [{', '.join(info.unmatched_ids)}] have no response")

    for call_id in info.unmatched_ids:
        response = info.unmatched[call_id].response
        pair.ai_message.parts.append(
            ToolCall(
                id=call_id,
                name=response.name if response is not None else "",
                arguments=FALLBACK_REQUEST_ARGS,
            )
        )
    logger.debug("Added fallback tool calls for unmatched responses: %s", info.unmatched_ids)


def _clear_message_reasoning(msg: Message) -> None:
    for idx, part in enumerate(msg.parts):
        if isinstance(part, (TextContent, ToolCall)) and part.reasoning is not None:
            msg.parts[idx] = part.model_copy(update={"reasoning": None})
