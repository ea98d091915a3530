# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Conversion between LangChain messages and chain messages.

LangChain keeps tool calls beside the content while the chain model keeps
them as parts, so an AI message maps as:

    AIMessage(content, tool_calls, additional_kwargs)
      content                      -> TextContent parts
      tool_calls                   -> ToolCall parts (args as JSON text)
      reasoning_content            -> reasoning of the first text part
      Gemini thought signatures    -> reasoning signature of each ToolCall

Each ``ToolMessage`` maps to one tool message holding one response.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage

from chainsum.models import (
    BinaryContent,
    ChatMessageType,
    ContentReasoning,
    ImageURLContent,
    Message,
    TextContent,
    ToolCall,
    ToolCallResponse,
)

logger = logging.getLogger(__name__)

REASONING_CONTENT_KEY = "reasoning_content"
GEMINI_SIGNATURES_KEY = "__gemini_function_call_thought_signatures__"


def extract_text(content: Any) -> str:
    """Extract plain text from LangChain message content.

    Args:
        content (Any): Raw content (str, list, or other type).

    Returns:
        str: The concatenated text representation.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            item if isinstance(item, str) else item.get("text", "")
            for item in content
            if isinstance(item, (str, dict))
        )
    return str(content)


def _content_to_parts(content: Any) -> list:
    """Map LangChain content blocks to chain content parts."""
    if isinstance(content, str):
        return [TextContent(text=content)] if content else []
    if not isinstance(content, list):
        return [TextContent(text=str(content))]

    parts: list = []
    for block in content:
        if isinstance(block, str):
            parts.append(TextContent(text=block))
            continue
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            parts.append(TextContent(text=block.get("text", "")))
        elif block_type == "image_url":
            image = block.get("image_url")
            if isinstance(image, dict):
                parts.append(ImageURLContent(url=image.get("url", ""), detail=image.get("detail", "")))
            else:
                parts.append(ImageURLContent(url=str(image or "")))
        elif block_type == "media":
            data = block.get("data", b"")
            if isinstance(data, str):
                data = base64.b64decode(data)
            parts.append(BinaryContent(mime_type=block.get("mime_type", "application/octet-stream"), data=data))
        else:
            logger.debug("Skipping unsupported content block type: %s", block_type)
    return parts


def _parts_to_content(parts: Sequence[Any]) -> Any:
    """Map chain content parts to LangChain content (str when text only)."""
    blocks: List[Dict[str, Any]] = []
    for part in parts:
        if isinstance(part, TextContent):
            blocks.append({"type": "text", "text": part.text})
        elif isinstance(part, ImageURLContent):
            image: Dict[str, Any] = {"url": part.url}
            if part.detail:
                image["detail"] = part.detail
            blocks.append({"type": "image_url", "image_url": image})
        elif isinstance(part, BinaryContent):
            blocks.append(
                {
                    "type": "media",
                    "mime_type": part.mime_type,
                    "data": base64.b64encode(part.data).decode("ascii"),
                }
            )

    if not blocks:
        return ""
    if len(blocks) == 1 and blocks[0]["type"] == "text":
        return blocks[0]["text"]
    return blocks


def _tool_call_args(call: ToolCall) -> Dict[str, Any]:
    try:
        args = json.loads(call.arguments) if call.arguments else {}
    except json.JSONDecodeError:
        logger.warning("Tool call %s (%s) has non-JSON arguments, sending empty args", call.id, call.name)
        return {}
    if not isinstance(args, dict):
        logger.warning("Tool call %s (%s) arguments are not an object, sending empty args", call.id, call.name)
        return {}
    return args


def to_langchain_message(msg: Message) -> List[BaseMessage]:
    """Convert a chain message to LangChain messages.

    Tool messages with several responses expand into one ``ToolMessage``
    per response; every other role maps to exactly one message.

    Args:
        msg (Message): The chain message to convert.

    Returns:
        List[BaseMessage]: The corresponding LangChain messages.
    """
    if msg.role == ChatMessageType.SYSTEM:
        return [SystemMessage(content=_parts_to_content(msg.parts))]
    if msg.role == ChatMessageType.HUMAN:
        return [HumanMessage(content=_parts_to_content(msg.parts))]
    if msg.role == ChatMessageType.TOOL:
        return [
            ToolMessage(content=resp.content, tool_call_id=resp.tool_call_id, name=resp.name or None)
            for resp in msg.tool_responses()
        ]

    additional_kwargs: Dict[str, Any] = {}
    signatures: Dict[str, str] = {}
    tool_calls: List[Dict[str, Any]] = []
    for part in msg.parts:
        if isinstance(part, TextContent) and part.reasoning is not None and part.reasoning.content:
            additional_kwargs.setdefault(REASONING_CONTENT_KEY, part.reasoning.content)
        elif isinstance(part, ToolCall):
            tool_calls.append({"name": part.name, "args": _tool_call_args(part), "id": part.id, "type": "tool_call"})
            if part.reasoning is not None and part.reasoning.signature:
                signatures[part.id] = base64.b64encode(part.reasoning.signature).decode("ascii")
    if signatures:
        additional_kwargs[GEMINI_SIGNATURES_KEY] = signatures

    text_parts = [part for part in msg.parts if not isinstance(part, (ToolCall, ToolCallResponse))]
    return [
        AIMessage(
            content=_parts_to_content(text_parts),
            tool_calls=tool_calls,
            additional_kwargs=additional_kwargs,
        )
    ]


def to_langchain_messages(messages: Sequence[Message]) -> List[BaseMessage]:
    result: List[BaseMessage] = []
    for msg in messages:
        result.extend(to_langchain_message(msg))
    return result


def _decode_signature(value: Any) -> Optional[bytes]:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str) and value:
        return base64.b64decode(value)
    return None


def from_langchain_message(msg: BaseMessage) -> Message:
    """Convert a LangChain message to a chain message.

    Args:
        msg (BaseMessage): The LangChain message to convert.

    Returns:
        Message: The corresponding chain message.

    Raises:
        ValueError: If the message type has no chain role.
    """
    if isinstance(msg, SystemMessage):
        return Message(role=ChatMessageType.SYSTEM, parts=_content_to_parts(msg.content))
    if isinstance(msg, HumanMessage):
        return Message(role=ChatMessageType.HUMAN, parts=_content_to_parts(msg.content))
    if isinstance(msg, ToolMessage):
        return Message(
            role=ChatMessageType.TOOL,
            parts=[
                ToolCallResponse(
                    tool_call_id=msg.tool_call_id,
                    name=getattr(msg, "name", None) or "",
                    content=extract_text(msg.content),
                )
            ],
        )
    if isinstance(msg, AIMessage):
        additional_kwargs = getattr(msg, "additional_kwargs", None) or {}
        parts = _content_to_parts(msg.content)

        reasoning_text = additional_kwargs.get(REASONING_CONTENT_KEY)
        if reasoning_text:
            reasoning = ContentReasoning(content=reasoning_text)
            texts = [idx for idx, part in enumerate(parts) if isinstance(part, TextContent)]
            if texts:
                parts[texts[0]] = parts[texts[0]].model_copy(update={"reasoning": reasoning})
            else:
                parts.insert(0, TextContent(text="", reasoning=reasoning))

        signatures = additional_kwargs.get(GEMINI_SIGNATURES_KEY) or {}
        for tc in getattr(msg, "tool_calls", None) or []:
            signature = _decode_signature(signatures.get(tc.get("id") or ""))
            parts.append(
                ToolCall(
                    id=tc.get("id") or "",
                    name=tc.get("name", ""),
                    arguments=json.dumps(tc.get("args", {}), ensure_ascii=False),
                    reasoning=ContentReasoning(signature=signature) if signature is not None else None,
                )
            )
        return Message(role=ChatMessageType.AI, parts=parts)

    raise ValueError(f"unsupported message type: {type(msg).__name__}")


def from_langchain_messages(messages: Sequence[BaseMessage]) -> List[Message]:
    return [from_langchain_message(msg) for msg in messages]
