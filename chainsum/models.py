# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Message models shared by the chain parser and the summarizer.

A message is a role-tagged list of content parts. Sizes are measured in
UTF-8 bytes so that the compaction thresholds behave the same for every
provider regardless of its tokenizer.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ChatMessageType(str, Enum):
    """Message role enumeration.

    Attributes:
        SYSTEM (str): System prompt.
        HUMAN (str): User input.
        AI (str): Model output, optionally with tool calls.
        TOOL (str): Tool call responses.
    """

    SYSTEM = "system"
    HUMAN = "human"
    AI = "ai"
    TOOL = "tool"


class ContentReasoning(BaseModel):
    """Reasoning side channel attached to a content part.

    Attributes:
        content (str): Free-form thought text returned by the provider.
        signature (Optional[bytes]): Opaque provider signature proving the
            reasoning is authentic. Single use and bound to the content.
    """

    content: str = ""
    signature: Optional[bytes] = None

    def is_empty(self) -> bool:
        """Whether neither thought text nor a signature is present."""
        return not self.content and not self.signature


class TextContent(BaseModel):
    """Plain text part.

    Attributes:
        type (Literal["text"]): Part type discriminator.
        text (str): The text value.
        reasoning (Optional[ContentReasoning]): Reasoning emitted alongside
            the visible text.
    """

    type: Literal["text"] = "text"
    text: str
    reasoning: Optional[ContentReasoning] = None

    @property
    def size(self) -> int:
        return len(self.text.encode("utf-8"))


class ToolCall(BaseModel):
    """Tool invocation requested by the model.

    Attributes:
        type (Literal["tool_call"]): Part type discriminator.
        id (str): Correlation ID matching the tool call response.
        name (str): Name of the function to invoke.
        arguments (str): JSON-encoded arguments.
        reasoning (Optional[ContentReasoning]): Reasoning (usually only a
            signature) attached to the call.
    """

    type: Literal["tool_call"] = "tool_call"
    id: str = ""
    name: str
    arguments: str = "{}"
    reasoning: Optional[ContentReasoning] = None

    @property
    def size(self) -> int:
        """Bytes of ID, name and arguments.

        The call type (``"function"`` on the wire) is not counted.
        """
        return len(self.id.encode("utf-8")) + len(self.name.encode("utf-8")) + len(self.arguments.encode("utf-8"))


class ToolCallResponse(BaseModel):
    """Result of a tool invocation.

    Attributes:
        type (Literal["tool_call_response"]): Part type discriminator.
        tool_call_id (str): ID of the tool call being answered.
        name (str): Name of the tool that produced the result.
        content (str): Serialized tool output.
    """

    type: Literal["tool_call_response"] = "tool_call_response"
    tool_call_id: str
    name: str = ""
    content: str = ""

    @property
    def size(self) -> int:
        return (
            len(self.tool_call_id.encode("utf-8"))
            + len(self.name.encode("utf-8"))
            + len(self.content.encode("utf-8"))
        )


class ImageURLContent(BaseModel):
    """Image reference.

    Attributes:
        type (Literal["image_url"]): Part type discriminator.
        url (str): Image URL or data URI.
        detail (str): Optional rendering detail hint.
    """

    type: Literal["image_url"] = "image_url"
    url: str
    detail: str = ""

    @property
    def size(self) -> int:
        return len(self.url.encode("utf-8"))


class BinaryContent(BaseModel):
    """Inline binary payload.

    Attributes:
        type (Literal["binary"]): Part type discriminator.
        mime_type (str): MIME type of the payload.
        data (bytes): Raw bytes.
    """

    type: Literal["binary"] = "binary"
    mime_type: str = "application/octet-stream"
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)


ContentPart = Annotated[
    Union[TextContent, ToolCall, ToolCallResponse, ImageURLContent, BinaryContent],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """Role-tagged message made of ordered content parts.

    Attributes:
        role (ChatMessageType): The role of the message sender.
        parts (List[ContentPart]): Ordered content parts.
    """

    role: ChatMessageType
    parts: List[ContentPart] = Field(default_factory=list)

    @classmethod
    def text(cls, role: ChatMessageType, text: str) -> "Message":
        """Build a message holding a single text part.

        Args:
            role (ChatMessageType): Message role.
            text (str): Text value of the only part.

        Returns:
            Message: The new message.
        """
        return cls(role=role, parts=[TextContent(text=text)])

    @property
    def size(self) -> int:
        """Size in bytes: role overhead plus the encoded size of every part."""
        return len(self.role.value) + sum(part.size for part in self.parts)

    def tool_calls(self) -> Iterator[ToolCall]:
        """Iterate over the tool call parts of this message."""
        for part in self.parts:
            if isinstance(part, ToolCall):
                yield part

    def tool_responses(self) -> Iterator[ToolCallResponse]:
        """Iterate over the tool call response parts of this message."""
        for part in self.parts:
            if isinstance(part, ToolCallResponse):
                yield part

    def has_tool_calls(self) -> bool:
        return any(True for _ in self.tool_calls())

    def copy_shallow(self) -> "Message":
        """Copy the message with its own parts list.

        Parts themselves are shared; callers replace parts instead of
        editing them.
        """
        return self.model_copy(update={"parts": list(self.parts)})
