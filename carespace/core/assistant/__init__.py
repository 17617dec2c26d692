"""
Conversational front-end for availability queries.

Usage:
    from carespace.core.assistant import get_chat_assistant

    reply = get_chat_assistant().reply("labwork tomorrow from 2 to 4", doctor_id="D1")
    print(reply.message)
"""

from carespace.core.assistant.assistant import (
    ChatAssistant,
    ChatReply,
    get_chat_assistant,
    reset_chat_assistant,
)
from carespace.core.assistant.slots import (
    ChatIntent,
    ExtractedRequest,
    RequestExtractor,
    parse_request,
)

__all__ = [
    "ChatAssistant",
    "ChatReply",
    "get_chat_assistant",
    "reset_chat_assistant",
    "ChatIntent",
    "ExtractedRequest",
    "RequestExtractor",
    "parse_request",
]
