# ============================================================================
# CLAUDE CONTEXT - CHAT MESSAGE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core model - Drafting conversation attached to a data model
# PURPOSE: Persist user instructions and drafter replies per data model
# CREATED: 19 OCT 2026
# EXPORTS: ChatMessage
# DEPENDENCIES: pydantic
# ============================================================================
"""
ChatMessage Model

One line of the drafting conversation of a data model. AI replies that
carry a drafted schema keep its SDL text in schema_text.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import ChatSender


class ChatMessage(BaseModel):
    """
    Drafting chat message.

    Maps to: sdlapp.chat_messages
    """

    __sql_table__: ClassVar[str] = "chat_messages"
    __sql_schema__: ClassVar[str] = "sdlapp"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "data_model_id": "sdlapp.data_models(id)",
    }
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_chat_messages_data_model", ["data_model_id", "created_at"]),
    ]

    id: Optional[int] = Field(default=None)
    data_model_id: int
    sender: ChatSender
    content: str
    schema_text: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sender": self.sender.value,
            "content": self.content,
            "schema_text": self.schema_text,
            "created_at": self.created_at.isoformat(),
        }


__all__ = ["ChatMessage"]
