# ============================================================================
# CHAT MESSAGE REPOSITORY
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Domain - Drafting conversation storage
# PURPOSE: Database access for the chat_messages table
# CREATED: 19 OCT 2026
# ============================================================================
"""
ChatMessage Repository

Append-only log of the drafting conversation of each data model.
Messages are never updated; deleting a data model cascades to them.
"""

from typing import Any, Dict, List

from psycopg import sql
from psycopg.rows import dict_row

from core.models import ChatMessage
from infrastructure.base_repository import BaseRepository
from .database import TABLE_CHAT_MESSAGES


class ChatRepository(BaseRepository):
    """Repository for ChatMessage records."""

    async def add(self, message: ChatMessage) -> ChatMessage:
        """Insert a message and return it with its generated id."""
        with self._error_context("chat message insert", message.data_model_id):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                        INSERT INTO {} (data_model_id, sender, content, schema_text, created_at)
                        VALUES (%(data_model_id)s, %(sender)s, %(content)s, %(schema_text)s, %(created_at)s)
                        RETURNING id
                    """).format(TABLE_CHAT_MESSAGES),
                    {
                        "data_model_id": message.data_model_id,
                        "sender": message.sender.value,
                        "content": message.content,
                        "schema_text": message.schema_text,
                        "created_at": message.created_at,
                    },
                )
                row = await result.fetchone()

        message.id = row["id"]
        return message

    async def list_for_model(self, data_model_id: int, limit: int = 200) -> List[ChatMessage]:
        """Messages of a data model, oldest first."""
        with self._error_context("chat history", data_model_id):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                        SELECT * FROM {}
                        WHERE data_model_id = %s
                        ORDER BY created_at, id
                        LIMIT %s
                    """).format(TABLE_CHAT_MESSAGES),
                    (data_model_id, limit),
                )
                rows = await result.fetchall()
        return [self._row_to_message(row) for row in rows]

    def _row_to_message(self, row: Dict[str, Any]) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            data_model_id=row["data_model_id"],
            sender=row["sender"],
            content=row["content"],
            schema_text=row.get("schema_text"),
            created_at=row["created_at"],
        )


__all__ = ["ChatRepository"]
