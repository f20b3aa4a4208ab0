# ============================================================================
# CLAUDE CONTEXT - SCHEMA SERVICE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Domain service - Schema synchronization and drafting
# PURPOSE: Replace a data model's stored schema with a newly parsed one
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: SchemaService, SchemaSyncResult, SchemaDrafter, service exceptions
# DEPENDENCIES: psycopg_pool, sdl, repositories
# ============================================================================
"""
SchemaService

Coordination layer between the SDL engine (sdl package) and the stored
projection (repositories).

Encodes the rules for:
- Replace (parse, lock, delete, insert, relink relations, commit)
- Read back (load projection, render canonical SDL)
- Drafting (external text generator in, reparsed SDL out, chat history kept)
- Data model metadata with ownership checks

A replace is all-or-nothing: every write happens in one transaction and
any failure rolls the projection back to its prior state.

Pattern: Constructor injection of AsyncConnectionPool, repos instantiated
in __init__, async methods.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from psycopg_pool import AsyncConnectionPool

from core.config import get_defaults
from core.contracts import ChatSender, DbType, DiagnosticKind, RelationType
from core.logging import get_logger, log_checkpoint, log_context
from core.models import (
    ChatMessage,
    DataModel,
    ModelEntity,
    ModelField,
    ModelRelation,
    PersistedSchema,
)
from repositories import (
    ChatRepository,
    DataModelRepository,
    SchemaRepository,
    set_statement_timeout,
)
from sdl import Diagnostic, Schema, parse, serialize

logger = get_logger(__name__)


# Instructions and the current SDL text (None for a new schema) in,
# complete SDL text out.
SchemaDrafter = Callable[[str, Optional[str]], Awaitable[str]]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class SchemaServiceError(Exception):
    """Base class for schema service failures."""


class Unauthenticated(SchemaServiceError):
    """No acting principal."""


class NotFound(SchemaServiceError):
    """Data model does not exist."""


class Forbidden(SchemaServiceError):
    """Principal does not own the data model."""


class InvalidSchema(SchemaServiceError):
    """SDL text did not parse; nothing was written."""

    def __init__(self, errors: List[Diagnostic], message: str = "Schema is invalid"):
        self.errors = list(errors)
        super().__init__(message)


class PersistenceFailure(SchemaServiceError):
    """Storage failed mid-replace; the transaction was rolled back."""


class DraftFailure(SchemaServiceError):
    """The schema drafter could not produce any text."""


# ============================================================================
# RESULT
# ============================================================================

@dataclass
class SchemaSyncResult:
    """Outcome of a committed replace."""
    persisted: PersistedSchema
    schema: Schema
    skipped: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_model_id": self.persisted.data_model_id,
            "entities": [e.model_dump(mode="json") for e in self.persisted.entities],
            "fields": [f.model_dump(mode="json") for f in self.persisted.fields],
            "relations": [r.model_dump(mode="json") for r in self.persisted.relations],
            "skipped_relations": [d.to_dict() for d in self.skipped],
        }


# ============================================================================
# SERVICE
# ============================================================================

class SchemaService:
    """Parse, persist and render data model schemas."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool
        self.data_model_repo = DataModelRepository(pool)
        self.schema_repo = SchemaRepository(pool)
        self.chat_repo = ChatRepository(pool)

    # ================================================================
    # DATA MODELS
    # ================================================================

    async def create_data_model(
        self,
        principal_id: Optional[str],
        name: str,
        version: str = "1",
        description: str = "",
        db_type: DbType = DbType.SQL,
    ) -> DataModel:
        """Create an empty data model owned by the principal."""
        self._require_principal(principal_id)
        model = DataModel(
            name=name,
            version=version,
            description=description,
            db_type=db_type,
            owner_id=principal_id,
        )
        return await self._persist(self.data_model_repo.create(model), "data model create")

    async def get_data_model(self, data_model_id: int, principal_id: Optional[str]) -> DataModel:
        """
        Get a data model the principal owns.

        Raises:
            Unauthenticated, NotFound, Forbidden
        """
        self._require_principal(principal_id)
        model = await self._persist(self.data_model_repo.get(data_model_id), "data model get")
        return self._check_owner(model, data_model_id, principal_id)

    async def list_data_models(self, principal_id: Optional[str]) -> List[DataModel]:
        """List the principal's data models."""
        self._require_principal(principal_id)
        return await self._persist(
            self.data_model_repo.list_for_owner(principal_id), "data model list"
        )

    # ================================================================
    # PARSE
    # ================================================================

    def validate_text(self, text: str) -> Schema:
        """Parse SDL text without persisting anything."""
        limit = get_defaults().schema.max_source_bytes
        size = len(text.encode("utf-8"))
        if size > limit:
            return Schema(errors=[Diagnostic(
                line=0,
                message=f"Schema text is {size} bytes; the limit is {limit}",
            )])
        return parse(text)

    def format_text(self, text: str) -> Tuple[Optional[str], Schema]:
        """
        Canonical rendering of SDL text, under the same size limit as a save.

        Returns:
            (text, schema); text is None when the schema has errors
        """
        schema = self.validate_text(text)
        if not schema.is_valid:
            return None, schema
        return serialize(schema), schema

    # ================================================================
    # REPLACE
    # ================================================================

    async def replace_schema(
        self,
        data_model_id: int,
        text: str,
        principal_id: Optional[str],
    ) -> SchemaSyncResult:
        """
        Replace the stored schema of a data model with the parse of text.

        Steps:
            1. Require a principal
            2. Parse; invalid text never opens a transaction
            3. Lock the data model row, check existence and ownership
            4. Delete relations, fields, entities
            5. Insert entities and fields in declaration order
            6. Insert relations whose endpoints resolve; skip the rest
            7. Touch the data model and commit

        Raises:
            Unauthenticated, InvalidSchema, NotFound, Forbidden,
            PersistenceFailure
        """
        self._require_principal(principal_id)

        schema = self.validate_text(text)
        if not schema.is_valid:
            raise InvalidSchema(schema.errors)

        with log_context(
            data_model_id=data_model_id,
            principal_id=principal_id,
            operation="replace_schema",
        ):
            log_checkpoint("schema_replace_started", {
                "entity_count": len(schema.entities),
                "relation_count": len(schema.relations),
            })

            timeout_ms = get_defaults().database.statement_timeout_ms
            try:
                async with self.pool.connection() as conn:
                    async with conn.transaction():
                        await set_statement_timeout(conn, timeout_ms)

                        model = await self.data_model_repo.get_for_update(conn, data_model_id)
                        self._check_owner(model, data_model_id, principal_id)

                        persisted, skipped = await self._write_projection(
                            conn, data_model_id, schema
                        )
                        await self.data_model_repo.touch(conn, data_model_id)
            except SchemaServiceError:
                raise
            except Exception as e:
                logger.error(f"Schema replace rolled back for data model {data_model_id}: {e}")
                raise PersistenceFailure(
                    f"Failed to save schema for data model {data_model_id}"
                ) from e

            log_checkpoint("schema_replace_committed", {
                "entities": len(persisted.entities),
                "fields": len(persisted.fields),
                "relations": len(persisted.relations),
                "skipped_relations": len(skipped),
            })

        return SchemaSyncResult(persisted=persisted, schema=schema, skipped=skipped)

    async def _write_projection(
        self,
        conn,
        data_model_id: int,
        schema: Schema,
    ) -> Tuple[PersistedSchema, List[Diagnostic]]:
        """Delete and rewrite the projection on conn; caller owns the transaction."""
        await self.schema_repo.delete_projection(conn, data_model_id)

        persisted = PersistedSchema(data_model_id=data_model_id)
        entity_ids: Dict[str, int] = {}
        field_ids: Dict[Tuple[str, str], int] = {}

        for position, entity in enumerate(schema.entities.values()):
            entity_record = await self.schema_repo.insert_entity(conn, ModelEntity(
                data_model_id=data_model_id,
                name=entity.name,
                position=position,
            ))
            entity_ids[entity.name] = entity_record.id
            persisted.entities.append(entity_record)

            for field_position, schema_field in enumerate(entity.fields.values()):
                field_record = await self.schema_repo.insert_field(
                    conn,
                    ModelField.from_schema_field(entity_record.id, schema_field, field_position),
                )
                field_ids[(entity.name, schema_field.name)] = field_record.id
                persisted.fields.append(field_record)

        skipped: List[Diagnostic] = []
        for relation in schema.relations:
            from_field_id = field_ids.get(relation.key)
            to_field_id = field_ids.get((relation.to_entity, relation.to_field))

            if from_field_id is None or to_field_id is None:
                message = (
                    f'Relation "{relation.name}" skipped: '
                    f'"{relation.to_entity}.{relation.to_field}" does not exist'
                )
                logger.warning(message)
                source_field = schema.entities[relation.from_entity].fields[relation.from_field]
                skipped.append(Diagnostic(
                    line=source_field.line,
                    message=message,
                    kind=DiagnosticKind.REFERENTIAL,
                ))
                continue

            relation_record = await self.schema_repo.insert_relation(conn, ModelRelation(
                data_model_id=data_model_id,
                name=relation.name,
                relation_type=RelationType.FOREIGN_KEY,
                from_entity_id=entity_ids[relation.from_entity],
                to_entity_id=entity_ids[relation.to_entity],
                from_field_id=from_field_id,
                to_field_id=to_field_id,
                cardinality=relation.cardinality,
                is_nullable=relation.is_nullable,
            ))
            persisted.relations.append(relation_record)

        return persisted, skipped

    # ================================================================
    # READ BACK
    # ================================================================

    async def get_schema(
        self,
        data_model_id: int,
        principal_id: Optional[str],
    ) -> Tuple[str, PersistedSchema]:
        """
        Load the stored schema and render it as canonical SDL.

        Returns:
            (text, persisted projection); text is "" for a model with no entities
        """
        await self.get_data_model(data_model_id, principal_id)
        persisted = await self._persist(self.schema_repo.load(data_model_id), "schema load")
        return serialize(persisted.to_schema()), persisted

    # ================================================================
    # DRAFTING
    # ================================================================

    async def draft_schema(
        self,
        drafter: SchemaDrafter,
        instructions: str,
        current_text: Optional[str] = None,
    ) -> Tuple[str, Schema]:
        """
        Ask the text generator for SDL and parse what comes back.

        Nothing is persisted. The returned Schema carries any errors in
        the draft.
        """
        text = await drafter(instructions, current_text)
        text = text or ""
        schema = self.validate_text(text)
        logger.info(
            f"Drafted schema: {len(schema.entities)} entities, "
            f"{len(schema.errors)} errors"
        )
        return text, schema

    async def apply_draft(
        self,
        data_model_id: int,
        drafter: SchemaDrafter,
        instructions: str,
        principal_id: Optional[str],
    ) -> SchemaSyncResult:
        """
        Draft against the stored schema, then replace it with the draft.

        The instructions and the outcome are appended to the data model's
        chat history, including drafts that were rejected or not saved.

        Raises:
            Unauthenticated, NotFound, Forbidden, DraftFailure,
            InvalidSchema, PersistenceFailure
        """
        current_text, _ = await self.get_schema(data_model_id, principal_id)
        await self._record_chat(data_model_id, ChatSender.USER, instructions)

        try:
            text, schema = await self.draft_schema(drafter, instructions, current_text or None)
        except Exception as e:
            logger.error(f"Schema drafter failed for data model {data_model_id}: {e}")
            await self._record_chat(data_model_id, ChatSender.AI, f"Draft failed: {e}")
            raise DraftFailure("Schema drafter failed") from e

        if not schema.is_valid:
            await self._record_chat(
                data_model_id,
                ChatSender.AI,
                f"Draft rejected: {len(schema.errors)} errors",
                schema_text=text,
            )
            raise InvalidSchema(schema.errors, message="Drafted schema is invalid")

        try:
            result = await self.replace_schema(data_model_id, text, principal_id)
        except SchemaServiceError:
            await self._record_chat(
                data_model_id, ChatSender.AI, "Draft could not be saved", schema_text=text
            )
            raise

        await self._record_chat(
            data_model_id,
            ChatSender.AI,
            f"Draft applied: {len(result.persisted.entities)} entities, "
            f"{len(result.persisted.relations)} relations",
            schema_text=text,
        )
        return result

    # ================================================================
    # CHAT HISTORY
    # ================================================================

    async def get_chat_history(
        self,
        data_model_id: int,
        principal_id: Optional[str],
    ) -> List[ChatMessage]:
        """Drafting conversation of a data model the principal owns, oldest first."""
        await self.get_data_model(data_model_id, principal_id)
        limit = get_defaults().drafter.history_limit
        return await self._persist(
            self.chat_repo.list_for_model(data_model_id, limit), "chat history"
        )

    async def _record_chat(
        self,
        data_model_id: int,
        sender: ChatSender,
        content: str,
        schema_text: Optional[str] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            data_model_id=data_model_id,
            sender=sender,
            content=content,
            schema_text=schema_text,
        )
        return await self._persist(self.chat_repo.add(message), "chat message insert")

    # ================================================================
    # HELPERS
    # ================================================================

    @staticmethod
    def _require_principal(principal_id: Optional[str]) -> None:
        if not principal_id:
            raise Unauthenticated("Authentication required")

    @staticmethod
    def _check_owner(
        model: Optional[DataModel],
        data_model_id: int,
        principal_id: str,
    ) -> DataModel:
        if model is None:
            raise NotFound(f"Data model {data_model_id} not found")
        if not model.is_owned_by(principal_id):
            raise Forbidden(f"Not allowed to access data model {data_model_id}")
        return model

    @staticmethod
    async def _persist(awaitable, operation: str):
        """Await a repository call, mapping storage errors to PersistenceFailure."""
        try:
            return await awaitable
        except SchemaServiceError:
            raise
        except Exception as e:
            logger.error(f"{operation} failed: {e}")
            raise PersistenceFailure(f"{operation} failed") from e


__all__ = [
    "SchemaService",
    "SchemaSyncResult",
    "SchemaDrafter",
    "SchemaServiceError",
    "Unauthenticated",
    "NotFound",
    "Forbidden",
    "InvalidSchema",
    "PersistenceFailure",
    "DraftFailure",
]
