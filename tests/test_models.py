# ============================================================================
# STORE MODEL TESTS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Tests - Projection models and DDL metadata
# PURPOSE: Verify record <-> schema conversion and PydanticToSQL output
# CREATED: 18 OCT 2026
# ============================================================================
"""
Store Model Tests

Run with:
    pytest tests/test_models.py -v
"""

import pytest

from core.contracts import ScalarKind
from core.models import ChatMessage, DataModel, ModelEntity, ModelField, ModelRelation, PersistedSchema
from core.schema import PydanticToSQL, ddl_utils
from sdl import EntityRefType, EnumType, ScalarType, parse, serialize


# ============================================================================
# PROJECTION RECORDS
# ============================================================================

class TestModelField:
    """ModelField <-> SchemaField."""

    @pytest.mark.parametrize("declaration", [
        "email: string @unique @nullable(false)",
        "status: enum(active,suspended)[] @default(active)",
        "owner: User.email @index",
        "id: ID @primary",
    ])
    def test_round_trip(self, declaration):
        schema = parse(
            f"entity User {{\n  email: string\n  {declaration}\n}}"
            if not declaration.startswith("email")
            else f"entity User {{\n  {declaration}\n}}"
        )
        assert schema.is_valid
        original = list(schema.entities["User"].fields.values())[-1]

        record = ModelField.from_schema_field(1, original, position=3)

        assert record.position == 3
        assert record.to_schema_field() == original

    def test_enum_record(self):
        schema = parse("entity A {\n  s: enum(x,y)\n}")
        record = ModelField.from_schema_field(1, schema.entities["A"].fields["s"])

        assert record.field_type == "enum"
        assert record.enum_values == ["x", "y"]
        assert record.to_field_type() == EnumType(values=("x", "y"))

    def test_reference_record(self):
        schema = parse("entity A {\n  b: B[]\n}\nentity B {\n  id: ID\n}")
        record = ModelField.from_schema_field(1, schema.entities["A"].fields["b"])

        assert record.field_type == "B"
        assert record.is_array
        assert record.referenced_field is None
        assert record.to_field_type() == EntityRefType(target_entity="B", is_array=True)

    def test_scalar_record(self):
        record = ModelField(entity_id=1, name="n", field_type="bigint")
        assert record.to_field_type() == ScalarType(kind=ScalarKind.BIGINT)


class TestPersistedSchema:
    """PersistedSchema.to_schema()."""

    def test_orders_by_position(self):
        persisted = PersistedSchema(
            data_model_id=1,
            entities=[
                ModelEntity(id=20, data_model_id=1, name="Second", position=1),
                ModelEntity(id=10, data_model_id=1, name="First", position=0),
            ],
            fields=[
                ModelField(id=3, entity_id=10, name="b", field_type="int", position=1),
                ModelField(id=4, entity_id=10, name="a", field_type="int", position=0),
                ModelField(id=5, entity_id=20, name="first", field_type="First"),
            ],
        )

        schema = persisted.to_schema()

        assert list(schema.entities) == ["First", "Second"]
        assert list(schema.entities["First"].fields) == ["a", "b"]
        assert [r.name for r in schema.relations] == ["Second_first_First"]

    def test_renders_like_the_source(self):
        text = "entity A {\n  id: ID @primary\n  tags: string[]\n}\n"
        schema = parse(text)
        fields = [
            ModelField.from_schema_field(1, f, i)
            for i, f in enumerate(schema.entities["A"].fields.values())
        ]
        persisted = PersistedSchema(
            data_model_id=1,
            entities=[ModelEntity(id=1, data_model_id=1, name="A")],
            fields=fields,
        )

        assert serialize(persisted.to_schema()) == text


class TestDataModel:
    def test_ownership(self):
        model = DataModel(name="Shop", owner_id="alice")

        assert model.is_owned_by("alice")
        assert not model.is_owned_by("bob")
        assert not model.is_owned_by(None)


# ============================================================================
# DDL GENERATION
# ============================================================================

class TestPydanticToSQL:
    """DDL metadata read from the __sql_* class attributes."""

    def test_metadata(self):
        meta = PydanticToSQL.get_model_metadata(ModelRelation)

        assert meta["table"] == "model_relations"
        assert meta["primary_key"] == ["id"]
        assert len(meta["foreign_keys"]) == 5

    def test_unique_name_indexes_are_declared(self):
        indexes = PydanticToSQL.get_model_metadata(ModelField)["indexes"]
        unique = [i for i in indexes if isinstance(i, dict) and i.get("unique")]

        assert unique[0]["columns"] == ["entity_id", "name"]

    def test_type_mapping(self):
        gen = PydanticToSQL()
        fields = ModelField.model_fields

        assert gen.python_type_to_sql(fields["name"].annotation, fields["name"]) == "VARCHAR(255)"
        assert gen.python_type_to_sql(fields["enum_values"].annotation, fields["enum_values"]) == "JSONB"
        assert gen.python_type_to_sql(fields["is_array"].annotation, fields["is_array"]) == "BOOLEAN"
        assert gen.python_type_to_sql(fields["default_value"].annotation, fields["default_value"]) == "TEXT"

    def test_enum_types_are_collected(self):
        gen = PydanticToSQL()
        statements = gen.generate_all()

        assert set(gen.enums) == {"db_type", "relation_type", "cardinality", "chat_sender"}
        assert len(statements) > 10

    def test_enum_types_precede_tables(self):
        rendered = [stmt.as_string(None) for stmt in PydanticToSQL().generate_all()]

        first_enum = next(i for i, s in enumerate(rendered) if "AS ENUM" in s)
        first_table = next(i for i, s in enumerate(rendered) if s.startswith("CREATE TABLE"))
        assert first_enum < first_table
        assert not any(s.startswith("DROP TYPE") for s in rendered)

    def test_chat_messages_table(self):
        ddl = PydanticToSQL().generate_table(ChatMessage).as_string(None)

        assert ddl.startswith('CREATE TABLE IF NOT EXISTS "sdlapp"."chat_messages"')
        assert '"sender" "sdlapp"."chat_sender" NOT NULL' in ddl
        assert '"schema_text" TEXT' in ddl
        assert 'REFERENCES "sdlapp"."data_models" ("id") ON DELETE CASCADE' in ddl

    def test_column_defaults(self):
        gen = PydanticToSQL()
        fields = ModelField.model_fields

        json_default = gen._column_default("enum_values", fields["enum_values"], "JSONB", "sdlapp")
        created_default = gen._column_default("created_at", fields["created_at"], "TIMESTAMPTZ", "sdlapp")
        required = gen._column_default("name", fields["name"], "VARCHAR(255)", "sdlapp")

        assert [part.as_string(None) for part in json_default] == [" DEFAULT '[]'"]
        assert [part.as_string(None) for part in created_default] == [" DEFAULT NOW()"]
        assert required == []


class TestDdlUtils:
    """Composable DDL helpers."""

    def test_index_default_name(self):
        stmt = ddl_utils.create_index("sdlapp", "model_fields", ["entity_id", "position"])

        assert stmt.as_string(None) == (
            'CREATE INDEX IF NOT EXISTS "idx_model_fields_entity_id_position" '
            'ON "sdlapp"."model_fields" ("entity_id", "position")'
        )

    def test_unique_partial_index(self):
        stmt = ddl_utils.create_index(
            "sdlapp", "t", "name", name="uq_t_name", unique=True, where="deleted_at IS NULL"
        )

        assert stmt.as_string(None) == (
            'CREATE UNIQUE INDEX IF NOT EXISTS "uq_t_name" ON "sdlapp"."t" ("name") '
            "WHERE deleted_at IS NULL"
        )

    def test_enum_values_are_literals(self):
        stmt = ddl_utils.create_enum("sdlapp", "chat_sender", ["user", "o'brien"])

        rendered = stmt.as_string(None)
        assert "typname = 'chat_sender'" in rendered
        assert "AS ENUM ('user', 'o''brien')" in rendered

    def test_touch_trigger_is_idempotent(self):
        drop, create = ddl_utils.touch_trigger("sdlapp", "data_models")

        assert drop.as_string(None).startswith('DROP TRIGGER IF EXISTS "trg_data_models_touch"')
        assert create.as_string(None).endswith('EXECUTE FUNCTION "sdlapp"."touch_updated_at"()')
