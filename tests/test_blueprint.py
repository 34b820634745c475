"""Tests for BlueprintBuilder and Blueprint."""

import pytest

from automodels.database import BlueprintBuilder, Column, ForeignTable, Key
from automodels.errors import DuplicateColumnError, MalformedForeignKeyError, UnknownColumnError


class TestBlueprintBuilder:
    """Test the build-then-freeze lifecycle."""

    def test_build_keeps_column_order(self):
        """Verify columns keep their insertion (physical) order."""
        blueprint = (
            BlueprintBuilder("default", "app", "users")
            .with_column(Column("id"))
            .with_column(Column("name"))
            .with_column(Column("email"))
            .build()
        )

        assert list(blueprint.columns()) == ["id", "name", "email"]

    def test_duplicate_column_raises(self):
        """Verify adding a column twice raises DuplicateColumnError."""
        builder = BlueprintBuilder("default", "app", "users").with_column(Column("id"))

        with pytest.raises(DuplicateColumnError):
            builder.with_column(Column("id"))

    def test_foreign_key_length_mismatch_raises(self):
        """Verify unequal column/reference lists are rejected at build time."""
        builder = (
            BlueprintBuilder("default", "app", "posts")
            .with_column(Column("user_id"))
            .with_relation(Key.foreign(["user_id"], ["id", "tenant_id"], on=("app", "users")))
        )

        with pytest.raises(MalformedForeignKeyError) as exc_info:
            builder.build()

        assert exc_info.value.code == "MALFORMED_FOREIGN_KEY"

    def test_foreign_key_unknown_column_raises(self):
        """Verify a foreign key on a missing column is rejected."""
        builder = (
            BlueprintBuilder("default", "app", "posts")
            .with_column(Column("id"))
            .with_relation(Key.foreign(["user_id"], ["id"], on=("app", "users")))
        )

        with pytest.raises(MalformedForeignKeyError):
            builder.build()

    def test_empty_foreign_key_raises(self):
        """Verify a foreign key without columns is rejected."""
        builder = (
            BlueprintBuilder("default", "app", "posts")
            .with_column(Column("id"))
            .with_relation(Key.foreign([], [], on=("app", "users")))
        )

        with pytest.raises(MalformedForeignKeyError):
            builder.build()


class TestBlueprint:
    """Test Blueprint read accessors."""

    def test_identity(self, make_blueprint):
        """Verify schema, table and qualified name."""
        blueprint = make_blueprint("users", ["id"], primary=["id"])

        assert blueprint.connection() == "default"
        assert blueprint.schema() == "app"
        assert blueprint.table() == "users"
        assert blueprint.qualified_table() == "app.users"
        assert blueprint.is_table("app", "users")
        assert not blueprint.is_table("other", "users")
        assert not blueprint.is_view()

    def test_columns_are_read_only(self, make_blueprint):
        """Verify the columns mapping cannot be mutated."""
        blueprint = make_blueprint("users", ["id"])

        with pytest.raises(TypeError):
            blueprint.columns()["name"] = Column("name")

    def test_unknown_column_raises(self, make_blueprint):
        """Verify column() raises UnknownColumnError, which is also a LookupError."""
        blueprint = make_blueprint("users", ["id"])

        assert blueprint.has_column("id")
        assert not blueprint.has_column("missing")
        with pytest.raises(UnknownColumnError):
            blueprint.column("missing")
        with pytest.raises(LookupError):
            blueprint.column("missing")

    def test_primary_key_explicit(self, make_blueprint):
        """Verify an explicit primary key wins over unique keys."""
        blueprint = make_blueprint("users", ["id", "email"], primary=["id"], unique=[["email"]])

        assert blueprint.primary_key().columns == ("id",)
        assert blueprint.primary_key().name == "primary"

    def test_primary_key_falls_back_to_unique(self, make_blueprint):
        """Verify the first unique key stands in for a missing primary key."""
        blueprint = make_blueprint("profiles", ["user_id", "slug"], unique=[["user_id"], ["slug"]])

        assert blueprint.primary_key().columns == ("user_id",)

    def test_primary_key_never_none(self, make_blueprint):
        """Verify a table without keys gets an empty primary key, not None."""
        blueprint = make_blueprint("logs", ["message"])

        primary_key = blueprint.primary_key()
        assert primary_key is not None
        assert primary_key.columns == ()
        assert not blueprint.has_composite_primary_key()

    def test_composite_primary_key(self, make_blueprint):
        """Verify composite primary keys are detected."""
        blueprint = make_blueprint("role_user", ["role_id", "user_id"], primary=["role_id", "user_id"])
        assert blueprint.has_composite_primary_key()

    def test_is_unique_key_single_column_only(self, make_blueprint):
        """Verify only single-column unique keys are consulted."""
        blueprint = make_blueprint(
            "memberships", ["user_id", "team_id", "badge_id"],
            unique=[["user_id", "team_id"], ["badge_id"]],
        )

        assert blueprint.is_unique_key(["badge_id"])
        assert blueprint.is_unique_key(Key.foreign(["badge_id"], ["id"], on=("app", "badges")))
        assert not blueprint.is_unique_key(["user_id"])
        assert not blueprint.is_unique_key(["user_id", "team_id"])

    def test_unique_is_subset_of_indexes(self):
        """Verify unique() filters indexes by kind."""
        blueprint = (
            BlueprintBuilder("default", "app", "users")
            .with_column(Column("email"))
            .with_column(Column("name"))
            .with_index(Key.unique(["email"], index="users_email_unique"))
            .with_index(Key.plain(["name"], index="users_name_index"))
            .build()
        )

        assert len(blueprint.indexes()) == 2
        assert [key.index for key in blueprint.unique()] == ["users_email_unique"]

    def test_references(self, make_blueprint):
        """Verify references() returns only keys pointing at the other Blueprint."""
        users = make_blueprint("users", ["id"], primary=["id"])
        teams = make_blueprint("teams", ["id"], primary=["id"])
        posts = make_blueprint(
            "posts", ["id", "author_id", "editor_id", "team_id"], primary=["id"],
            foreign=[
                (["author_id"], ["id"], "app.users"),
                (["team_id"], ["id"], "app.teams"),
                (["editor_id"], ["id"], "app.users"),
            ],
        )

        assert [key.columns for key in posts.references(users)] == [("author_id",), ("editor_id",)]
        assert [key.columns for key in posts.references(teams)] == [("team_id",)]
        assert users.references(posts) == []

    def test_references_respect_schema(self, make_blueprint):
        """Verify a same-named table in another schema is not a match."""
        users = make_blueprint("users", ["id"], primary=["id"], schema="archive")
        posts = make_blueprint("posts", ["id", "user_id"], foreign=[(["user_id"], ["id"], "app.users")])

        assert posts.references(users) == []

    def test_to_dict_is_plain_data(self, make_blueprint):
        """Verify to_dict produces a deterministic snapshot."""
        posts = make_blueprint(
            "posts", ["id", "user_id"], primary=["id"], foreign=[(["user_id"], ["id"], "app.users")],
        )

        data = posts.to_dict()

        assert data["table"] == "posts"
        assert [column["name"] for column in data["columns"]] == ["id", "user_id"]
        assert data["primary_key"]["columns"] == ["id"]
        assert data["relations"] == [{
            "name": "foreign",
            "index": "",
            "columns": ["user_id"],
            "references": ["id"],
            "on": {"schema": "app", "table": "users"},
        }]
        assert posts.to_dict() == data


class TestKey:
    """Test Key constructors."""

    def test_foreign_normalizes_target(self):
        """Verify the target becomes a ForeignTable and columns become tuples."""
        key = Key.foreign(["a", "b"], ["x", "y"], on=("app", "users"))

        assert key.on == ForeignTable("app", "users")
        assert key.columns == ("a", "b")
        assert key.references == ("x", "y")
        assert key.is_composite
