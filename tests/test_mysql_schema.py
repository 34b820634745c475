"""Tests for the MySQL Schema driver against canned catalog output."""

import pytest

from automodels.database import CanonicalType, ForeignTable, MySqlSchema, SchemaManager
from automodels.database.mysql import columnize, wrap

from .fixtures import MockConnection


USERS_DDL = """CREATE TABLE `users` (
  `id` int(10) unsigned NOT NULL AUTO_INCREMENT,
  `email` varchar(255) NOT NULL,
  `name` varchar(191) NOT NULL,
  PRIMARY KEY (`id`),
  UNIQUE KEY `users_email_unique` (`email`),
  KEY `users_name_index` (`name`(10))
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"""

POSTS_DDL = """CREATE TABLE `posts` (
  `id` int(10) unsigned NOT NULL AUTO_INCREMENT,
  `user_id` int(10) unsigned NOT NULL,
  `account_tenant` int(11) NOT NULL,
  `account_number` int(11) NOT NULL,
  PRIMARY KEY (`id`),
  KEY `posts_user_id_foreign` (`user_id`),
  CONSTRAINT `posts_user_id_foreign` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`) ON DELETE CASCADE,
  CONSTRAINT `posts_account_foreign` FOREIGN KEY (`account_tenant`, `account_number`) REFERENCES `billing`.`accounts` (`tenant_id`, `number`)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"""

ACCOUNTS_DDL = """CREATE TABLE `accounts` (
  `tenant_id` int(11) NOT NULL,
  `number` int(11) NOT NULL,
  PRIMARY KEY (`tenant_id`,`number`)
) ENGINE=InnoDB"""


def column(field, type_, null="NO", default=None, extra="", comment=""):
    return {"Field": field, "Type": type_, "Null": null, "Default": default, "Extra": extra, "Comment": comment}


def tables(schema, base_tables, views=()):
    key = "Tables_in_%s" % schema

    def respond(params):
        names = base_tables if params[0] == "BASE TABLE" else views
        kind = params[0]
        return [{key: name, "Table_type": kind} for name in names]

    return respond


def create_mysql_connection() -> MockConnection:
    """Connection double for databases ``shop`` and ``billing``."""
    return (
        MockConnection("mysql", name="legacy")
        .add_response(r"^SHOW DATABASES", [
            {"Database": "billing"},
            {"Database": "information_schema"},
            {"Database": "performance_schema"},
            {"Database": "shop"},
        ])
        .add_response(r"SHOW FULL TABLES FROM `shop`", tables("shop", ["posts", "users"], ["active_users"]))
        .add_response(r"SHOW FULL TABLES FROM `billing`", tables("billing", ["accounts"]))
        .add_response(r"SHOW FULL COLUMNS FROM `shop`\.`users`", [
            column("id", "int(10) unsigned", extra="auto_increment"),
            column("email", "varchar(255)"),
            column("name", "varchar(191)", comment="Display name"),
        ])
        .add_response(r"SHOW FULL COLUMNS FROM `shop`\.`posts`", [
            column("id", "int(10) unsigned", extra="auto_increment"),
            column("user_id", "int(10) unsigned"),
            column("account_tenant", "int(11)"),
            column("account_number", "int(11)"),
        ])
        .add_response(r"SHOW FULL COLUMNS FROM `shop`\.`active_users`", [
            column("id", "int(10) unsigned"),
            column("name", "varchar(191)"),
        ])
        .add_response(r"SHOW FULL COLUMNS FROM `billing`\.`accounts`", [
            column("tenant_id", "int(11)"),
            column("number", "int(11)"),
        ])
        .add_response(r"SHOW CREATE TABLE `shop`\.`users`", [{"Table": "users", "Create Table": USERS_DDL}])
        .add_response(r"SHOW CREATE TABLE `shop`\.`posts`", [{"Table": "posts", "Create Table": POSTS_DDL}])
        .add_response(r"SHOW CREATE TABLE `billing`\.`accounts`", [{"Table": "accounts", "Create Table": ACCOUNTS_DDL}])
    )


@pytest.fixture
def mysql_manager():
    return SchemaManager(create_mysql_connection())


class TestMySqlSchemaLoading:
    """Test loading databases through SHOW statements."""

    def test_system_databases_are_excluded(self, mysql_manager):
        """Verify information_schema and friends are skipped."""
        assert mysql_manager.schema_names() == ["billing", "shop"]
        assert isinstance(mysql_manager.make("shop"), MySqlSchema)

    def test_tables_then_views(self, mysql_manager):
        """Verify base tables load first, then views."""
        assert list(mysql_manager.make("shop").tables()) == ["posts", "users", "active_users"]

    def test_columns(self, mysql_manager):
        """Verify SHOW FULL COLUMNS rows become Columns."""
        users = mysql_manager.blueprint("shop", "users")

        assert users.connection() == "legacy"
        assert list(users.columns()) == ["id", "email", "name"]
        assert users.column("id").type == CanonicalType.INT
        assert users.column("id").unsigned is True
        assert users.column("id").autoincrement is True
        assert users.column("name").comment == "Display name"

    def test_primary_key_and_indexes(self, mysql_manager):
        """Verify keys are recovered from the DDL, with prefix lengths dropped."""
        users = mysql_manager.blueprint("shop", "users")

        assert users.primary_key().columns == ("id",)
        assert [(key.name, key.index, key.columns) for key in users.indexes()] == [
            ("unique", "users_email_unique", ("email",)),
            ("index", "users_name_index", ("name",)),
        ]

    def test_composite_primary_key(self, mysql_manager):
        """Verify a composite primary key keeps column order."""
        accounts = mysql_manager.blueprint("billing", "accounts")
        assert accounts.primary_key().columns == ("tenant_id", "number")

    def test_foreign_keys(self, mysql_manager):
        """Verify local and cross-database foreign keys."""
        posts = mysql_manager.blueprint("shop", "posts")

        local, remote = posts.relations()

        assert local.index == "posts_user_id_foreign"
        assert local.columns == ("user_id",)
        assert local.references == ("id",)
        assert local.on == ForeignTable("shop", "users")

        assert remote.index == "posts_account_foreign"
        assert remote.columns == ("account_tenant", "account_number")
        assert remote.references == ("tenant_id", "number")
        assert remote.on == ForeignTable("billing", "accounts")

    def test_referencing_crosses_schemas(self, mysql_manager):
        """Verify the manager finds references from other databases."""
        accounts = mysql_manager.blueprint("billing", "accounts")

        [reference] = mysql_manager.referencing(accounts)

        assert reference.blueprint.qualified_table() == "shop.posts"
        assert reference.foreign_key.index == "posts_account_foreign"

    def test_views_skip_constraints(self, mysql_manager):
        """Verify views are not asked for their DDL."""
        view = mysql_manager.blueprint("shop", "active_users")

        assert view.is_view()
        assert list(view.columns()) == ["id", "name"]
        assert not any("active_users" in sql for sql in mysql_manager.connection.queries if "CREATE" in sql)


class TestMySqlHelpers:
    """Test DDL helpers."""

    def test_columnize_drops_sort_order(self):
        """Verify ASC/DESC and spaces are stripped from column lists."""
        assert columnize("a, b DESC,c ASC") == ["a", "b", "c"]

    def test_wrap_quotes_identifiers(self):
        """Verify identifiers are backtick-quoted and dotted."""
        assert wrap("shop", "users") == "`shop`.`users`"
        assert wrap("we`ird") == "`weird`"
