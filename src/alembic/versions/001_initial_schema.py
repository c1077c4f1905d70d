"""Initial schema -- tables, indexes, and protective triggers.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op

from artmarket.schema_sql import (
    indexes,
    tables_art,
    tables_core,
    tables_marketplace,
    triggers,
)

revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _execute_all(statements: list[str]) -> None:
    """Execute a list of SQL statements sequentially."""
    for stmt in statements:
        op.execute(stmt)


def upgrade() -> None:
    _execute_all(tables_core.ALL)
    _execute_all(tables_art.ALL)
    _execute_all(tables_marketplace.ALL)
    _execute_all(indexes.ALL)
    _execute_all(triggers.FUNCTIONS_ALL)
    _execute_all(triggers.TRIGGERS_ALL)


def downgrade() -> None:
    _drop_triggers()
    _drop_functions()
    _drop_tables()


def _drop_triggers() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_artwork_sold_final ON artworks;")
    op.execute("DROP TRIGGER IF EXISTS trg_messages_append_only ON messages;")
    op.execute("DROP TRIGGER IF EXISTS trg_orders_immutable ON orders;")
    op.execute(
        "DROP TRIGGER IF EXISTS trg_processed_webhooks_immutable "
        "ON processed_webhooks;"
    )


def _drop_functions() -> None:
    op.execute("DROP FUNCTION IF EXISTS check_sold_is_final();")
    op.execute("DROP FUNCTION IF EXISTS raise_immutable_error();")


def _drop_tables() -> None:
    tables = [
        "processed_webhooks",
        "orders",
        "messages",
        "artworks",
        "profiles",
    ]
    for table in tables:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
