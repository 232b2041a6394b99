"""add_message_notify_trigger

Revision ID: b7d2f5a8c3e1
Revises: a1c4e7b2d9f0
Create Date: 2026-03-02 11:40:09.552731

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7d2f5a8c3e1"
down_revision: str | Sequence[str] | None = "a1c4e7b2d9f0"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """NOTIFY ``messages_inserted`` with the new row's id and room on every insert.

    The API process LISTENs on this channel and fans the ids out to the
    websocket views of that room. The payload carries ids only; subscribers
    re-read the row joined with its author.
    """
    op.execute("""
        CREATE OR REPLACE FUNCTION notify_message_inserted()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            PERFORM pg_notify(
                'messages_inserted',
                json_build_object('id', NEW.id, 'room_id', NEW.room_id)::text
            );
            RETURN NEW;
        END;
        $$;
    """)
    op.execute("""
        CREATE TRIGGER messages_notify_insert
            AFTER INSERT ON messages
            FOR EACH ROW EXECUTE FUNCTION notify_message_inserted();
    """)


def downgrade() -> None:
    """Remove the insert trigger and its function."""
    op.execute("DROP TRIGGER IF EXISTS messages_notify_insert ON messages;")
    op.execute("DROP FUNCTION IF EXISTS notify_message_inserted();")
