"""add_rls_policies

Revision ID: c9e3a6d1f4b2
Revises: b7d2f5a8c3e1
Create Date: 2026-03-02 12:05:51.104377

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c9e3a6d1f4b2"
down_revision: str | Sequence[str] | None = "b7d2f5a8c3e1"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = ["profiles", "ai_services", "reviews", "favorites", "chat_rooms", "messages"]


def upgrade() -> None:
    """Row Level Security for direct Supabase client access.

    The API connects with a role that bypasses RLS and enforces ownership in
    the service layer. These policies cover clients that talk to the
    database through Supabase directly: everything is publicly readable,
    writes are limited to the row owner.
    """
    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")
        op.execute(f"CREATE POLICY {table}_select ON {table} FOR SELECT USING (true);")

    # --- Profiles: one row per auth user, id must match ---
    op.execute("""
        CREATE POLICY profiles_insert ON profiles
            FOR INSERT WITH CHECK (id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY profiles_update ON profiles
            FOR UPDATE USING (id = (SELECT auth.uid()));
    """)

    # --- AI services: any signed-in user creates, creator edits ---
    op.execute("""
        CREATE POLICY ai_services_insert ON ai_services
            FOR INSERT WITH CHECK (created_by = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY ai_services_update ON ai_services
            FOR UPDATE USING (created_by IS NULL OR created_by = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY ai_services_delete ON ai_services
            FOR DELETE USING (created_by IS NULL OR created_by = (SELECT auth.uid()));
    """)

    # --- Reviews and favorites: owner only ---
    for table in ["reviews", "favorites"]:
        op.execute(f"""
            CREATE POLICY {table}_insert ON {table}
                FOR INSERT WITH CHECK (user_id = (SELECT auth.uid()));
        """)
        op.execute(f"""
            CREATE POLICY {table}_update ON {table}
                FOR UPDATE USING (user_id = (SELECT auth.uid()));
        """)
        op.execute(f"""
            CREATE POLICY {table}_delete ON {table}
                FOR DELETE USING (user_id = (SELECT auth.uid()));
        """)

    # --- Chat: rooms by their creator, messages as oneself, append-only ---
    op.execute("""
        CREATE POLICY chat_rooms_insert ON chat_rooms
            FOR INSERT WITH CHECK (created_by = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY messages_insert ON messages
            FOR INSERT WITH CHECK (user_id = (SELECT auth.uid()));
    """)


def downgrade() -> None:
    """Drop all policies and disable RLS."""
    policies = {
        "profiles": ["select", "insert", "update"],
        "ai_services": ["select", "insert", "update", "delete"],
        "reviews": ["select", "insert", "update", "delete"],
        "favorites": ["select", "insert", "update", "delete"],
        "chat_rooms": ["select", "insert"],
        "messages": ["select", "insert"],
    }
    for table, actions in policies.items():
        for action in actions:
            op.execute(f"DROP POLICY IF EXISTS {table}_{action} ON {table};")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")
