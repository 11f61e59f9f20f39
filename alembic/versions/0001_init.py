from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('entries',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('day_index', sa.Integer, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('ip', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_entries_day_index', 'entries', ['day_index'])

    op.create_table('winners',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('day_index', sa.Integer, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('selected_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('day_index', name='uq_winner_day')
    )

    op.create_table('kv_markers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('value', sa.String(64), nullable=False),
        sa.UniqueConstraint('key', name='uq_marker_key')
    )

def downgrade():
    op.drop_table('kv_markers')
    op.drop_table('winners')
    op.drop_index('ix_entries_day_index', table_name='entries')
    op.drop_table('entries')
