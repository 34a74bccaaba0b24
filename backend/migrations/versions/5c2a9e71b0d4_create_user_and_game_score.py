"""create user and game_score tables

Revision ID: 5c2a9e71b0d4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e71b0d4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('multiplayer_games', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('multiplayer_wins', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_user_username', 'user', ['username'])

    if 'game_score' not in existing_tables:
        op.create_table(
            'game_score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('game_type', sa.String(length=32), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('is_multiplayer', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_winner', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_game_score_user_id', 'game_score', ['user_id'])


def downgrade():
    op.drop_index('ix_game_score_user_id', table_name='game_score')
    op.drop_table('game_score')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
