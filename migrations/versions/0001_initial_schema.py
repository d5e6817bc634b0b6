"""
initial schema: users, alert settings, cloud connections, samples, alerts

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy_utils import StringEncryptedType
from sqlalchemy_utils.types.encrypted.encrypted_type import AesEngine

from app.shared.core.security import get_encryption_key

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(128), nullable=False),
        sa.Column('theme', sa.String(10), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'alert_settings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('cost_threshold', sa.Float(), nullable=False),
        sa.Column('cpu_threshold', sa.Float(), nullable=False),
        sa.Column('memory_threshold', sa.Float(), nullable=False),
        sa.Column('storage_threshold', sa.Float(), nullable=False),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name='fk_alert_settings_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_alert_settings'),
        sa.UniqueConstraint('user_id', name='uq_alert_settings_user_id'),
    )
    op.create_index('ix_alert_settings_created_at', 'alert_settings', ['created_at'])

    op.create_table(
        'cloud_connections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('connected', sa.Boolean(), nullable=False),
        sa.Column('credentials_encrypted',
                  StringEncryptedType(sa.Text, get_encryption_key, AesEngine, 'pkcs5'),
                  nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name='fk_cloud_connections_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_cloud_connections'),
        sa.UniqueConstraint('user_id', 'provider', name='uq_cloud_connections_user_provider'),
    )
    op.create_index('ix_cloud_connections_user_id', 'cloud_connections', ['user_id'])
    op.create_index('ix_cloud_connections_created_at', 'cloud_connections', ['created_at'])

    op.create_table(
        'metric_samples',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('metric_type', sa.String(20), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(20), nullable=False),
        sa.Column('resource_id', sa.String(255), nullable=False),
        sa.Column('resource_name', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name='fk_metric_samples_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_metric_samples'),
    )
    op.create_index('ix_metric_samples_user_id', 'metric_samples', ['user_id'])
    op.create_index('ix_metric_samples_provider', 'metric_samples', ['provider'])
    op.create_index('ix_metric_samples_timestamp', 'metric_samples', ['timestamp'])
    op.create_index(
        'ix_metric_samples_lookup',
        'metric_samples',
        ['user_id', 'provider', 'metric_type', sa.text('timestamp DESC')],
    )

    op.create_table(
        'alerts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('alert_type', sa.String(20), nullable=False),
        sa.Column('threshold', sa.Float(), nullable=False),
        sa.Column('current_value', sa.Float(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('triggered', sa.Boolean(), nullable=False),
        sa.Column('resolved', sa.Boolean(), nullable=False),
        sa.Column('resolved_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE',
                                name='fk_alerts_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_alerts'),
    )
    op.create_index('ix_alerts_user_id', 'alerts', ['user_id'])
    op.create_index('ix_alerts_resolved', 'alerts', ['resolved'])
    op.create_index('ix_alerts_created_at', 'alerts', ['created_at'])
    op.create_index('ix_alerts_user_created', 'alerts', ['user_id', sa.text('created_at DESC')])


def downgrade() -> None:
    op.drop_table('alerts')
    op.drop_table('metric_samples')
    op.drop_table('cloud_connections')
    op.drop_table('alert_settings')
    op.drop_table('users')
