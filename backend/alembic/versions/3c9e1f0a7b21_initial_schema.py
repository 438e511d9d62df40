"""initial schema

Revision ID: 3c9e1f0a7b21
Revises:
Create Date: 2026-10-19 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f0a7b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'roles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text()),
        sa.Column('is_active', sa.Boolean()),
        *_timestamps(),
    )
    op.create_table(
        'role_permissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('role_id', sa.Uuid(), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('permission_key', sa.String(100), nullable=False),
        sa.Column('enabled', sa.Boolean()),
        sa.UniqueConstraint('role_id', 'permission_key', name='uq_role_permission'),
    )
    op.create_index(op.f('ix_role_permissions_role_id'), 'role_permissions', ['role_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('department', sa.String(100)),
        sa.Column('role_id', sa.Uuid(), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('is_active', sa.Boolean()),
        *_timestamps(),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('ip_address', sa.String(100)),
        sa.Column('user_agent', sa.String(500)),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked', sa.Boolean()),
        *_timestamps(),
    )
    op.create_index(op.f('ix_sessions_user_id'), 'sessions', ['user_id'])
    op.create_index(op.f('ix_sessions_revoked'), 'sessions', ['revoked'])

    op.create_table(
        'monitoring_alerts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('monitoring_type', sa.String(20), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('alert_type', sa.String(20), nullable=False),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('current_percentage', sa.Float(), nullable=False),
        sa.Column('context', sa.JSON()),
        sa.Column('detected_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolved', sa.Boolean()),
        sa.Column('resolved_at', sa.DateTime(timezone=True)),
        sa.Column('resolved_by', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('resolution_comment', sa.Text()),
        *_timestamps(),
    )
    op.create_index(op.f('ix_monitoring_alerts_detected_at'), 'monitoring_alerts', ['detected_at'])
    op.create_index(
        'ix_monitoring_alerts_key', 'monitoring_alerts',
        ['monitoring_type', 'subject', 'alert_type', 'resolved'],
    )

    op.create_table(
        'monitoring_alert_settings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('monitoring_type', sa.String(20), nullable=False, unique=True),
        sa.Column('anomaly_enabled', sa.Boolean()),
        sa.Column('anomaly_moving_avg_days', sa.Integer()),
        sa.Column('anomaly_stddev_multiplier', sa.Float()),
        sa.Column('trend_enabled', sa.Boolean()),
        sa.Column('trend_consecutive_periods', sa.Integer()),
        *_timestamps(),
    )

    op.create_table(
        'backlog_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reference', sa.String(100)),
        sa.Column('queue', sa.String(255)),
        sa.Column('status', sa.String(100)),
        sa.Column('project_name', sa.String(255)),
        sa.Column('project_code', sa.String(100)),
        sa.Column('company_name', sa.String(255)),
        sa.Column('client_status', sa.String(100)),
        sa.Column('opened_at', sa.DateTime(timezone=True)),
        sa.Column('days_open', sa.Integer()),
        sa.Column('incident_type', sa.String(100)),
        sa.Column('state', sa.String(2)),
        sa.Column('city', sa.String(100)),
        sa.Column('assigned_account', sa.String(255)),
        *_timestamps(),
    )
    op.create_index(op.f('ix_backlog_items_reference'), 'backlog_items', ['reference'])
    op.create_index(op.f('ix_backlog_items_queue'), 'backlog_items', ['queue'])
    op.create_index(op.f('ix_backlog_items_opened_at'), 'backlog_items', ['opened_at'])

    op.create_table(
        'backlog_daily_totals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('data_ref', sa.Date(), nullable=False),
        sa.Column('total_backlog', sa.Integer(), nullable=False),
        sa.Column('above_30', sa.Integer(), nullable=False),
        sa.Column('above_50', sa.Integer(), nullable=False),
        sa.Column('average_age', sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_backlog_daily_totals_data_ref'), 'backlog_daily_totals', ['data_ref'], unique=True)

    op.create_table(
        'sla_snapshots',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('inside', sa.Integer(), nullable=False),
        sa.Column('outside', sa.Integer(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_sla_snapshots_kind'), 'sla_snapshots', ['kind'])
    op.create_index(op.f('ix_sla_snapshots_name'), 'sla_snapshots', ['name'])
    op.create_index(op.f('ix_sla_snapshots_recorded_at'), 'sla_snapshots', ['recorded_at'])

    op.create_table(
        'sla_tickets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reference', sa.String(100)),
        sa.Column('queue', sa.String(255)),
        sa.Column('project_name', sa.String(255)),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('closed_at', sa.DateTime(timezone=True)),
        sa.Column('sla_lost', sa.Boolean()),
        *_timestamps(),
    )
    op.create_index(op.f('ix_sla_tickets_reference'), 'sla_tickets', ['reference'])
    op.create_index(op.f('ix_sla_tickets_opened_at'), 'sla_tickets', ['opened_at'])
    op.create_index(op.f('ix_sla_tickets_closed_at'), 'sla_tickets', ['closed_at'])

    op.create_table(
        'sla_metas',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('identifier', sa.String(255), nullable=False, unique=True),
        sa.Column('meta_excelente', sa.Float(), nullable=False),
        sa.Column('meta_atencao', sa.Float(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'fleet_readings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company', sa.String(255), nullable=False),
        sa.Column('total_base', sa.Integer(), nullable=False),
        sa.Column('total_unmonitored', sa.Integer(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_fleet_readings_company'), 'fleet_readings', ['company'])
    op.create_index(op.f('ix_fleet_readings_recorded_at'), 'fleet_readings', ['recorded_at'])

    op.create_table(
        'presentation_settings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('monitoring_type', sa.String(20), nullable=False, unique=True),
        sa.Column('companies_per_page', sa.Integer(), nullable=False),
        sa.Column('interval_seconds', sa.Integer(), nullable=False),
        sa.Column('min_percentage', sa.Float()),
        sa.Column('max_percentage', sa.Float()),
        sa.Column('ignore_green', sa.Boolean()),
        sa.Column('ignore_yellow', sa.Boolean()),
        sa.Column('ignore_red', sa.Boolean()),
        sa.Column('threshold_excellent', sa.Float(), nullable=False),
        sa.Column('threshold_attention', sa.Float(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('presentation_settings')
    op.drop_index(op.f('ix_fleet_readings_recorded_at'), table_name='fleet_readings')
    op.drop_index(op.f('ix_fleet_readings_company'), table_name='fleet_readings')
    op.drop_table('fleet_readings')
    op.drop_table('sla_metas')
    op.drop_table('sla_tickets')
    op.drop_table('sla_snapshots')
    op.drop_table('backlog_daily_totals')
    op.drop_table('backlog_items')
    op.drop_table('monitoring_alert_settings')
    op.drop_index('ix_monitoring_alerts_key', table_name='monitoring_alerts')
    op.drop_table('monitoring_alerts')
    op.drop_table('sessions')
    op.drop_table('users')
    op.drop_table('role_permissions')
    op.drop_table('roles')
