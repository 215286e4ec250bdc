"""brigade conformance schema

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 09:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261018_01'
down_revision = None
branch_labels = None
depends_on = None

ROLES = ('team_lead', 'botanist', 'assistant_technician', 'co_investigator')


def upgrade():
    op.create_table(
        'usuarios',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('rol', sa.String(), nullable=False, server_default='brigadista'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'brigadas',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('nombre', sa.String(), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('capacitacion_completada', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'brigada_roles',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('brigada_id', sa.UUID(), sa.ForeignKey('brigadas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('usuario_id', sa.UUID(), sa.ForeignKey('usuarios.id'), nullable=False),
        sa.Column('rol_en_brigada', sa.Enum(*ROLES, name='rol_en_brigada', native_enum=False), nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('brigada_id', 'usuario_id'),
    )
    op.create_table(
        'equipos_catalogo',
        sa.Column('nombre', sa.String(), primary_key=True),
    )
    op.create_table(
        'brigada_equipos',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('brigada_id', sa.UUID(), sa.ForeignKey('brigadas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tipo_equipo', sa.String(), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_brigada_equipos_brigada_id', 'brigada_equipos', ['brigada_id'])
    op.create_table(
        'validaciones_brigada',
        sa.Column('brigada_id', sa.UUID(), sa.ForeignKey('brigadas.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('has_lead', sa.Boolean(), nullable=False),
        sa.Column('has_botanist', sa.Boolean(), nullable=False),
        sa.Column('has_technician', sa.Boolean(), nullable=False),
        sa.Column('co_investigator_count', sa.Integer(), nullable=False),
        sa.Column('equipment_complete', sa.Boolean(), nullable=False),
        sa.Column('training_completed', sa.Boolean(), nullable=False),
        sa.Column('validated_at', sa.DateTime(), nullable=False),
        sa.Column('validated_by', sa.String(), nullable=True),
        sa.Column('notes', sa.JSON(), nullable=True),
    )
    op.create_table(
        'conglomerados',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('nombre', sa.String(), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('ubicacion', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'asignaciones_conglomerados',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('brigada_id', sa.UUID(), sa.ForeignKey('brigadas.id'), nullable=False),
        sa.Column('conglomerado_id', sa.UUID(), sa.ForeignKey('conglomerados.id'), nullable=False),
        sa.Column('assigned_by', sa.UUID(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('target_type', sa.String(), nullable=True),
        sa.Column('target_id', sa.UUID(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('asignaciones_conglomerados')
    op.drop_table('conglomerados')
    op.drop_table('validaciones_brigada')
    op.drop_index('ix_brigada_equipos_brigada_id', table_name='brigada_equipos')
    op.drop_table('brigada_equipos')
    op.drop_table('equipos_catalogo')
    op.drop_table('brigada_roles')
    op.drop_table('brigadas')
    op.drop_table('usuarios')
