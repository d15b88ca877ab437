"""peer assignments and report signatories

Revision ID: 8b2d4e6f1a37
Revises: 3f1c9a7e2b10
Create Date: 2026-10-19 16:40:05.117902

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2d4e6f1a37'
down_revision: Union[str, None] = '3f1c9a7e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'asignaciones_coevaluacion',
        sa.Column('id_asignacion', sa.Integer(), primary_key=True),
        sa.Column('id_periodo', sa.Integer(), nullable=False),
        sa.Column('id_docente_evaluador', sa.Integer(), nullable=False),
        sa.Column('id_docente_evaluado', sa.Integer(), nullable=False),
        sa.Column('id_asignatura', sa.Integer(), nullable=True),
        sa.Column('fecha', sa.Date(), nullable=True),
        sa.Column('hora_inicio', sa.Time(), nullable=True),
        sa.Column('hora_fin', sa.Time(), nullable=True),
        sa.Column('dia', sa.String(length=20), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_asignaciones_coevaluacion_id_asignacion', 'asignaciones_coevaluacion', ['id_asignacion'])
    op.create_index('ix_asignaciones_coevaluacion_id_periodo', 'asignaciones_coevaluacion', ['id_periodo'])
    op.create_index(
        'ix_asignaciones_coevaluacion_id_docente_evaluador', 'asignaciones_coevaluacion', ['id_docente_evaluador']
    )

    op.create_table(
        'autoridades_reportes',
        sa.Column('id_autoridad', sa.Integer(), primary_key=True),
        sa.Column('id_usuario', sa.Integer(), nullable=False),
        sa.Column('nombre_autoridad', sa.String(length=200), nullable=False),
        sa.Column('cargo_autoridad', sa.String(length=200), nullable=False),
        sa.Column('orden_firma', sa.Integer(), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_autoridades_reportes_id_autoridad', 'autoridades_reportes', ['id_autoridad'])
    op.create_index('ix_autoridades_reportes_id_usuario', 'autoridades_reportes', ['id_usuario'])


def downgrade() -> None:
    op.drop_table('autoridades_reportes')
    op.drop_table('asignaciones_coevaluacion')
