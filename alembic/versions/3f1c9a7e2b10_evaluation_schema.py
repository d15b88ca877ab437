"""evaluation schema

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-19 10:12:41.508233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'formularios',
        sa.Column('id_formulario', sa.Integer(), primary_key=True),
        sa.Column('nombre', sa.String(length=255), nullable=False),
    )
    op.create_index('ix_formularios_id_formulario', 'formularios', ['id_formulario'])

    op.create_table(
        'preguntas',
        sa.Column('id_pregunta', sa.Integer(), primary_key=True),
        sa.Column('id_formulario', sa.Integer(), sa.ForeignKey('formularios.id_formulario'), nullable=False),
        sa.Column('texto', sa.Text(), nullable=False),
        sa.Column('tipo_pregunta', sa.String(length=20), nullable=False),
    )
    op.create_index('ix_preguntas_id_pregunta', 'preguntas', ['id_pregunta'])
    op.create_index('ix_preguntas_id_formulario', 'preguntas', ['id_formulario'])

    op.create_table(
        'evaluaciones',
        sa.Column('id_evaluacion', sa.Integer(), primary_key=True),
        sa.Column('id_formulario', sa.Integer(), sa.ForeignKey('formularios.id_formulario'), nullable=False),
        sa.Column('id_periodo', sa.Integer(), nullable=False),
        sa.Column('fecha_inicio', sa.DateTime(timezone=True), nullable=True),
        sa.Column('fecha_fin', sa.DateTime(timezone=True), nullable=True),
        sa.Column('fecha_notificacion', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.UniqueConstraint('id_formulario', 'id_periodo', name='uq_evaluacion_formulario_periodo'),
    )
    op.create_index('ix_evaluaciones_id_evaluacion', 'evaluaciones', ['id_evaluacion'])
    op.create_index('ix_evaluaciones_id_periodo', 'evaluaciones', ['id_periodo'])

    op.create_table(
        'evaluaciones_realizadas',
        sa.Column('id_evaluacion_realizada', sa.Integer(), primary_key=True),
        sa.Column('id_evaluacion', sa.Integer(), sa.ForeignKey('evaluaciones.id_evaluacion'), nullable=False),
        sa.Column('evaluador_id', sa.Integer(), nullable=False),
        sa.Column('evaluado_id', sa.Integer(), nullable=True),
        sa.Column('id_distributivo', sa.Integer(), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('fecha_inicio', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('fecha_fin', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('id_evaluacion', 'evaluador_id', 'id_distributivo', name='uq_realizada_evaluador_distributivo'),
    )
    op.create_index('ix_evaluaciones_realizadas_id_evaluacion_realizada', 'evaluaciones_realizadas', ['id_evaluacion_realizada'])
    op.create_index('ix_evaluaciones_realizadas_id_distributivo', 'evaluaciones_realizadas', ['id_distributivo'])

    op.create_table(
        'respuestas',
        sa.Column('id_respuesta', sa.Integer(), primary_key=True),
        sa.Column('id_evaluacion', sa.Integer(), sa.ForeignKey('evaluaciones.id_evaluacion'), nullable=False),
        sa.Column('id_pregunta', sa.Integer(), sa.ForeignKey('preguntas.id_pregunta'), nullable=False),
        sa.Column('respuesta', sa.Text(), nullable=False),
        sa.Column('evaluador_id', sa.Integer(), nullable=False),
        sa.Column('evaluado_id', sa.Integer(), nullable=True),
        sa.Column('id_distributivo', sa.Integer(), nullable=False),
    )
    op.create_index('ix_respuestas_id_respuesta', 'respuestas', ['id_respuesta'])
    op.create_index('ix_respuestas_id_evaluacion', 'respuestas', ['id_evaluacion'])
    op.create_index('ix_respuestas_id_distributivo', 'respuestas', ['id_distributivo'])

    op.create_table(
        'evaluaciones_autoridades',
        sa.Column('id_evaluacion_autoridad', sa.Integer(), primary_key=True),
        sa.Column('id_periodo', sa.Integer(), nullable=False),
        sa.Column('id_docente_evaluado', sa.Integer(), nullable=False),
        sa.Column('id_carrera', sa.Integer(), nullable=True),
        sa.Column('calificacion', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('evaluador_cedula', sa.String(length=20), nullable=False),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('fecha_creacion', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('fecha_actualizacion', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_evaluaciones_autoridades_id_evaluacion_autoridad', 'evaluaciones_autoridades', ['id_evaluacion_autoridad'])
    op.create_index('ix_evaluaciones_autoridades_id_periodo', 'evaluaciones_autoridades', ['id_periodo'])
    op.create_index('ix_evaluaciones_autoridades_id_docente_evaluado', 'evaluaciones_autoridades', ['id_docente_evaluado'])

    op.create_table(
        'coordinadores_carreras',
        sa.Column('id_coordinador_carrera', sa.Integer(), primary_key=True),
        sa.Column('cedula_coordinador', sa.String(length=20), nullable=False),
        sa.Column('nombres_coordinador', sa.String(length=150), nullable=False),
        sa.Column('apellidos_coordinador', sa.String(length=150), nullable=False),
        sa.Column('correo_coordinador', sa.String(length=150), nullable=False),
        sa.Column('id_carrera', sa.Integer(), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('fecha_asignacion', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('fecha_actualizacion', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_coordinadores_carreras_id_coordinador_carrera', 'coordinadores_carreras', ['id_coordinador_carrera'])
    op.create_index('ix_coordinadores_carreras_id_carrera', 'coordinadores_carreras', ['id_carrera'])


def downgrade() -> None:
    op.drop_table('coordinadores_carreras')
    op.drop_table('evaluaciones_autoridades')
    op.drop_table('respuestas')
    op.drop_table('evaluaciones_realizadas')
    op.drop_table('evaluaciones')
    op.drop_table('preguntas')
    op.drop_table('formularios')
