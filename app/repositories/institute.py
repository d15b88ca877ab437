"""
Read-only queries against the institute database.

The institute schema is owned by another system, so it is queried with
parameterized ``text()`` statements instead of ORM models. Full names are
composed in Python (``compose_full_name``) so every caller gets the same
trimmed, single-spaced form.
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import text, bindparam
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.report import Career, Period, RosterEntry

COORDINATOR_PROFILE = 17

_NAME_COLUMNS = """
    hd.APELLIDOS_1_DOCENTE AS apellido_1,
    hd.APELLIDOS_2_DOCENTE AS apellido_2,
    hd.NOMBRES_1_DOCENTE AS nombre_1,
    hd.NOMBRES_2_DOCENTE AS nombre_2
"""

_ROSTER_FROM = """
    FROM NOTAS_DISTRIBUTIVO nd
    INNER JOIN HORARIOS_DOCENTE hd ON nd.ID_DOCENTE_DISTRIBUTIVO = hd.ID_DOCENTE
    INNER JOIN NOTAS_ASIGNATURA na ON nd.ID_ASIGNATURA_DISTRIBUTIVO = na.ID_ASIGNATURA
    INNER JOIN MATRICULACION_FORMAR_CURSOS mfc ON na.ID_FORMAR_CURSOS_ASIGNATURA = mfc.ID_FORMAR_CURSOS
    INNER JOIN MATRICULACION_CARRERAS mc ON mfc.ID_CARRERA_FORMAR_CURSOS = mc.ID_CARRERAS
    WHERE nd.DELETED_AT_DISTRIBUTIVO IS NULL
        AND hd.DELETED_AT_DOCENTE IS NULL
        AND nd.ID_PERIODO_DISTRIBUTIVO = :period_id
"""


def compose_full_name(*parts: Optional[str]) -> str:
    """Surname(s) then given name(s); blank parts skipped, single spaces."""
    words = []
    for part in parts:
        if part:
            words.extend(part.split())
    return " ".join(words)


def _roster_entry(row) -> RosterEntry:
    return RosterEntry(
        assignment_id=int(row.id_distributivo),
        teacher_id=int(row.id_docente),
        full_name=compose_full_name(row.apellido_1, row.apellido_2, row.nombre_1, row.nombre_2),
        document=row.cedula_docente,
        career_id=int(row.id_carrera),
        career_name=row.nombre_carrera,
    )


class InstituteRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_career(self, career_id: int) -> Optional[Career]:
        result = await self.db.execute(
            text("""
                SELECT ID_CARRERAS AS id_carrera, NOMBRE_CARRERAS AS nombre_carrera
                FROM MATRICULACION_CARRERAS
                WHERE ID_CARRERAS = :career_id
                    AND STATUS_CARRERAS = 'ACTIVO'
            """),
            {"career_id": career_id},
        )
        row = result.first()
        return Career(id_carrera=row.id_carrera, nombre_carrera=row.nombre_carrera) if row else None

    async def get_period(self, period_id: int) -> Optional[Period]:
        result = await self.db.execute(
            text("""
                SELECT ID_PERIODO AS id_periodo, NOMBRE_PERIODO AS descripcion
                FROM MATRICULACION_PERIODO
                WHERE ID_PERIODO = :period_id
                    AND DELETED_AT_PERIODO IS NULL
            """),
            {"period_id": period_id},
        )
        row = result.first()
        return Period(id_periodo=row.id_periodo, descripcion=row.descripcion) if row else None

    async def list_periods(self) -> List[Period]:
        result = await self.db.execute(
            text("""
                SELECT ID_PERIODO AS id_periodo, NOMBRE_PERIODO AS descripcion
                FROM MATRICULACION_PERIODO
                WHERE DELETED_AT_PERIODO IS NULL
                ORDER BY ID_PERIODO DESC
            """)
        )
        return [Period(id_periodo=r.id_periodo, descripcion=r.descripcion) for r in result]

    async def list_active_careers(self, period_id: Optional[int] = None) -> List[Career]:
        """All active careers, or only those with assignments in ``period_id``."""
        if period_id is None:
            result = await self.db.execute(
                text("""
                    SELECT ID_CARRERAS AS id_carrera, NOMBRE_CARRERAS AS nombre_carrera
                    FROM MATRICULACION_CARRERAS
                    WHERE STATUS_CARRERAS = 'ACTIVO'
                    ORDER BY NOMBRE_CARRERAS
                """)
            )
        else:
            result = await self.db.execute(
                text("""
                    SELECT DISTINCT mc.ID_CARRERAS AS id_carrera, mc.NOMBRE_CARRERAS AS nombre_carrera
                    FROM NOTAS_DISTRIBUTIVO nd
                    INNER JOIN MATRICULACION_FORMAR_CURSOS mfc
                        ON nd.ID_FORMAR_CURSOS_DISTRIBUTIVO = mfc.ID_FORMAR_CURSOS
                    INNER JOIN MATRICULACION_CARRERAS mc
                        ON mfc.ID_CARRERA_FORMAR_CURSOS = mc.ID_CARRERAS
                    WHERE nd.DELETED_AT_DISTRIBUTIVO IS NULL
                        AND nd.ID_PERIODO_DISTRIBUTIVO = :period_id
                        AND mc.STATUS_CARRERAS = 'ACTIVO'
                    ORDER BY mc.NOMBRE_CARRERAS
                """),
                {"period_id": period_id},
            )
        return [Career(id_carrera=r.id_carrera, nombre_carrera=r.nombre_carrera) for r in result]

    async def careers_by_ids(self, career_ids: Iterable[int]) -> Dict[int, str]:
        ids = sorted(set(career_ids))
        if not ids:
            return {}
        stmt = text("""
            SELECT ID_CARRERAS AS id_carrera, NOMBRE_CARRERAS AS nombre_carrera
            FROM MATRICULACION_CARRERAS
            WHERE ID_CARRERAS IN :ids
        """).bindparams(bindparam("ids", expanding=True))
        result = await self.db.execute(stmt, {"ids": ids})
        return {r.id_carrera: r.nombre_carrera for r in result}

    async def list_roster(self, career_id: int, period_id: int) -> List[RosterEntry]:
        """One row per teacher, lowest assignment id as representative."""
        result = await self.db.execute(
            text(f"""
                SELECT
                    MIN(nd.ID_DISTRIBUTIVO) AS id_distributivo,
                    nd.ID_DOCENTE_DISTRIBUTIVO AS id_docente,
                    {_NAME_COLUMNS},
                    hd.CEDULA_DOCENTE AS cedula_docente,
                    mc.ID_CARRERAS AS id_carrera,
                    mc.NOMBRE_CARRERAS AS nombre_carrera
                {_ROSTER_FROM}
                    AND mc.ID_CARRERAS = :career_id
                GROUP BY
                    nd.ID_DOCENTE_DISTRIBUTIVO,
                    hd.APELLIDOS_1_DOCENTE, hd.APELLIDOS_2_DOCENTE,
                    hd.NOMBRES_1_DOCENTE, hd.NOMBRES_2_DOCENTE,
                    hd.CEDULA_DOCENTE, mc.ID_CARRERAS, mc.NOMBRE_CARRERAS
            """),
            {"period_id": period_id, "career_id": career_id},
        )
        return [_roster_entry(row) for row in result]

    async def list_roster_all_careers(self, period_id: int) -> List[RosterEntry]:
        result = await self.db.execute(
            text(f"""
                SELECT
                    MIN(nd.ID_DISTRIBUTIVO) AS id_distributivo,
                    nd.ID_DOCENTE_DISTRIBUTIVO AS id_docente,
                    {_NAME_COLUMNS},
                    hd.CEDULA_DOCENTE AS cedula_docente,
                    mc.ID_CARRERAS AS id_carrera,
                    mc.NOMBRE_CARRERAS AS nombre_carrera
                {_ROSTER_FROM}
                    AND mc.STATUS_CARRERAS = 'ACTIVO'
                GROUP BY
                    nd.ID_DOCENTE_DISTRIBUTIVO,
                    hd.APELLIDOS_1_DOCENTE, hd.APELLIDOS_2_DOCENTE,
                    hd.NOMBRES_1_DOCENTE, hd.NOMBRES_2_DOCENTE,
                    hd.CEDULA_DOCENTE, mc.ID_CARRERAS, mc.NOMBRE_CARRERAS
            """),
            {"period_id": period_id},
        )
        return [_roster_entry(row) for row in result]

    async def list_period_assignments(self, period_id: int) -> List[dict]:
        result = await self.db.execute(
            text(f"""
                SELECT
                    nd.ID_DISTRIBUTIVO AS id_distributivo,
                    {_NAME_COLUMNS},
                    na.NOMBRE_ASIGNATURA AS asignatura
                FROM NOTAS_DISTRIBUTIVO nd
                LEFT JOIN NOTAS_ASIGNATURA na ON nd.ID_ASIGNATURA_DISTRIBUTIVO = na.ID_ASIGNATURA
                LEFT JOIN HORARIOS_DOCENTE hd ON nd.ID_DOCENTE_DISTRIBUTIVO = hd.ID_DOCENTE
                WHERE nd.DELETED_AT_DISTRIBUTIVO IS NULL
                    AND nd.ID_PERIODO_DISTRIBUTIVO = :period_id
            """),
            {"period_id": period_id},
        )
        rows = [
            {
                "id_distributivo": r.id_distributivo,
                "docente": compose_full_name(r.apellido_1, r.apellido_2, r.nombre_1, r.nombre_2),
                "asignatura": r.asignatura,
            }
            for r in result
        ]
        return sorted(rows, key=lambda r: (r["docente"].lower(), r["id_distributivo"]))

    async def list_teacher_assignments(self, period_id: int, document: str) -> List[dict]:
        result = await self.db.execute(
            text("""
                SELECT
                    nd.ID_DISTRIBUTIVO AS id_distributivo,
                    na.NOMBRE_ASIGNATURA AS asignatura
                FROM NOTAS_DISTRIBUTIVO nd
                LEFT JOIN NOTAS_ASIGNATURA na ON nd.ID_ASIGNATURA_DISTRIBUTIVO = na.ID_ASIGNATURA
                WHERE nd.DELETED_AT_DISTRIBUTIVO IS NULL
                    AND nd.ID_PERIODO_DISTRIBUTIVO = :period_id
                    AND nd.ID_DOCENTE_DISTRIBUTIVO IN (
                        SELECT ID_DOCENTE FROM HORARIOS_DOCENTE WHERE CEDULA_DOCENTE = :document
                    )
                ORDER BY nd.ID_DISTRIBUTIVO
            """),
            {"period_id": period_id, "document": document},
        )
        return [{"id_distributivo": r.id_distributivo, "asignatura": r.asignatura} for r in result]

    async def find_user(self, email: str, document: str) -> Optional[dict]:
        result = await self.db.execute(
            text("""
                SELECT
                    ID_USUARIOS AS id,
                    CORREO_USUARIOS AS correo,
                    DOCUMENTO_USUARIOS AS cedula,
                    ID_PERFILES_USUARIOS AS rol
                FROM SEGURIDAD_USUARIOS
                WHERE CORREO_USUARIOS = :email AND DOCUMENTO_USUARIOS = :document
            """),
            {"email": email, "document": document},
        )
        row = result.first()
        return dict(row._mapping) if row else None

    async def list_coordinator_candidates(self) -> List[dict]:
        result = await self.db.execute(
            text("""
                SELECT
                    DOCUMENTO_USUARIOS AS cedula,
                    APELLIDOS_USUARIOS AS apellidos,
                    NOMBRES_USUARIOS AS nombres,
                    CORREO_USUARIOS AS correo
                FROM SEGURIDAD_USUARIOS
                WHERE ID_PERFILES_USUARIOS = :profile
                ORDER BY APELLIDOS_USUARIOS, NOMBRES_USUARIOS
            """),
            {"profile": COORDINATOR_PROFILE},
        )
        return [dict(r._mapping) for r in result]

    async def get_coordinator_career(self, document: str) -> Optional[Career]:
        result = await self.db.execute(
            text("""
                SELECT mc.ID_CARRERAS AS id_carrera, mc.NOMBRE_CARRERAS AS nombre_carrera
                FROM MATRICULACION_CARRERAS mc
                INNER JOIN HORARIOS_DOCENTE hd ON mc.ID_CARRERAS = hd.ID_CARRERA
                WHERE hd.CEDULA_DOCENTE = :document
                    AND mc.STATUS_CARRERAS = 'ACTIVO'
                    AND hd.DELETED_AT_DOCENTE IS NULL
                ORDER BY mc.ID_CARRERAS
                LIMIT 1
            """),
            {"document": document},
        )
        row = result.first()
        return Career(id_carrera=row.id_carrera, nombre_carrera=row.nombre_carrera) if row else None

    async def get_teacher_by_document(self, document: str) -> Optional[dict]:
        result = await self.db.execute(
            text(f"""
                SELECT hd.ID_DOCENTE AS id_docente, hd.CEDULA_DOCENTE AS cedula, {_NAME_COLUMNS}
                FROM HORARIOS_DOCENTE hd
                WHERE hd.CEDULA_DOCENTE = :document
                    AND hd.DELETED_AT_DOCENTE IS NULL
                ORDER BY hd.ID_DOCENTE
                LIMIT 1
            """),
            {"document": document},
        )
        row = result.first()
        if row is None:
            return None
        return {
            "id_docente": row.id_docente,
            "cedula": row.cedula,
            "nombre": compose_full_name(row.apellido_1, row.apellido_2, row.nombre_1, row.nombre_2),
        }

    async def teachers_by_ids(self, teacher_ids: Iterable[int]) -> Dict[int, str]:
        ids = sorted(set(teacher_ids))
        if not ids:
            return {}
        stmt = text(f"""
            SELECT hd.ID_DOCENTE AS id_docente, {_NAME_COLUMNS}
            FROM HORARIOS_DOCENTE hd
            WHERE hd.ID_DOCENTE IN :ids
                AND hd.DELETED_AT_DOCENTE IS NULL
        """).bindparams(bindparam("ids", expanding=True))
        result = await self.db.execute(stmt, {"ids": ids})
        return {
            r.id_docente: compose_full_name(r.apellido_1, r.apellido_2, r.nombre_1, r.nombre_2) for r in result
        }

    async def subjects_by_ids(self, subject_ids: Iterable[int]) -> Dict[int, str]:
        ids = sorted(set(subject_ids))
        if not ids:
            return {}
        stmt = text("""
            SELECT ID_ASIGNATURA AS id_asignatura, NOMBRE_ASIGNATURA AS nombre_asignatura
            FROM NOTAS_ASIGNATURA
            WHERE ID_ASIGNATURA IN :ids
        """).bindparams(bindparam("ids", expanding=True))
        result = await self.db.execute(stmt, {"ids": ids})
        return {r.id_asignatura: r.nombre_asignatura for r in result}

    async def list_period_teachers(self, period_id: int) -> List[dict]:
        """Teachers holding at least one live assignment in the period."""
        result = await self.db.execute(
            text(f"""
                SELECT DISTINCT hd.ID_DOCENTE AS id_docente, {_NAME_COLUMNS}
                FROM NOTAS_DISTRIBUTIVO nd
                INNER JOIN HORARIOS_DOCENTE hd ON nd.ID_DOCENTE_DISTRIBUTIVO = hd.ID_DOCENTE
                WHERE nd.DELETED_AT_DISTRIBUTIVO IS NULL
                    AND hd.DELETED_AT_DOCENTE IS NULL
                    AND nd.ID_PERIODO_DISTRIBUTIVO = :period_id
            """),
            {"period_id": period_id},
        )
        return [
            {
                "id_docente": r.id_docente,
                "nombre": compose_full_name(r.apellido_1, r.apellido_2, r.nombre_1, r.nombre_2),
            }
            for r in result
        ]
