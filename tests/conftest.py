import os

# Settings are read at import time, keep the test run away from real databases
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("READ_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("WRITE_DATABASE_URL", "sqlite+aiosqlite://")

from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional, Tuple

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from app.core.security import create_access_token
from app.database import Base
from app.models import coordinator, evaluation, peer_assignment, signatory  # noqa: F401
from app.repositories.scores import FormType, ScoreSummary
from app.schemas.report import Career, Period, RosterEntry

INSTITUTE_DDL = [
    """CREATE TABLE MATRICULACION_CARRERAS (
        ID_CARRERAS INTEGER PRIMARY KEY, NOMBRE_CARRERAS TEXT, STATUS_CARRERAS TEXT)""",
    """CREATE TABLE MATRICULACION_PERIODO (
        ID_PERIODO INTEGER PRIMARY KEY, NOMBRE_PERIODO TEXT, DELETED_AT_PERIODO TEXT)""",
    """CREATE TABLE MATRICULACION_FORMAR_CURSOS (
        ID_FORMAR_CURSOS INTEGER PRIMARY KEY, ID_CARRERA_FORMAR_CURSOS INTEGER)""",
    """CREATE TABLE NOTAS_ASIGNATURA (
        ID_ASIGNATURA INTEGER PRIMARY KEY, NOMBRE_ASIGNATURA TEXT, ID_FORMAR_CURSOS_ASIGNATURA INTEGER)""",
    """CREATE TABLE HORARIOS_DOCENTE (
        ID_DOCENTE INTEGER PRIMARY KEY, CEDULA_DOCENTE TEXT,
        APELLIDOS_1_DOCENTE TEXT, APELLIDOS_2_DOCENTE TEXT,
        NOMBRES_1_DOCENTE TEXT, NOMBRES_2_DOCENTE TEXT,
        ID_CARRERA INTEGER, DELETED_AT_DOCENTE TEXT)""",
    """CREATE TABLE NOTAS_DISTRIBUTIVO (
        ID_DISTRIBUTIVO INTEGER PRIMARY KEY, ID_DOCENTE_DISTRIBUTIVO INTEGER,
        ID_ASIGNATURA_DISTRIBUTIVO INTEGER, ID_FORMAR_CURSOS_DISTRIBUTIVO INTEGER,
        ID_PERIODO_DISTRIBUTIVO INTEGER, DELETED_AT_DISTRIBUTIVO TEXT)""",
    """CREATE TABLE SEGURIDAD_USUARIOS (
        ID_USUARIOS INTEGER PRIMARY KEY, CORREO_USUARIOS TEXT, DOCUMENTO_USUARIOS TEXT,
        NOMBRES_USUARIOS TEXT, APELLIDOS_USUARIOS TEXT, ID_PERFILES_USUARIOS INTEGER)""",
]

INSTITUTE_ROWS = [
    "INSERT INTO MATRICULACION_CARRERAS VALUES (1, 'Desarrollo de Software', 'ACTIVO')",
    "INSERT INTO MATRICULACION_CARRERAS VALUES (2, 'Electricidad', 'ACTIVO')",
    "INSERT INTO MATRICULACION_CARRERAS VALUES (3, 'Mecánica', 'INACTIVO')",
    "INSERT INTO MATRICULACION_PERIODO VALUES (10, '2025-A', NULL)",
    "INSERT INTO MATRICULACION_PERIODO VALUES (11, '2025-B', NULL)",
    "INSERT INTO MATRICULACION_PERIODO VALUES (9, '2024-B', '2024-12-01')",
    "INSERT INTO MATRICULACION_FORMAR_CURSOS VALUES (100, 1)",
    "INSERT INTO MATRICULACION_FORMAR_CURSOS VALUES (200, 2)",
    "INSERT INTO NOTAS_ASIGNATURA VALUES (1000, 'Programación I', 100)",
    "INSERT INTO NOTAS_ASIGNATURA VALUES (1001, 'Bases de Datos', 100)",
    "INSERT INTO NOTAS_ASIGNATURA VALUES (2000, 'Circuitos', 200)",
    "INSERT INTO HORARIOS_DOCENTE VALUES (1, '0501', 'Zambrano', NULL, 'Ana', NULL, 1, NULL)",
    "INSERT INTO HORARIOS_DOCENTE VALUES (2, '0502', 'pérez', 'lopez', 'JUAN', 'CARLOS', 1, NULL)",
    "INSERT INTO HORARIOS_DOCENTE VALUES (3, '0503', 'Borja', NULL, 'Luis', NULL, 2, NULL)",
    "INSERT INTO HORARIOS_DOCENTE VALUES (4, '0504', 'Retirado', NULL, 'Pedro', NULL, 1, '2024-01-01')",
    # teacher 2 has two assignments in career 1, period 10
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (501, 2, 1001, 100, 10, NULL)",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (500, 2, 1000, 100, 10, NULL)",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (502, 1, 1000, 100, 10, NULL)",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (503, 3, 2000, 200, 10, NULL)",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (504, 4, 1000, 100, 10, NULL)",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (505, 1, 1001, 100, 10, '2025-02-01')",
    "INSERT INTO NOTAS_DISTRIBUTIVO VALUES (506, 1, 1000, 100, 11, NULL)",
    "INSERT INTO SEGURIDAD_USUARIOS VALUES (7, 'admin@istla.edu.ec', '0509', 'Maria', 'Vega', 12)",
    "INSERT INTO SEGURIDAD_USUARIOS VALUES (8, 'coord@istla.edu.ec', '0510', 'Rosa', 'Andrade', 17)",
    "INSERT INTO SEGURIDAD_USUARIOS VALUES (9, 'coord2@istla.edu.ec', '0511', 'Hugo', 'Cevallos', 17)",
]


def bearer(rol: int, user_id: int = 1, cedula: str = "0509") -> Dict[str, str]:
    token = create_access_token({"sub": str(user_id), "correo": "user@istla.edu.ec", "cedula": cedula, "rol": rol})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def write_session() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine(
        "sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session
    await engine.dispose()


@pytest.fixture()
async def institute_session() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine(
        "sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        for statement in INSTITUTE_DDL + INSTITUTE_ROWS:
            await conn.execute(text(statement))
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session
    await engine.dispose()


@pytest.fixture()
def write_db_file(tmp_path: Path):
    """File database for HTTP tests; TestClient runs its own event loop, so sessions are opened per request."""
    path = tmp_path / "evaluaciones.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_write_db():
        async with session_factory() as session:
            yield session

    return override_get_write_db


class FakeInstitute:
    """In-memory stand-in for InstituteRepository."""

    def __init__(
        self,
        careers: Optional[Dict[int, str]] = None,
        periods: Optional[Dict[int, str]] = None,
        roster: Optional[Dict[int, List[RosterEntry]]] = None,
        users: Optional[List[dict]] = None,
        teachers: Optional[Dict[int, Tuple[str, str]]] = None,
    ):
        self.careers = careers if careers is not None else {1: "Desarrollo de Software"}
        self.periods = periods if periods is not None else {10: "2025-A"}
        self.roster = roster or {}
        self.users = users or []
        self.coordinator_careers: Dict[str, int] = {}
        # id_docente -> (cedula, nombre)
        self.teachers = teachers or {}
        self.subjects = {1000: "Programación I", 1001: "Bases de Datos"}

    async def get_career(self, career_id):
        name = self.careers.get(career_id)
        return Career(id_carrera=career_id, nombre_carrera=name) if name else None

    async def get_period(self, period_id):
        label = self.periods.get(period_id)
        return Period(id_periodo=period_id, descripcion=label) if label else None

    async def list_periods(self):
        return [Period(id_periodo=k, descripcion=v) for k, v in sorted(self.periods.items(), reverse=True)]

    async def list_active_careers(self, period_id=None):
        return [Career(id_carrera=k, nombre_carrera=v) for k, v in sorted(self.careers.items())]

    async def careers_by_ids(self, career_ids):
        return {cid: self.careers[cid] for cid in career_ids if cid in self.careers}

    async def list_roster(self, career_id, period_id):
        return list(self.roster.get(career_id, []))

    async def list_roster_all_careers(self, period_id):
        entries = []
        for career_id, items in self.roster.items():
            for entry in items:
                entries.append(entry.model_copy(update={"career_id": career_id, "career_name": self.careers[career_id]}))
        return entries

    async def find_user(self, email, document):
        for user in self.users:
            if user["correo"] == email and user["cedula"] == document:
                return user
        return None

    async def list_coordinator_candidates(self):
        return [{"cedula": "0510", "apellidos": "Andrade", "nombres": "Rosa", "correo": "coord@istla.edu.ec"}]

    async def get_coordinator_career(self, document):
        career_id = self.coordinator_careers.get(document)
        return Career(id_carrera=career_id, nombre_carrera=self.careers[career_id]) if career_id else None

    async def list_period_assignments(self, period_id):
        return [{"id_distributivo": 500, "docente": "Perez Juan", "asignatura": "Programación I"}]

    async def list_teacher_assignments(self, period_id, document):
        return [{"id_distributivo": 500, "asignatura": "Programación I"}] if document == "0502" else []

    async def get_teacher_by_document(self, document):
        for teacher_id, (cedula, name) in self.teachers.items():
            if cedula == document:
                return {"id_docente": teacher_id, "cedula": cedula, "nombre": name}
        return None

    async def teachers_by_ids(self, teacher_ids):
        return {tid: self.teachers[tid][1] for tid in teacher_ids if tid in self.teachers}

    async def subjects_by_ids(self, subject_ids):
        return {sid: self.subjects[sid] for sid in subject_ids if sid in self.subjects}

    async def list_period_teachers(self, period_id):
        return [{"id_docente": tid, "nombre": name} for tid, (_, name) in self.teachers.items()]


class FakeScores:
    """Scores keyed by assignment (forms) and teacher (authority); ``failing`` teacher ids raise."""

    def __init__(self, forms=None, authority=None, failing=(), notes=None):
        self.forms = forms or {}
        self.authority = authority or {}
        self.notes = notes or {}
        self.failing = set(failing)
        self.calls = 0

    async def form_average(self, assignment_id, period_id, form_type: FormType):
        self.calls += 1
        return self.forms.get((assignment_id, form_type))

    async def authority_average(self, teacher_id, period_id):
        if teacher_id in self.failing:
            raise RuntimeError("connection lost")
        return self.authority.get(teacher_id)

    async def form_summary(self, assignment_ids, period_id, form_type: FormType):
        values = [self.forms[(aid, form_type)] for aid in assignment_ids if (aid, form_type) in self.forms]
        if not values:
            return ScoreSummary(None, 0)
        return ScoreSummary(sum(values) / len(values), len(values))

    async def authority_summary(self, teacher_id, period_id):
        value = await self.authority_average(teacher_id, period_id)
        return ScoreSummary(value, 0 if value is None else 1)

    async def authority_notes(self, teacher_id, period_id):
        return list(self.notes.get(teacher_id, []))


def entry(assignment_id: int, teacher_id: int, name: str, document: Optional[str] = None) -> RosterEntry:
    return RosterEntry(assignment_id=assignment_id, teacher_id=teacher_id, full_name=name, document=document)


@pytest.fixture()
def template_path() -> Path:
    return Path(__file__).resolve().parent.parent / "app" / "templates" / "plantilla_reporte.docx"
