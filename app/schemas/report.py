from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class Period(BaseModel):
    id_periodo: int
    descripcion: str


class Career(BaseModel):
    id_carrera: int
    nombre_carrera: str


class RosterEntry(BaseModel):
    """One teacher of a career/period with its representative assignment."""
    assignment_id: int
    teacher_id: int
    full_name: str
    document: Optional[str] = None
    career_id: Optional[int] = None
    career_name: Optional[str] = None


class ScoreSet(BaseModel):
    # values as the store returned them; None means "no completed evaluations
    # of that type". Coercion is left to scoring.normalize, one value at a time.
    self_score: Optional[Any] = None
    hetero_score: Optional[Any] = None
    co_score: Optional[Any] = None
    authority_score: Optional[Any] = None


class WeightedScores(BaseModel):
    self_score: float = 0.0
    hetero_score: float = 0.0
    co_score: float = 0.0
    authority_score: float = 0.0


class TeacherScores(BaseModel):
    entry: RosterEntry
    raw: ScoreSet
    components: WeightedScores   # normalized 0–100 values
    weighted: WeightedScores     # component * weight
    composite: float
    failed: bool = False
    error: Optional[str] = None


class CareerReport(BaseModel):
    career: Career
    period: Period
    teachers: List[TeacherScores]
    failures: List[str] = []


class GenerateCareerReportRequest(BaseModel):
    id_carrera: int = Field(..., gt=0)
    id_periodo: int = Field(..., gt=0)
    numero_inicio_oficio: int = Field(..., gt=0)


class TeacherScoreRow(BaseModel):
    numero: int
    id_docente: int
    id_distributivo: int
    nombre_completo: str
    cedula: Optional[str]
    autoevaluacion: float
    heteroevaluacion: float
    coevaluacion: float
    evaluacion_autoridades: float
    promedio_ponderado: float
    valoracion: str


class CareerScoresResponse(BaseModel):
    id_carrera: int
    nombre_carrera: str
    periodo: Period
    docentes: List[TeacherScoreRow]


class GradeReportResponse(BaseModel):
    success: bool = True
    data: List[CareerScoresResponse]


class ListResponse(BaseModel):
    success: bool = True
    data: List[Dict]


class EvaluationTypeSummary(BaseModel):
    tipo: str
    nombre: str
    promedio: Optional[float]    # None when the teacher got no evaluation of this type
    evaluaciones: int
    ponderacion: float
    contribucion: float


class TeacherReport(BaseModel):
    id_docente: int
    nombre: str
    cedula: str
    periodo: Period
    asignaturas: List[str]
    evaluaciones: List[EvaluationTypeSummary]
    promedio_final: float
    valoracion: str
    observaciones: List[str] = []

    @property
    def has_evaluations(self) -> bool:
        return any(item.promedio is not None for item in self.evaluaciones)


class TeacherReportResponse(BaseModel):
    success: bool = True
    data: TeacherReport
