"""
Errores de dominio del sistema de evaluaciones.

The HTTP layer maps every ``EvaluationSystemError`` to a JSON response with
its ``status_code``; ``PartialDataFailure`` is never raised across a report
batch, it is collected on the report and logged.
"""
from typing import Any, Dict, Optional
from fastapi import status


class EvaluationSystemError(Exception):
    """Base para los errores del sistema de evaluaciones"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "EVALUATION_SYSTEM_ERROR"

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}


class NotFound(EvaluationSystemError):
    """Identificador que no resuelve a un registro existente"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            f"{entity} '{identifier}' no encontrado",
            extra={"entity": entity, "id": identifier},
        )
        self.entity = entity
        self.identifier = identifier


class EmptyRoster(EvaluationSystemError):
    """No hay docentes para la carrera y el periodo"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "EMPTY_ROSTER"

    def __init__(self, career_id: Any, period_id: Any):
        super().__init__(
            "No se encontraron docentes para la carrera y periodo especificados",
            extra={"id_carrera": career_id, "id_periodo": period_id},
        )


class NoEvaluations(EvaluationSystemError):
    """El docente no tiene evaluaciones en el periodo"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NO_EVALUATIONS"

    def __init__(self, document: Any, period_id: Any):
        super().__init__(
            "No se encontraron evaluaciones para este docente en el período especificado",
            extra={"cedula": document, "id_periodo": period_id},
        )


class PartialDataFailure(EvaluationSystemError):
    """Fallo al obtener las calificaciones de un docente"""

    error_code = "PARTIAL_DATA_FAILURE"

    def __init__(self, teacher_id: Any, assignment_id: Any, cause: BaseException):
        super().__init__(
            f"Error obteniendo evaluaciones para docente {teacher_id}: {cause}",
            extra={"id_docente": teacher_id, "id_distributivo": assignment_id},
        )
        self.teacher_id = teacher_id
        self.assignment_id = assignment_id
        self.cause = cause


class RenderFailure(EvaluationSystemError):
    """Plantilla ausente o mal formada"""

    error_code = "RENDER_FAILURE"


class Conflict(EvaluationSystemError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class InvalidInput(EvaluationSystemError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_INPUT"
