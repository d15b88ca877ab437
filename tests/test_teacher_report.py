from datetime import datetime

import pytest

from app.core.exceptions import NotFound
from app.repositories.scores import FormType
from app.services.grade_exports import build_teacher_pdf
from app.services.teacher_report import TeacherReportService
from conftest import FakeInstitute, FakeScores


def _service(**scores):
    institute = FakeInstitute(teachers={2: ("0502", "Pérez Lopez Juan Carlos")})
    return TeacherReportService(institute, FakeScores(**scores))


def _by_type(report):
    return {item.tipo: item for item in report.evaluaciones}


async def test_teacher_report_weights_every_type():
    service = _service(
        forms={(500, FormType.SELF): 80, (500, FormType.HETERO): 70, (500, FormType.CO): 90},
        authority={2: 100},
        notes={2: ["Puntual", "Buen trato con estudiantes"]},
    )
    report = await service.build(10, "0502")

    assert report.id_docente == 2
    assert report.nombre == "Pérez Lopez Juan Carlos"
    assert report.periodo.descripcion == "2025-A"
    assert report.asignaturas == ["Programación I"]
    assert report.promedio_final == 83.0
    assert report.valoracion == "Muy buena"
    assert report.observaciones == ["Puntual", "Buen trato con estudiantes"]
    assert report.has_evaluations

    items = _by_type(report)
    assert [item.tipo for item in report.evaluaciones] == [
        "autoevaluacion", "heteroevaluacion", "coevaluacion", "autoridades",
    ]
    assert items["heteroevaluacion"].promedio == 70.0
    assert items["heteroevaluacion"].ponderacion == 0.40
    assert items["heteroevaluacion"].contribucion == 28.0
    assert items["autoridades"].evaluaciones == 1


async def test_missing_types_contribute_zero():
    report = await _service(forms={(500, FormType.HETERO): 50}).build(10, "0502")

    items = _by_type(report)
    assert items["autoevaluacion"].promedio is None
    assert items["autoevaluacion"].contribucion == 0.0
    assert items["autoridades"].evaluaciones == 0
    assert report.promedio_final == 20.0
    assert report.observaciones == []
    assert report.has_evaluations


async def test_teacher_without_evaluations():
    report = await _service().build(10, "0502")

    assert not report.has_evaluations
    assert report.promedio_final == 0.0
    assert report.valoracion == "Deficiente"


async def test_unknown_teacher_or_period():
    service = _service()
    with pytest.raises(NotFound):
        await service.build(10, "0999999999")
    with pytest.raises(NotFound):
        await service.build(99, "0502")


async def test_teacher_pdf_renders():
    service = _service(
        forms={(500, FormType.HETERO): 90},
        authority={2: 80},
        notes={2: ["Cumple el sílabo"]},
    )
    report = await service.build(10, "0502")

    content = build_teacher_pdf(
        report, datetime(2025, 6, 2, 9, 30), signatories=[("Ing. Maria Vega", "VICERRECTORA")]
    )
    assert content.startswith(b"%PDF")

    # no notes, no signature blocks
    bare = build_teacher_pdf(await _service(forms={(500, FormType.SELF): 60}).build(10, "0502"), datetime(2025, 6, 2))
    assert bare.startswith(b"%PDF")
