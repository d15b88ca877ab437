import io
from datetime import date

import pytest
from docx import Document

from app.core.exceptions import RenderFailure
from app.schemas.report import Career, CareerReport, Period, ScoreSet
from app.services.career_report import score_teacher
from app.services.documents import DocxTemplateRenderer, build_docx_context

from conftest import entry


def _report():
    return CareerReport(
        career=Career(id_carrera=1, nombre_carrera="Desarrollo de Software"),
        period=Period(id_periodo=10, descripcion="2025-A"),
        teachers=[
            score_teacher(entry(500, 2, "pérez lopez JUAN CARLOS"), ScoreSet(self_score=80, hetero_score=70, co_score=90, authority_score=100)),
            score_teacher(entry(502, 1, "Zambrano Ana"), ScoreSet()),
        ],
    )


def _text(content: bytes) -> str:
    return "\n".join(p.text for p in Document(io.BytesIO(content)).paragraphs)


def test_context_has_one_entry_per_teacher():
    context = build_docx_context(_report(), 7, date(2026, 10, 5))

    assert context["fecha"] == "05 de octubre de 2026"
    assert context["periodo_upper"] == "2025-A"
    assert context["carrera_upper"] == "DESARROLLO DE SOFTWARE"
    assert [d["numero_oficio"] for d in context["docentes"]] == ["ISTLA-VR-2026-7-O", "ISTLA-VR-2026-8-O"]
    assert context["docentes"][0]["nombre_completo"] == "PÉREZ LOPEZ JUAN CARLOS"
    assert context["docentes"][0]["nombre_con_titulo"] == "Ing. Pérez Lopez Juan Carlos"
    assert context["docentes"][1]["total_ponderado"] == "0.00"


def test_bundled_template_renders(template_path):
    renderer = DocxTemplateRenderer(template_path)

    content = renderer.render(build_docx_context(_report(), 100, date(2025, 6, 2)))

    text = _text(content)
    assert "Oficio N° ISTLA-VR-2025-100-O" in text
    assert "Oficio N° ISTLA-VR-2025-101-O" in text
    assert "Ing. Pérez Lopez Juan Carlos" in text
    assert "DOCENTE DE LA CARRERA DE DESARROLLO DE SOFTWARE" in text
    assert "TOTAL: 83.00 / 100" in text
    assert "TOTAL: 0.00 / 100" in text
    assert "Latacunga, 02 de junio de 2025" in text
    assert "{{" not in text


def test_names_are_escaped(template_path):
    report = _report()
    report.teachers[0].entry.full_name = "Ruiz & <Hijos>"

    content = DocxTemplateRenderer(template_path).render(build_docx_context(report, 1, date(2025, 1, 2)))

    assert "Ing. Ruiz & <hijos>" in _text(content)


def test_missing_template_is_a_render_failure(tmp_path):
    with pytest.raises(RenderFailure):
        DocxTemplateRenderer(tmp_path / "nope.docx").render({"docentes": []})


def test_corrupt_template_is_a_render_failure(tmp_path):
    broken = tmp_path / "broken.docx"
    broken.write_bytes(b"not a zip file")
    with pytest.raises(RenderFailure):
        DocxTemplateRenderer(broken).render({"docentes": []})
