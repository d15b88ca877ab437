from datetime import date

import pytest

from app.core.exceptions import EmptyRoster, NotFound
from app.repositories.scores import FormType
from app.services.career_report import CareerReportService, dedupe_roster, roster_order

from conftest import FakeInstitute, FakeScores, entry


class RecordingRenderer:
    def __init__(self):
        self.context = None

    def render(self, context):
        self.context = context
        return b"docx-bytes"


def _worked_example():
    institute = FakeInstitute(
        careers={1: "Software Engineering"},
        periods={10: "2025-A"},
        roster={1: [entry(20, 2, "TeacherB"), entry(10, 1, "TeacherA")]},
    )
    scores = FakeScores(
        forms={(10, FormType.SELF): 80, (10, FormType.HETERO): 70, (10, FormType.CO): 90},
        authority={1: 100},
    )
    return institute, scores


async def test_worked_example_report():
    institute, scores = _worked_example()
    service = CareerReportService(institute, scores)

    report = await service.build_report(1, 10)

    assert [t.entry.full_name for t in report.teachers] == ["TeacherA", "TeacherB"]
    first, second = report.teachers
    assert first.composite == pytest.approx(83.0)
    assert second.composite == 0.0
    assert second.failed is False
    assert report.failures == []


async def test_generate_document_office_numbers_and_names():
    institute, scores = _worked_example()
    renderer = RecordingRenderer()
    service = CareerReportService(institute, scores, renderer=renderer, today=lambda: date(2025, 6, 2))

    report, content = await service.generate_document(1, 10, 100)

    assert content == b"docx-bytes"
    rows = renderer.context["docentes"]
    assert [r["numero_oficio"] for r in rows] == ["ISTLA-VR-2025-100-O", "ISTLA-VR-2025-101-O"]
    assert rows[0]["total_ponderado"] == "83.00"
    assert rows[0]["auto_ponderada"] == "8.00"
    assert rows[0]["hetero_ponderada"] == "28.00"
    assert rows[0]["co_ponderada"] == "27.00"
    assert rows[0]["autoridades_ponderada"] == "20.00"
    assert rows[1]["total_ponderado"] == "0.00"
    assert rows[0]["nombre_completo"] == "TEACHERA"
    assert rows[0]["nombre_con_titulo"] == "Ing. Teachera"
    assert renderer.context["carrera_upper"] == "SOFTWARE ENGINEERING"
    assert renderer.context["periodo"] == "2025-A"
    assert renderer.context["fecha"] == "02 de junio de 2025"


async def test_roster_is_sorted_case_insensitively_and_deterministic():
    institute = FakeInstitute(
        roster={1: [entry(3, 30, "zambrano ana"), entry(1, 10, "Borja Luis"), entry(2, 20, "ARIAS Maria")]}
    )
    service = CareerReportService(institute, FakeScores())

    first = await service.resolve_roster(1, 10)
    second = await service.resolve_roster(1, 10)

    assert [e.full_name for e in first] == ["ARIAS Maria", "Borja Luis", "zambrano ana"]
    assert first == second


def test_roster_order_breaks_name_ties_by_teacher_id():
    ordered = roster_order([entry(5, 9, "Lopez Ana"), entry(4, 3, "LOPEZ ANA")])
    assert [e.teacher_id for e in ordered] == [3, 9]


async def test_unknown_career_or_period_raises_not_found():
    service = CareerReportService(FakeInstitute(), FakeScores())
    with pytest.raises(NotFound):
        await service.build_report(99, 10)
    with pytest.raises(NotFound):
        await service.build_report(1, 99)
    with pytest.raises(NotFound):
        await service.resolve_roster(99, 10)


async def test_empty_roster_is_a_valid_report():
    service = CareerReportService(FakeInstitute(), FakeScores())
    report = await service.build_report(1, 10)
    assert report.teachers == []
    assert await service.resolve_roster(1, 10) == []


async def test_empty_roster_document_raises():
    service = CareerReportService(FakeInstitute(), FakeScores(), renderer=RecordingRenderer())
    with pytest.raises(EmptyRoster) as info:
        await service.generate_document(1, 10, 1)
    assert info.value.status_code == 404


async def test_one_failing_teacher_does_not_abort_the_batch():
    institute = FakeInstitute(roster={1: [entry(10, 1, "Alba Rosa"), entry(20, 2, "Bravo Ivan")]})
    scores = FakeScores(forms={(20, FormType.HETERO): 90}, failing={1})
    service = CareerReportService(institute, scores)

    report = await service.build_report(1, 10)

    failed, ok = report.teachers
    assert failed.failed is True
    assert failed.composite == 0.0
    assert "docente 1" in failed.error
    assert ok.failed is False
    assert ok.composite == pytest.approx(36.0)
    assert len(report.failures) == 1


async def test_reports_are_recomputed_on_each_run():
    institute, scores = _worked_example()
    service = CareerReportService(institute, scores)

    first = await service.build_report(1, 10)
    calls = scores.calls
    second = await service.build_report(1, 10)

    assert scores.calls == calls * 2
    assert [t.composite for t in first.teachers] == [t.composite for t in second.teachers]


async def test_period_reports_group_careers_by_name():
    institute = FakeInstitute(
        careers={1: "Software", 2: "Electricidad"},
        roster={1: [entry(10, 1, "Alba Rosa")], 2: [entry(30, 3, "Borja Luis"), entry(31, 4, "Arias Eva")]},
    )
    service = CareerReportService(institute, FakeScores(authority={3: 50}))

    reports = await service.build_period_reports(10)

    assert [r.career.nombre_carrera for r in reports] == ["Electricidad", "Software"]
    assert [t.entry.full_name for t in reports[0].teachers] == ["Arias Eva", "Borja Luis"]
    assert reports[0].teachers[1].composite == pytest.approx(10.0)


async def test_period_reports_unknown_period():
    service = CareerReportService(FakeInstitute(), FakeScores())
    with pytest.raises(NotFound):
        await service.build_period_reports(77)


def test_dedupe_roster_keeps_lowest_assignment():
    kept = dedupe_roster([entry(12, 7, "Vega Ana"), entry(11, 7, "Vega Ana"), entry(13, 8, "Arias Eva")])
    assert sorted((e.teacher_id, e.assignment_id) for e in kept) == [(7, 11), (8, 13)]


async def test_one_row_per_teacher_when_store_returns_every_assignment():
    institute = FakeInstitute(roster={1: [entry(12, 7, "Vega Ana"), entry(11, 7, "Vega Ana")]})
    scores = FakeScores(forms={(11, FormType.HETERO): 50, (12, FormType.HETERO): 100})
    renderer = RecordingRenderer()
    service = CareerReportService(institute, scores, renderer=renderer, today=lambda: date(2025, 6, 2))

    roster = await service.resolve_roster(1, 10)
    assert [(e.teacher_id, e.assignment_id) for e in roster] == [(7, 11)]

    report, _ = await service.generate_document(1, 10, 40)
    assert len(report.teachers) == 1
    assert report.teachers[0].composite == pytest.approx(20.0)
    assert [r["numero_oficio"] for r in renderer.context["docentes"]] == ["ISTLA-VR-2025-40-O"]

    period_reports = await service.build_period_reports(10)
    assert [t.entry.assignment_id for t in period_reports[0].teachers] == [11]


async def test_one_invalid_score_only_zeroes_that_component():
    institute = FakeInstitute(roster={1: [entry(10, 1, "Alba Rosa")]})
    scores = FakeScores(forms={(10, FormType.SELF): 80, (10, FormType.HETERO): "n/a"})
    service = CareerReportService(institute, scores)

    report = await service.build_report(1, 10)

    row = report.teachers[0]
    assert row.failed is False
    assert row.components.self_score == 80.0
    assert row.components.hetero_score == 0.0
    assert row.composite == pytest.approx(8.0)
    assert report.failures == []
