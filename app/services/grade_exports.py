"""
Grade report exports (JSON rows, PDF, Excel) built from ``CareerReport``s,
and the PDF of the individual ``TeacherReport``.

The tables show the normalized score of each evaluation type (0-100) and the
weighted total, with the valuation label next to it in Excel.
"""
import io
from datetime import datetime
from typing import List, Sequence, Tuple
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.schemas.report import CareerReport, CareerScoresResponse, TeacherReport, TeacherScoreRow
from app.services.scoring import RATING_SCALE, WEIGHTS, format_score, rating_label, round_score

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

INSTITUTE_NAME = "INSTITUTO SUPERIOR TECNOLÓGICO LOS ANDES"

# printed when the user has no signatories and REPORT_SIGNATORIES is empty
DEFAULT_SIGNATORIES = [("", "VICERRECTORADO ACADÉMICO")]

SCORE_HEADERS = ["Autoevaluación", "Heteroevaluación", "Coevaluación", "Eval. Autoridades"]
TABLE_HEADERS = ["N°", "Docente", "Cédula"] + SCORE_HEADERS + ["Total"]

HEADER_BG = "1F3864"
BAND_BG = "F2F2F2"
BORDER_CL = "B0B0B0"


def score_rows(report: CareerReport) -> List[TeacherScoreRow]:
    rows = []
    for number, teacher in enumerate(report.teachers, start=1):
        c = teacher.components
        rows.append(TeacherScoreRow(
            numero=number,
            id_docente=teacher.entry.teacher_id,
            id_distributivo=teacher.entry.assignment_id,
            nombre_completo=teacher.entry.full_name,
            cedula=teacher.entry.document,
            autoevaluacion=round_score(c.self_score),
            heteroevaluacion=round_score(c.hetero_score),
            coevaluacion=round_score(c.co_score),
            evaluacion_autoridades=round_score(c.authority_score),
            promedio_ponderado=round_score(teacher.composite),
            valoracion=rating_label(teacher.composite),
        ))
    return rows


def career_scores(report: CareerReport) -> CareerScoresResponse:
    return CareerScoresResponse(
        id_carrera=report.career.id_carrera,
        nombre_carrera=report.career.nombre_carrera,
        periodo=report.period,
        docentes=score_rows(report),
    )


def _scale_ranges() -> List[str]:
    ranges, lower = [], 0
    for upper, _ in RATING_SCALE:
        ranges.append(f"{lower}-{upper}")
        lower = upper + 1
    return ranges


def _grid_style() -> TableStyle:
    return TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#" + BORDER_CL)),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#" + HEADER_BG)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ])


def _legend_tables() -> Table:
    weights = Table(
        [SCORE_HEADERS, [f"{round(w * 100)}%" for w in WEIGHTS.values()]],
        colWidths=[3 * cm] * len(SCORE_HEADERS),
    )
    weights.setStyle(_grid_style())
    scale = Table(
        [_scale_ranges(), [label for _, label in RATING_SCALE]],
        colWidths=[2.2 * cm] * len(RATING_SCALE),
    )
    scale.setStyle(_grid_style())
    # side by side, as on the printed form
    legend = Table([["Ponderaciones", "", "Escala Valorativa"], [weights, "", scale]])
    legend.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return legend


def _career_table(report: CareerReport, cell_style: ParagraphStyle) -> Table:
    data = [TABLE_HEADERS]
    for row in score_rows(report):
        data.append([
            str(row.numero),
            Paragraph(escape(row.nombre_completo), cell_style),
            row.cedula or "",
            format_score(row.autoevaluacion),
            format_score(row.heteroevaluacion),
            format_score(row.coevaluacion),
            format_score(row.evaluacion_autoridades),
            format_score(row.promedio_ponderado),
        ])
    table = Table(
        data,
        colWidths=[1 * cm, 7 * cm, 2.6 * cm, 2.6 * cm, 2.8 * cm, 2.6 * cm, 2.8 * cm, 2 * cm],
        repeatRows=1,
    )
    style = _grid_style()
    for index in range(1, len(data)):
        if index % 2 == 0:
            style.add("BACKGROUND", (0, index), (-1, index), colors.HexColor("#" + BAND_BG))
    style.add("ALIGN", (1, 1), (1, -1), "LEFT")
    style.add("FONTNAME", (-1, 1), (-1, -1), "Helvetica-Bold")
    table.setStyle(style)
    return table


def _signatures(signatories: Sequence[Tuple[str, str]], style: ParagraphStyle) -> Table:
    cells = [
        Paragraph(f"_____________________________<br/>{escape(name)}<br/><b>{escape(title)}</b>", style)
        for name, title in signatories
    ]
    table = Table([cells], colWidths=[8 * cm] * len(cells))
    table.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER"), ("TOPPADDING", (0, 0), (-1, -1), 40)]))
    return table


def build_pdf(
    reports: Sequence[CareerReport],
    generated_at: datetime,
    signatories: Sequence[Tuple[str, str]] = (),
) -> bytes:
    """One landscape document: header, legend, one table per career, signatures."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title="Reporte de calificaciones por carrera",
    )
    styles = getSampleStyleSheet()
    centered = ParagraphStyle("centered", parent=styles["Normal"], alignment=1, fontSize=9)
    cell = ParagraphStyle("cell", parent=styles["Normal"], fontSize=8, leading=10)

    story = [
        Paragraph(f"<b>{INSTITUTE_NAME}</b>", ParagraphStyle("inst", parent=styles["Title"], fontSize=14)),
        Paragraph("REPORTE DE CALIFICACIONES DE EVALUACIÓN DOCENTE", styles["Heading2"]),
    ]
    if reports:
        story.append(Paragraph(f"<b>Periodo:</b> {escape(reports[0].period.descripcion)}", styles["Normal"]))
    story.append(Paragraph(f"<b>Fecha de generación:</b> {generated_at:%d/%m/%Y %H:%M}", styles["Normal"]))
    story.append(Spacer(1, 12))
    story.append(_legend_tables())
    story.append(Spacer(1, 14))

    for report in reports:
        story.append(KeepTogether([
            Paragraph(f"<b>Carrera:</b> {escape(report.career.nombre_carrera)}", styles["Heading4"]),
            Spacer(1, 4),
        ]))
        story.append(_career_table(report, cell))
        story.append(Spacer(1, 16))

    if signatories:
        story.append(_signatures(signatories, centered))

    doc.build(story)
    return buffer.getvalue()


def _teacher_summary_table(report: TeacherReport) -> Table:
    data = [["Tipo de Evaluación", "Promedio", "Ponderación", "Contribución"]]
    for item in report.evaluaciones:
        if item.promedio is None:
            continue
        data.append([
            item.nombre,
            format_score(item.promedio),
            f"{round(item.ponderacion * 100)}%",
            format_score(item.contribucion),
        ])
    data.append([f"PROMEDIO FINAL PONDERADO: {format_score(report.promedio_final)}/100", "", "", ""])
    table = Table(data, colWidths=[7 * cm, 2.8 * cm, 2.8 * cm, 3.4 * cm])
    style = _grid_style()
    style.add("ALIGN", (0, 1), (0, -2), "LEFT")
    style.add("SPAN", (0, -1), (-1, -1))
    style.add("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")
    style.add("FONTSIZE", (0, -1), (-1, -1), 10)
    table.setStyle(style)
    return table


def _scale_table() -> Table:
    table = Table([_scale_ranges(), [label for _, label in RATING_SCALE]], colWidths=[3.2 * cm] * len(RATING_SCALE))
    table.setStyle(_grid_style())
    return table


def build_teacher_pdf(
    report: TeacherReport,
    generated_at: datetime,
    signatories: Sequence[Tuple[str, str]] = (),
) -> bytes:
    """Portrait one-pager: teacher data, score summary, scale, authority notes, signatures."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=2 * cm,
        rightMargin=2 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title="Reporte individual de evaluación docente",
    )
    styles = getSampleStyleSheet()
    centered = ParagraphStyle("centered", parent=styles["Normal"], alignment=1, fontSize=9)
    section = ParagraphStyle("section", parent=styles["Heading4"], spaceBefore=10)

    notes = "; ".join(report.observaciones)
    notes_cell = Paragraph(escape(notes) if notes else "<i>Sin observaciones</i>", styles["Normal"])
    notes_box = Table([[notes_cell]], colWidths=[16 * cm], rowHeights=[1.8 * cm])
    notes_box.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), 0.5, colors.HexColor("#" + BORDER_CL)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))

    story = [
        Paragraph(f"<b>{INSTITUTE_NAME}</b>", ParagraphStyle("inst", parent=styles["Title"], fontSize=14)),
        Paragraph("REPORTE INDIVIDUAL DE EVALUACIÓN DOCENTE", ParagraphStyle("t", parent=styles["Heading2"], alignment=1)),
        Paragraph(f"PERÍODO: {escape(report.periodo.descripcion)}", centered),
        Paragraph("INFORMACIÓN DEL DOCENTE", section),
        Paragraph(f"<b>Nombre:</b> {escape(report.nombre)}", styles["Normal"]),
        Paragraph(f"<b>Cédula:</b> {escape(report.cedula)}", styles["Normal"]),
        Paragraph(f"<b>Fecha de generación:</b> {generated_at:%d/%m/%Y %H:%M}", styles["Normal"]),
        Paragraph("RESUMEN DE EVALUACIONES", section),
        _teacher_summary_table(report),
        Paragraph("ESCALA VALORATIVA", section),
        _scale_table(),
        Paragraph("OBSERVACIONES DE AUTORIDADES", section),
        notes_box,
    ]
    if signatories:
        story.append(_signatures(signatories, centered))

    doc.build(story)
    return buffer.getvalue()


def build_xlsx(report: CareerReport) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Calificaciones"

    ws.append([f"Reporte de calificaciones - {report.career.nombre_carrera}"])
    ws.append([f"Periodo: {report.period.descripcion}"])
    ws.append([])
    ws["A1"].font = Font(size=14, bold=True)
    ws["A2"].font = Font(italic=True)

    ws.append(TABLE_HEADERS + ["Valoración"])
    header_row = ws.max_row
    for row in score_rows(report):
        ws.append([
            row.numero,
            row.nombre_completo,
            row.cedula or "",
            row.autoevaluacion,
            row.heteroevaluacion,
            row.coevaluacion,
            row.evaluacion_autoridades,
            row.promedio_ponderado,
            row.valoracion,
        ])

    header_fill = PatternFill("solid", fgColor=HEADER_BG)
    header_font = Font(bold=True, color="FFFFFF")
    band_fill = PatternFill("solid", fgColor=BAND_BG)
    thin = Side(border_style="thin", color=BORDER_CL)
    border = Border(top=thin, left=thin, right=thin, bottom=thin)

    for r in range(header_row, ws.max_row + 1):
        for c in range(1, ws.max_column + 1):
            cell = ws.cell(row=r, column=c)
            cell.border = border
            if r == header_row:
                cell.fill = header_fill
                cell.font = header_font
                cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
                continue
            if (r - header_row) % 2 == 0:
                cell.fill = band_fill
            if 4 <= c <= 8:
                cell.number_format = "0.00"

    widths = [6, 40, 14, 16, 18, 15, 18, 10, 14]
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
