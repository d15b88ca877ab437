"""
Word rendering of the career report.

The template is a .docx with Jinja tags (docxtpl). It receives ``fecha``,
``carrera``, ``carrera_upper``, ``periodo``, ``periodo_upper`` and a
``docentes`` list; each teacher row carries ``nombre_completo``,
``nombre_con_titulo``, the four weighted scores, ``total_ponderado`` and
``numero_oficio``.
"""
import io
import logging
import zipfile
from datetime import date
from pathlib import Path
from typing import Any, Dict, Union

from docx.opc.exceptions import PackageNotFoundError
from docxtpl import DocxTemplate
from jinja2 import TemplateError

from app.core.exceptions import RenderFailure
from app.core.logging import kv
from app.schemas.report import CareerReport
from app.services.formatting import long_spanish_date, office_number, titled_name, upper_name
from app.services.scoring import format_score

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def build_docx_context(report: CareerReport, first_office_number: int, today: date) -> Dict[str, Any]:
    docentes = []
    for position, teacher in enumerate(report.teachers):
        weighted = teacher.weighted
        docentes.append({
            "nombre_completo": upper_name(teacher.entry.full_name),
            "nombre_con_titulo": titled_name(teacher.entry.full_name),
            "auto_ponderada": format_score(weighted.self_score),
            "hetero_ponderada": format_score(weighted.hetero_score),
            "co_ponderada": format_score(weighted.co_score),
            "autoridades_ponderada": format_score(weighted.authority_score),
            "total_ponderado": format_score(teacher.composite),
            "numero_oficio": office_number(today.year, first_office_number, position),
        })
    return {
        "fecha": long_spanish_date(today),
        "carrera": report.career.nombre_carrera,
        "carrera_upper": report.career.nombre_carrera.upper(),
        "periodo": report.period.descripcion,
        "periodo_upper": report.period.descripcion.upper(),
        "docentes": docentes,
    }


class DocxTemplateRenderer:
    def __init__(self, template_path: Union[str, Path]):
        self.template_path = Path(template_path)

    def render(self, context: Dict[str, Any]) -> bytes:
        if not self.template_path.is_file():
            raise RenderFailure(f"Plantilla Word no encontrada: {self.template_path}")
        try:
            doc = DocxTemplate(str(self.template_path))
            doc.render(context, autoescape=True)
            buffer = io.BytesIO()
            doc.save(buffer)
        except (TemplateError, PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
            logger.error("docx render failed %s", kv(plantilla=self.template_path, error=exc))
            raise RenderFailure(f"Plantilla Word inválida: {exc}") from exc
        return buffer.getvalue()
