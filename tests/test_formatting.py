from datetime import date

from app.services import formatting


def test_titled_name_strips_and_restores_honorific():
    assert formatting.titled_name("Ing. JUAN CARLOS pérez lopez") == "Ing. Juan Carlos Pérez Lopez"


def test_titled_name_without_honorific():
    assert formatting.titled_name("ZAMBRANO  ana   maría") == "Ing. Zambrano Ana María"


def test_upper_name():
    assert formatting.upper_name("JUAN CARLOS pérez lopez") == "JUAN CARLOS PÉREZ LOPEZ"
    assert formatting.upper_name("Ing. JUAN CARLOS pérez lopez") == "JUAN CARLOS PÉREZ LOPEZ"


def test_strip_honorific_is_case_insensitive():
    assert formatting.strip_honorific("ING.   Luis Borja") == "Luis Borja"
    assert formatting.strip_honorific("Ingrid Torres") == "Ingrid Torres"


def test_office_numbers_are_sequential():
    assert formatting.office_numbers(2025, 100, 3) == [
        "ISTLA-VR-2025-100-O",
        "ISTLA-VR-2025-101-O",
        "ISTLA-VR-2025-102-O",
    ]
    assert formatting.office_numbers(2025, 7, 0) == []


def test_long_spanish_date():
    assert formatting.long_spanish_date(date(2025, 3, 5)) == "05 de marzo de 2025"
    assert formatting.long_spanish_date(date(2026, 10, 19)) == "19 de octubre de 2026"


def test_report_filename_is_ascii():
    name = formatting.report_filename("Reporte_Evaluacion", "Mecánica Automotriz ", date(2025, 4, 1), "docx")
    assert name == "Reporte_Evaluacion_Mecanica_Automotriz_2025-04-01.docx"
