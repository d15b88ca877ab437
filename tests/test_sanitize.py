from pydantic import BaseModel

from app.utils.sanitize import CleanStr, escape_html, find_suspicious, sanitize


def test_escape_html_does_not_double_escape_ampersand():
    assert escape_html("<b>A & B</b>") == "&lt;b&gt;A &amp; B&lt;&#x2F;b&gt;"
    assert escape_html("it's \"quoted\"") == "it&#x27;s &quot;quoted&quot;"


def test_sanitize_walks_nested_structures():
    data = {"name": "<x>", "items": ["a/b", 3, None], "nested": {"ok": True}}
    assert sanitize(data) == {"name": "&lt;x&gt;", "items": ["a&#x2F;b", 3, None], "nested": {"ok": True}}


def test_find_suspicious():
    assert find_suspicious("/api?q=1 UNION  SELECT *") == "UNION  SELECT"
    assert find_suspicious("/api/v1/filtros/periodos") is None
    assert find_suspicious("<img onerror=alert(1)>") == "onerror="


def test_clean_str_strips_and_escapes():
    class Payload(BaseModel):
        texto: CleanStr

    assert Payload(texto="  <b>hola</b>  ").texto == "&lt;b&gt;hola&lt;&#x2F;b&gt;"
