from decimal import Decimal

from courtbook.services.template_service import TemplateService

CONTEXT = {
    "facility_name": "Sacré Pádel",
    "full_name": "Ana <López>",
    "court_name": "Cancha 1",
    "date_local": "20/10/2026",
    "start_time_local": "10:00",
    "end_time_local": "11:30",
    "total": Decimal("525"),
    "tolerance_minutes": 15,
}


def test_text_confirmation_renders_booking_details():
    text = TemplateService().render("email/booking_confirmation.txt", CONTEXT)

    assert "Hola Ana <López>" in text
    assert "Cancha: Cancha 1" in text
    assert "Horario: 10:00 - 11:30" in text
    assert "$525.00" in text
    assert "15 minutos" in text


def test_html_confirmation_is_autoescaped():
    html = TemplateService().render("email/booking_confirmation.html", CONTEXT)

    assert "Ana &lt;López&gt;" in html
    assert "Cancha 1" in html
