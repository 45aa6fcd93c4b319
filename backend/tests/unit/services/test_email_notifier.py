from unittest.mock import patch

from courtbook.services.email import NullNotifier, ResendNotifier, build_notifier


def test_build_notifier_without_key_is_a_no_op():
    notifier = build_notifier(None, "reservas@correo.mx")
    assert isinstance(notifier, NullNotifier)

    result = notifier.send("ana@correo.mx", "Hola", "<p>Hola</p>", "Hola")
    assert result.ok is False
    assert "not configured" in result.error


def test_resend_notifier_sends_with_named_sender():
    notifier = build_notifier("re_test", "reservas@correo.mx", "Sacré Pádel")
    assert isinstance(notifier, ResendNotifier)

    with patch("courtbook.services.email.resend.Emails.send") as send:
        result = notifier.send("ana@correo.mx", "Confirmación", "<p>ok</p>", "ok")

    assert result.ok is True
    payload = send.call_args.args[0]
    assert payload["from"] == "Sacré Pádel <reservas@correo.mx>"
    assert payload["to"] == "ana@correo.mx"
    assert payload["subject"] == "Confirmación"
    assert payload["text"] == "ok"


def test_resend_errors_become_failed_results():
    notifier = ResendNotifier("re_test", "reservas@correo.mx")

    with patch(
        "courtbook.services.email.resend.Emails.send", side_effect=RuntimeError("rate limited")
    ):
        result = notifier.send("ana@correo.mx", "Hola", "<p>Hola</p>", "Hola")

    assert result.ok is False
    assert result.error == "rate limited"
