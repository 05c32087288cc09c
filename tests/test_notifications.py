import logging

from notifications import ConsoleNotifier, Notification


def test_console_notifier_prints_once_and_logs_at_debug(capsys, caplog):
    caplog.set_level(logging.DEBUG, logger="notifications")

    ConsoleNotifier().notify(
        Notification(title="Analysis failed", description="backend down", variant="destructive")
    )

    assert capsys.readouterr().out == "❌ Analysis failed: backend down\n"
    assert [r.levelno for r in caplog.records if r.name == "notifications"] == [logging.DEBUG]


def test_console_notifier_default_variant_uses_check_mark(capsys):
    ConsoleNotifier().notify(Notification(title="Analysis complete", description="Found 0 review comments"))

    assert capsys.readouterr().out.startswith("✅ Analysis complete")
