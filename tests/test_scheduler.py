from datetime import date
from unittest import mock

from hatchplan import db
from hatchplan.models import Batch, Run, RunMode, Settings, User
from hatchplan.services import RunService, scheduler
from hatchplan.services.species import current_species_table


def _seed(app, hatch_day=date(2025, 6, 15)):
    with app.app_context():
        RunService.create_run(
            "June hatch", RunMode.HATCH, hatch_day,
            [("chicken", 12, ""), ("duck", 6, "")], current_species_table(),
        )
        user = User(email="keeper@example.com", first_name="Kee", last_name="Per")
        user.set_password("long-enough")
        db.session.add(user)
        db.session.commit()


def _configure_smtp():
    Settings.save_smtp_config("smtp.example.com", "587", "mailer", "coop@example.com", True, "pw")


def test_digest_emails_subscribers(app):
    _seed(app)
    with app.app_context():
        _configure_smtp()

    with mock.patch.object(scheduler.email_service, "send_reminder_digest") as send:
        reminders = scheduler.send_daily_digest(app, date(2025, 5, 25))

    assert [r.kind for r in reminders] == ["insert"]
    send.assert_called_once()
    recipients, today, sent = send.call_args.args
    assert recipients == ["keeper@example.com"]
    assert today == date(2025, 5, 25)
    assert sent == reminders

    with app.app_context():
        assert Settings.get("reminder_last_status") == "emailed 1 reminder(s)"


def test_digest_only_logs_without_smtp(app, caplog):
    _seed(app)

    with mock.patch.object(scheduler.email_service, "send_reminder_digest") as send, \
            caplog.at_level("INFO", logger="hatchplan.services.scheduler"):
        reminders = scheduler.send_daily_digest(app, date(2025, 6, 15))

    assert len(reminders) == 2
    send.assert_not_called()
    assert "should hatch today" in caplog.text
    with app.app_context():
        assert Settings.get("reminder_last_status") == "logged 2 reminder(s)"


def test_digest_skips_unsubscribed_users(app):
    _seed(app)
    with app.app_context():
        _configure_smtp()
        User.query.one().receive_reminders = False
        db.session.commit()

    with mock.patch.object(scheduler.email_service, "send_reminder_digest") as send:
        scheduler.send_daily_digest(app, date(2025, 5, 18))

    send.assert_not_called()


def test_quiet_day(app):
    _seed(app)
    reminders = scheduler.send_daily_digest(app, date(2025, 5, 20))
    assert reminders == []
    with app.app_context():
        assert Settings.get("reminder_last_status") == "nothing due"


def test_digest_skips_run_with_unknown_species(app, caplog):
    _seed(app)
    with app.app_context():
        bad = Run(name="Emu trial", mode=RunMode.HATCH, target_date=date(2025, 6, 1))
        bad.batches.append(Batch(
            species_id="emu", quantity=2,
            insertion_date=date(2025, 4, 12), hatch_date=date(2025, 6, 1),
        ))
        db.session.add(bad)
        db.session.commit()

    with caplog.at_level("WARNING", logger="hatchplan.services.scheduler"):
        reminders = scheduler.send_daily_digest(app, date(2025, 5, 25))

    assert [(r.run_name, r.kind) for r in reminders] == [("June hatch", "insert")]
    assert "Emu trial" in caplog.text
    with app.app_context():
        assert Settings.get("reminder_last_status") == "logged 1 reminder(s); skipped 1 run(s): Emu trial"


def test_scheduled_job_logs_failures(app, caplog):
    with mock.patch.object(scheduler, "send_daily_digest", side_effect=RuntimeError("smtp down")), \
            caplog.at_level("ERROR", logger="hatchplan.services.scheduler"):
        scheduler._run_daily_reminders(app)

    assert "Scheduled reminder digest failed" in caplog.text


def test_trigger_follows_reminder_hour(app_context):
    assert scheduler._make_trigger(None) is None
    trigger = scheduler._make_trigger(7)
    assert "hour='7'" in str(trigger)

    Settings.set_reminder_hour(6)
    assert Settings.get_reminder_hour() == 6
    Settings.set("reminder_hour", "25")
    assert Settings.get_reminder_hour() is None
    Settings.set_reminder_hour(None)
    assert Settings.get_reminder_hour() is None
