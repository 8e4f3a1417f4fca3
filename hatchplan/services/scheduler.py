"""APScheduler integration for the daily reminder digest."""

import logging
from datetime import date, datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from hatchplan.services import email as email_service
from hatchplan.services.errors import ScheduleError
from hatchplan.services.schedule import due_reminders
from hatchplan.services.species import current_species_table

logger = logging.getLogger(__name__)

_scheduler = None
_JOB_ID = "daily_reminders"


def init_app(app) -> None:
    """Start the scheduler and apply the current reminder schedule."""
    global _scheduler
    if not app.config.get("SCHEDULER_ENABLED", True):
        logger.info("Reminder scheduler disabled by configuration.")
        return
    if _scheduler is None:
        _scheduler = BackgroundScheduler(timezone=app.config.get("SCHEDULER_TIMEZONE", "UTC"))
    if not _scheduler.running:
        _scheduler.start()
    apply_schedule(app)


def apply_schedule(app) -> None:
    """Update the reminder job to match the current settings."""
    if _scheduler is None:
        return

    with app.app_context():
        from hatchplan.models import Settings
        try:
            hour = Settings.get_reminder_hour()
        except SQLAlchemyError:
            # settings table missing until the first migration has run
            logger.warning("Could not read reminder settings; digest not scheduled.")
            hour = None

    if _scheduler.get_job(_JOB_ID):
        _scheduler.remove_job(_JOB_ID)

    trigger = _make_trigger(hour)
    if trigger:
        _scheduler.add_job(
            _run_daily_reminders,
            trigger=trigger,
            id=_JOB_ID,
            args=[app],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Reminder digest scheduled daily at %02d:00", hour)
    else:
        logger.info("Reminder digest disabled.")


def _make_trigger(hour):
    if hour is None:
        return None
    return CronTrigger(hour=hour, minute=0)


def send_daily_digest(app, today: date = None) -> list:
    """Collect the reminders due on *today* and deliver them.

    Emails every subscribed user when SMTP is configured; otherwise the
    reminders are only written to the log. A run whose batches cannot be
    scheduled is skipped and named in the status. Returns the reminders found.
    """
    with app.app_context():
        from hatchplan.models import Run, Settings, User

        today = today or date.today()
        species_table = current_species_table()
        reminders = []
        skipped = []
        for run in Run.query.order_by(Run.target_date, Run.id):
            try:
                reminders.extend(due_reminders([run], today, species_table))
            except ScheduleError as exc:
                logger.warning("Skipping run %s (%s) in reminder digest: %s", run.id, run.name, exc)
                skipped.append(run.name)

        if not reminders:
            logger.info("No incubator reminders for %s", today)
            status = "nothing due"
        else:
            recipients = User.reminder_recipients()
            if recipients and email_service.is_configured():
                email_service.send_reminder_digest(recipients, today, reminders)
                status = f"emailed {len(reminders)} reminder(s)"
            else:
                for reminder in reminders:
                    logger.info("Reminder for %s: %s", today, reminder.message)
                status = f"logged {len(reminders)} reminder(s)"
        if skipped:
            status = f"{status}; skipped {len(skipped)} run(s): {', '.join(skipped)}"

        Settings.set("reminder_last_run", datetime.now().isoformat(timespec="seconds"))
        Settings.set("reminder_last_status", status)
        return reminders


def _run_daily_reminders(app) -> None:
    try:
        send_daily_digest(app)
    except Exception:
        logger.exception("Scheduled reminder digest failed")
