from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app
from flask_login import login_required

from hatchplan.models import Settings, User, admin_required
from hatchplan.services import email as email_service
from hatchplan.services import scheduler as scheduler_service
from hatchplan.services.species import current_species_table
from hatchplan.utils import selected_day

bp = Blueprint("settings", __name__)


@bp.route("/", methods=["GET", "POST"])
@login_required
@admin_required
def index():
    """Application settings page."""
    if request.method == "POST":
        reminder_hour = request.form.get("reminder_hour", "").strip()
        if reminder_hour:
            try:
                hour = int(reminder_hour)
            except ValueError:
                hour = -1
            if not 0 <= hour <= 23:
                flash("Reminder hour must be a number between 0 and 23", "error")
                return redirect(url_for("settings.index"))
            Settings.set_reminder_hour(hour)
        else:
            Settings.set_reminder_hour(None)
        scheduler_service.apply_schedule(current_app._get_current_object())

        flash("Settings saved", "success")
        return redirect(url_for("settings.index"))

    return render_template(
        "settings/index.html",
        reminder_config=Settings.get_reminder_config(),
        smtp_config=Settings.get_smtp_config(),
        smtp_configured=email_service.is_configured(),
        recipients=User.reminder_recipients(),
        species=list(current_species_table().values()),
        scheduler_enabled=current_app.config.get("SCHEDULER_ENABLED", True),
    )


@bp.route("/save-smtp-config", methods=["POST"])
@login_required
@admin_required
def save_smtp_config():
    """Save outgoing mail configuration."""
    Settings.save_smtp_config(
        host=request.form.get("smtp_host", ""),
        port=request.form.get("smtp_port", "587"),
        user=request.form.get("smtp_user", ""),
        from_email=request.form.get("smtp_from_email", ""),
        use_tls=request.form.get("smtp_use_tls") == "on",
        password=request.form.get("smtp_password") or None,
    )
    flash("Email configuration saved", "success")
    return redirect(url_for("settings.index"))


@bp.route("/send-digest", methods=["POST"])
@login_required
@admin_required
def send_digest():
    """Send (or log) the reminder digest for a day right now."""
    today = selected_day(request.form.get("on"))
    try:
        reminders = scheduler_service.send_daily_digest(current_app._get_current_object(), today)
    except Exception as exc:
        current_app.logger.exception("Manual reminder digest failed")
        flash(f"Reminder digest failed: {exc}", "error")
        return redirect(url_for("settings.index"))

    flash(f"{len(reminders)} reminder(s) due on {today:%d/%m/%Y}", "success")
    return redirect(url_for("settings.index"))
