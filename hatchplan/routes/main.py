from flask import Blueprint, render_template, request
from flask_login import login_required

from hatchplan.models import Run
from hatchplan.services.errors import ScheduleError
from hatchplan.services.overview import eggs_by_species, phase_totals, summarize_run
from hatchplan.services.species import current_species_table
from hatchplan.utils import selected_day

bp = Blueprint("main", __name__)


@bp.route("/")
@login_required
def index():
    """Dashboard - today's chores and the progress of every open run."""
    today = selected_day(request.args.get("on"))
    species_table = current_species_table()

    summaries = []
    broken = []
    for run in Run.query.order_by(Run.target_date, Run.id).all():
        try:
            summaries.append(summarize_run(run, today, species_table))
        except ScheduleError as exc:
            broken.append({"run": run, "error": str(exc)})

    active = [s for s in summaries if not s.is_finished]
    reminders = [r for s in summaries for r in s.reminders]

    return render_template(
        "main/index.html",
        today=today,
        summaries=active,
        finished_count=len(summaries) - len(active),
        broken=broken,
        reminders=reminders,
        phase_totals=phase_totals(summaries),
        eggs_by_species=eggs_by_species(summaries),
    )
