from datetime import date

from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify, current_app
from flask_login import login_required

from hatchplan import db
from hatchplan.models import Batch, Run, RunMode
from hatchplan.services import RunService
from hatchplan.services.errors import ScheduleError
from hatchplan.services.overview import summarize_run
from hatchplan.services.schedule import insertion_plan
from hatchplan.services.species import current_species_table
from hatchplan.utils import parse_date, parse_quantity, selected_day

bp = Blueprint("runs", __name__)


def _batch_rows(form) -> list[dict]:
    """Read the repeated species/quantity/description fields of the run form."""
    rows = []
    for species_id, quantity, description in zip(
        form.getlist("species_id"),
        form.getlist("quantity"),
        form.getlist("description"),
    ):
        if not species_id and not quantity:
            continue
        rows.append({
            "species_id": species_id,
            "quantity": quantity,
            "description": description.strip(),
        })
    return rows


def _get_batch(run, batch_id):
    batch = db.session.get(Batch, batch_id)
    if batch is None or batch.run_id != run.id:
        return None
    return batch


def _form_day(field):
    """Date from a form field, today when left blank, None when unparseable."""
    value = (request.form.get(field) or "").strip()
    if not value:
        return date.today()
    return parse_date(value)


@bp.route("/")
@login_required
def index():
    """List all runs, finished ones included."""
    today = selected_day(request.args.get("on"))
    species_table = current_species_table()
    runs = Run.query.order_by(Run.target_date.desc(), Run.id.desc()).all()

    rows = []
    for run in runs:
        try:
            rows.append({"run": run, "summary": summarize_run(run, today, species_table), "error": None})
        except ScheduleError as exc:
            rows.append({"run": run, "summary": None, "error": str(exc)})

    return render_template("runs/index.html", rows=rows, today=today)


@bp.route("/new", methods=["GET", "POST"])
@login_required
def new():
    """Create a run, optionally previewing the insertion plan first."""
    species_table = current_species_table()
    form = {
        "name": "",
        "mode": RunMode.HATCH,
        "target_date": date.today().isoformat(),
        "notes": "",
        "batches": [],
    }
    plan = None

    if request.method == "POST":
        form.update(
            name=request.form.get("name", "").strip(),
            mode=request.form.get("mode", RunMode.HATCH),
            target_date=request.form.get("target_date", ""),
            notes=request.form.get("notes", "").strip(),
            batches=_batch_rows(request.form),
        )
        template_args = dict(form=form, modes=RunMode.CHOICES, species=species_table.choices())

        target_date = parse_date(form["target_date"])
        if not form["name"]:
            flash("Please enter a name for the run", "error")
            return render_template("runs/new.html", plan=None, **template_args)
        if form["mode"] not in (RunMode.HATCH, RunMode.START):
            flash("Please choose how the batches should be aligned", "error")
            return render_template("runs/new.html", plan=None, **template_args)
        if target_date is None:
            flash("Please enter a valid target date", "error")
            return render_template("runs/new.html", plan=None, **template_args)

        requests = []
        for row in form["batches"]:
            quantity = parse_quantity(row["quantity"])
            if quantity is None:
                flash(f"Egg count for {row['species_id'] or 'a batch'} must be a positive number", "error")
                return render_template("runs/new.html", plan=None, **template_args)
            requests.append((row["species_id"], quantity, row["description"]))

        try:
            if request.form.get("action") == "preview":
                scheduled = RunService.schedule(
                    form["mode"], [(r[0], r[1]) for r in requests], target_date, species_table
                )
                plan = insertion_plan(scheduled)
                return render_template("runs/new.html", plan=plan, **template_args)

            run = RunService.create_run(
                form["name"], form["mode"], target_date, requests, species_table, notes=form["notes"]
            )
        except ScheduleError as exc:
            flash(str(exc), "error")
            return render_template("runs/new.html", plan=None, **template_args)

        flash(f"Run {run.name} created", "success")
        return redirect(url_for("runs.detail", id=run.id))

    return render_template(
        "runs/new.html", form=form, plan=plan, modes=RunMode.CHOICES, species=species_table.choices()
    )


@bp.route("/<int:id>")
@login_required
def detail(id):
    """One run with the phase and progress of each batch."""
    run = db.session.get(Run, id)
    if not run:
        flash("Run not found", "error")
        return redirect(url_for("runs.index"))

    today = selected_day(request.args.get("on"))
    species_table = current_species_table()
    try:
        summary = summarize_run(run, today, species_table)
    except ScheduleError as exc:
        flash(str(exc), "error")
        summary = None

    return render_template(
        "runs/detail.html",
        run=run,
        summary=summary,
        today=today,
        species=species_table.choices(),
    )


@bp.route("/<int:id>/status.json")
@login_required
def status(id):
    """Run progress as JSON."""
    run = db.session.get(Run, id)
    if not run:
        return jsonify({"error": "Run not found"}), 404

    today = selected_day(request.args.get("on"))
    try:
        summary = summarize_run(run, today, current_species_table())
    except ScheduleError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(summary.to_status_dict())


@bp.route("/species.json")
@login_required
def species():
    """The species table the scheduler is working with."""
    return jsonify([
        {
            "id": s.id,
            "name": s.name,
            "incubation_days": s.incubation_days,
            "stop_turning_day": s.stop_turning_day,
            "lockdown_day": s.lockdown_day,
        }
        for s in current_species_table().values()
    ])


@bp.route("/<int:id>/reschedule", methods=["POST"])
@login_required
def reschedule(id):
    """Move the run's common date and recompute the batches."""
    run = db.session.get(Run, id)
    if not run:
        flash("Run not found", "error")
        return redirect(url_for("runs.index"))

    target_date = parse_date(request.form.get("target_date"))
    if target_date is None:
        flash("Please enter a valid target date", "error")
        return redirect(url_for("runs.detail", id=id))

    try:
        RunService.reschedule(run, target_date, current_species_table())
    except ScheduleError as exc:
        db.session.rollback()
        flash(str(exc), "error")
        return redirect(url_for("runs.detail", id=id))

    flash(f"Run rescheduled to {target_date:%d/%m/%Y}", "success")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/batches", methods=["POST"])
@login_required
def add_batch(id):
    """Add a batch to an existing run."""
    run = db.session.get(Run, id)
    if not run:
        flash("Run not found", "error")
        return redirect(url_for("runs.index"))

    quantity = parse_quantity(request.form.get("quantity"))
    if quantity is None:
        flash("Egg count must be a positive number", "error")
        return redirect(url_for("runs.detail", id=id))

    try:
        batch = RunService.add_batch(
            run,
            request.form.get("species_id", ""),
            quantity,
            current_species_table(),
            description=request.form.get("description"),
        )
    except ScheduleError as exc:
        flash(str(exc), "error")
        return redirect(url_for("runs.detail", id=id))

    flash(f"Added {batch.quantity} {batch.species_id} eggs, insert on {batch.insertion_date:%d/%m/%Y}", "success")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/batches/<int:batch_id>/delete", methods=["POST"])
@login_required
def delete_batch(id, batch_id):
    run = db.session.get(Run, id)
    batch = _get_batch(run, batch_id) if run else None
    if not batch:
        flash("Batch not found", "error")
        return redirect(url_for("runs.index"))

    RunService.remove_batch(batch)
    flash("Batch removed", "info")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/batches/<int:batch_id>/inserted", methods=["POST"])
@login_required
def record_insertion(id, batch_id):
    """Record the day a batch actually went into the incubator."""
    run = db.session.get(Run, id)
    batch = _get_batch(run, batch_id) if run else None
    if not batch:
        flash("Batch not found", "error")
        return redirect(url_for("runs.index"))

    inserted_on = _form_day("inserted_on")
    if inserted_on is None:
        flash("Please enter a valid date", "error")
        return redirect(url_for("runs.detail", id=id))

    try:
        RunService.record_insertion(batch, inserted_on, current_species_table())
    except ScheduleError as exc:
        flash(str(exc), "error")
        return redirect(url_for("runs.detail", id=id))

    if run.aligns_hatch and batch.hatch_date != run.target_date:
        flash(
            f"This batch will now hatch on {batch.hatch_date:%d/%m/%Y}, "
            f"not with the rest of the run on {run.target_date:%d/%m/%Y}",
            "warning",
        )
    else:
        flash("Insertion date recorded", "success")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/batches/<int:batch_id>/hatched", methods=["POST"])
@login_required
def mark_hatched(id, batch_id):
    run = db.session.get(Run, id)
    batch = _get_batch(run, batch_id) if run else None
    if not batch:
        flash("Batch not found", "error")
        return redirect(url_for("runs.index"))

    hatched_on = _form_day("hatched_on")
    if hatched_on is None:
        flash("Please enter a valid date", "error")
        return redirect(url_for("runs.detail", id=id))

    RunService.mark_hatched(batch, hatched_on)
    flash("Batch marked as hatched", "success")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/batches/<int:batch_id>/reopen", methods=["POST"])
@login_required
def reopen(id, batch_id):
    run = db.session.get(Run, id)
    batch = _get_batch(run, batch_id) if run else None
    if not batch:
        flash("Batch not found", "error")
        return redirect(url_for("runs.index"))

    RunService.reopen(batch)
    flash("Batch reopened", "info")
    return redirect(url_for("runs.detail", id=id))


@bp.route("/<int:id>/delete", methods=["POST"])
@login_required
def delete(id):
    run = db.session.get(Run, id)
    if not run:
        flash("Run not found", "error")
        return redirect(url_for("runs.index"))

    name = run.name
    try:
        RunService.delete_run(run)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete run %s", id)
        flash("Could not delete the run", "error")
        return redirect(url_for("runs.detail", id=id))

    flash(f"Run {name} deleted", "info")
    return redirect(url_for("runs.index"))
