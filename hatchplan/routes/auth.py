from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, login_required, current_user

from hatchplan import db
from hatchplan.models import User, UserRole
from hatchplan.utils import is_valid_email

bp = Blueprint("auth", __name__)


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.index"))

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")

        user = User.query.filter_by(email=email).first()

        if user and user.is_active and user.check_password(password):
            login_user(user)
            next_page = request.args.get("next")
            if not next_page or not next_page.startswith("/"):
                next_page = url_for("main.index")
            return redirect(next_page)

        flash("Invalid email or password", "error")

    return render_template("auth/login.html")


@bp.route("/logout")
@login_required
def logout():
    logout_user()
    return redirect(url_for("auth.login"))


@bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user.is_authenticated:
        return redirect(url_for("main.index"))

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")
        first_name = request.form.get("first_name")
        last_name = request.form.get("last_name")

        if not is_valid_email(email):
            flash("Invalid email address.", "error")
            return render_template("auth/register.html")

        if len(password) < 8:
            flash("Password must be at least 8 characters.", "error")
            return render_template("auth/register.html")

        if User.query.filter_by(email=email).first():
            flash("Email already registered", "error")
            return render_template("auth/register.html")

        # The first account on a fresh install administers it
        role = UserRole.KEEPER if User.query.first() else UserRole.ADMIN
        user = User(email=email, first_name=first_name, last_name=last_name, role=role)
        user.set_password(password)

        db.session.add(user)
        db.session.commit()

        flash("Registration successful! Please log in.", "success")
        return redirect(url_for("auth.login"))

    return render_template("auth/register.html")


@bp.route("/change-password", methods=["GET", "POST"])
@login_required
def change_password():
    if request.method == "POST":
        new_password = request.form.get("new_password", "")
        confirm_password = request.form.get("confirm_password", "")

        if len(new_password) < 8:
            flash("Password must be at least 8 characters.", "error")
            return render_template("auth/change_password.html")

        if new_password != confirm_password:
            flash("Passwords do not match.", "error")
            return render_template("auth/change_password.html")

        current_user.set_password(new_password)
        db.session.commit()
        flash("Password updated successfully.", "success")
        return redirect(url_for("main.index"))

    return render_template("auth/change_password.html")


@bp.route("/reminders", methods=["POST"])
@login_required
def toggle_reminders():
    """Subscribe to or unsubscribe from the daily reminder email."""
    current_user.receive_reminders = request.form.get("receive_reminders") == "on"
    db.session.commit()
    if current_user.receive_reminders:
        flash("You will receive the daily reminder email.", "success")
    else:
        flash("Daily reminder email turned off.", "info")
    return redirect(request.referrer or url_for("main.index"))
