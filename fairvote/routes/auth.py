from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import (
    current_user,
    login_required,
    login_user,
    logout_user,
    user_logged_in,
    user_logged_out,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from fairvote.extensions import db
from fairvote.models import User
from fairvote.services.elections import normalize_email


def _log_signed_in(sender, user, **extra):
    sender.logger.info("User %s signed in", user.id)


def _log_signed_out(sender, user, **extra):
    if user is not None and getattr(user, "id", None) is not None:
        sender.logger.info("User %s signed out", user.id)


def register_auth_routes(app):
    user_logged_in.connect(_log_signed_in, app)
    user_logged_out.connect(_log_signed_out, app)

    @app.route("/signup", methods=["GET", "POST"])
    def signup():
        if request.method == "POST":
            email = normalize_email(request.form.get("email"))
            display_name = (request.form.get("display_name") or "").strip() or None
            password = request.form.get("password") or ""

            if not email or "@" not in email:
                flash("Please enter a valid email address.", "error")
                return redirect(url_for("signup"))
            if len(password) < 8:
                flash("Password must be at least 8 characters long.", "error")
                return redirect(url_for("signup"))

            new_user = User(
                email=email,
                display_name=display_name,
                password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
            )

            try:
                db.session.add(new_user)
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                flash("An account with this email already exists.", "error")
                return redirect(url_for("signup"))
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.exception("Could not register %s", email)
                flash("Database error: Could not register user.", "error")
                return redirect(url_for("signup"))

            flash("Account created successfully! Please log in.", "success")
            return redirect(url_for("login"))

        return render_template("auth/signup.html")

    @app.route("/check-email", methods=["POST"])
    def check_email():
        data = request.get_json(silent=True) or {}
        email = normalize_email(data.get("email"))
        user = User.query.filter_by(email=email).first() if email else None
        return jsonify({"exists": user is not None})

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if current_user.is_authenticated:
            return redirect(url_for("index"))

        error = None
        if request.method == "POST":
            email = normalize_email(request.form.get("email"))
            password = request.form.get("password") or ""
            remember = bool(request.form.get("remember"))

            user = User.query.filter_by(email=email).first() if email else None
            if not user or not check_password_hash(user.password_hash, password):
                error = "Invalid email or password."
            else:
                login_user(user, remember=remember)
                next_url = request.args.get("next")
                if next_url and next_url.startswith("/") and not next_url.startswith("//"):
                    return redirect(next_url)
                return redirect(url_for("index"))

        return render_template("auth/login.html", error=error)

    @app.route("/logout")
    @login_required
    def logout():
        logout_user()
        return redirect(url_for("index"))
