from hatchplan import db


class Settings(db.Model):
    """Application settings stored in the database."""

    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def get(cls, key: str, default: str = None) -> str:
        """Get a setting value by key."""
        setting = cls.query.filter_by(key=key).first()
        return setting.value if setting else default

    @classmethod
    def set(cls, key: str, value: str) -> None:
        """Set a setting value."""
        setting = cls.query.filter_by(key=key).first()
        if setting:
            setting.value = value
        else:
            setting = cls(key=key, value=value)
            db.session.add(setting)
        db.session.commit()

    # ------------------------------------------------------------------
    # Reminder digest settings
    # ------------------------------------------------------------------

    @classmethod
    def get_reminder_hour(cls) -> int | None:
        """Hour of day (0-23) the digest is sent at, or None when disabled."""
        value = cls.get("reminder_hour")
        try:
            hour = int(value) if value else None
        except (ValueError, TypeError):
            return None
        if hour is None or not 0 <= hour <= 23:
            return None
        return hour

    @classmethod
    def set_reminder_hour(cls, hour: int | None) -> None:
        cls.set("reminder_hour", "" if hour is None else str(hour))

    @classmethod
    def get_reminder_config(cls) -> dict:
        """Return all reminder-related settings as a dict."""
        return {
            "hour": cls.get_reminder_hour(),
            "last_run": cls.get("reminder_last_run", ""),
            "last_status": cls.get("reminder_last_status", ""),
        }

    # ------------------------------------------------------------------
    # SMTP / email settings
    # ------------------------------------------------------------------

    @classmethod
    def get_smtp_config(cls) -> dict:
        """Return all SMTP-related settings as a dict."""
        return {
            "host": cls.get("smtp_host", ""),
            "port": cls.get("smtp_port", "587"),
            "user": cls.get("smtp_user", ""),
            "from_email": cls.get("smtp_from_email", ""),
            "use_tls": cls.get("smtp_use_tls", "true"),
            "has_password": bool(cls.get("smtp_password")),
        }

    @classmethod
    def save_smtp_config(cls, host, port, user, from_email, use_tls, password=None):
        """Persist SMTP configuration. Password is only overwritten if provided."""
        cls.set("smtp_host", host.strip())
        cls.set("smtp_port", port.strip() or "587")
        cls.set("smtp_user", user.strip())
        cls.set("smtp_from_email", from_email.strip())
        cls.set("smtp_use_tls", "true" if use_tls else "false")
        if password:
            cls.set("smtp_password", password)

    def __repr__(self):
        return f"<Settings {self.key}={self.value}>"
