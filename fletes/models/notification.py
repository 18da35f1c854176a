# fletes/models/notification.py

from datetime import datetime

from fletes.extensions import db


class NotificationTask(db.Model):
    """Correo pendiente de envío (outbox). Lo consume el worker."""

    __tablename__ = "notification_tasks"

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(20), nullable=False)  # document / land / status
    recipient = db.Column(db.String(255), nullable=False)
    payload = db.Column(db.JSON, nullable=False, default=dict)

    status = db.Column(db.String(20), nullable=False, default="QUEUED", index=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    error_message = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    sent_at = db.Column(db.DateTime)

    def mark_sent(self):
        self.status = "SENT"
        self.error_message = None
        self.sent_at = datetime.utcnow()

    def mark_failed(self, error):
        self.status = "FAILED"
        self.error_message = str(error)
