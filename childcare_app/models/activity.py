# childcare_app/models/activity.py

from .base import BaseModel, db


class Activity(BaseModel):
    """Programme activity taught to class groups."""

    __tablename__ = "activities"

    id = db.Column(db.Integer, primary_key=True)
    # Legacy ActivityID; natural key for idempotent imports.
    legacy_id = db.Column(db.Integer, unique=True, nullable=False, index=True)
    code = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    folder = db.Column(db.String(255), nullable=True)
    grade_level = db.Column(db.String(255), nullable=True)
    icon = db.Column(db.Text, nullable=True)  # base64 image data
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Activity {self.legacy_id} {self.code}>"
