# childcare_app/models/class_group.py

from sqlalchemy import ForeignKey

from .base import BaseModel, db


class ClassGroup(BaseModel):
    """A scheduled weekly class session at a school."""

    __tablename__ = "class_groups"

    id = db.Column(db.Integer, primary_key=True)
    # Legacy "Class Group" code; natural key for idempotent imports.
    legacy_code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(50), nullable=True)
    # Legacy "School Id" as exported; school_id is the resolved link.
    school_legacy_id = db.Column(db.Integer, nullable=False, index=True)
    school_id = db.Column(db.Integer, ForeignKey("schools.id"), nullable=True, index=True)
    day_truck = db.Column(db.String(6), nullable=True)
    truck_number = db.Column(db.Integer, nullable=True)

    # 1 = Monday .. 5 = Friday
    day_of_week = db.Column(db.Integer, default=1, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    sequence = db.Column(db.Integer, default=1, nullable=False)

    evaluate = db.Column(db.Boolean, default=False, nullable=False)
    notes = db.Column(db.String(255), nullable=True)
    import_flag = db.Column(db.Boolean, default=False, nullable=False)
    group_message = db.Column(db.String(255), nullable=True)
    send_certificates = db.Column(db.String(255), nullable=True)
    money_message = db.Column(db.String(50), nullable=True)
    ixl = db.Column(db.String(3), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    school = db.relationship("School", back_populates="class_groups")

    def __repr__(self):
        return f"<ClassGroup {self.legacy_code}>"
