# childcare_app/models/family.py

from sqlalchemy import Index, func

from .base import BaseModel, db


class Family(BaseModel):
    """Canonical family record that students are linked to."""

    __tablename__ = "families"

    id = db.Column(db.Integer, primary_key=True)
    family_name = db.Column(db.String(200), nullable=False, index=True)
    primary_contact_name = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    # True when the family was created by the legacy importer rather than by staff.
    auto_created = db.Column(db.Boolean, default=False, nullable=False)

    students = db.relationship("Student", back_populates="family")

    __table_args__ = (Index("idx_families_name_lower", func.lower(family_name)),)

    def __repr__(self):
        return f"<Family {self.family_name}>"
