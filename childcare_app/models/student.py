# childcare_app/models/student.py
"""
Student model aligned with the legacy Children export.

Only the columns the import writes are modelled here; the web application
owns presentation of the rest.
"""

from sqlalchemy import ForeignKey, Index

from .base import BaseModel, db


class Student(BaseModel):
    """A child enrolled in the programme."""

    __tablename__ = "students"

    id = db.Column(db.Integer, primary_key=True)
    # Legacy reference code; natural key for idempotent imports.
    reference = db.Column(db.String(50), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=True)
    date_of_birth = db.Column(db.DateTime, nullable=False)
    gender = db.Column(db.String(3), nullable=True)
    language = db.Column(db.String(3), nullable=True)

    # Account person (responsible adult)
    account_person_name = db.Column(db.String(50), nullable=True)
    account_person_surname = db.Column(db.String(50), nullable=True)
    account_person_cellphone = db.Column(db.String(20), nullable=True)
    account_person_email = db.Column(db.String(100), nullable=True)
    relation = db.Column(db.String(20), nullable=True)

    # Parents
    mother_name = db.Column(db.String(50), nullable=True)
    mother_surname = db.Column(db.String(50), nullable=True)
    mother_cell = db.Column(db.String(20), nullable=True)
    mother_email = db.Column(db.String(100), nullable=True)
    father_name = db.Column(db.String(50), nullable=True)
    father_surname = db.Column(db.String(50), nullable=True)
    father_cell = db.Column(db.String(20), nullable=True)
    father_email = db.Column(db.String(100), nullable=True)

    # Address
    address1 = db.Column(db.String(50), nullable=True)
    address2 = db.Column(db.String(50), nullable=True)
    postal_code = db.Column(db.String(10), nullable=True)

    # Enrollment
    school_name = db.Column(db.String(50), nullable=True)
    class_group_code = db.Column(db.String(10), nullable=True)
    grade = db.Column(db.String(5), nullable=True)
    teacher = db.Column(db.String(50), nullable=True)
    truck = db.Column(db.String(3), nullable=True)
    start_classes = db.Column(db.DateTime, nullable=True)
    # Free-text family label exactly as exported; family_id is the reconciled link.
    family_label = db.Column(db.String(50), nullable=True)
    sequence = db.Column(db.String(50), nullable=True)

    # Financial
    financial_code = db.Column(db.String(10), nullable=True)
    charge = db.Column(db.Numeric(10, 2), nullable=True)
    deposit = db.Column(db.String(50), nullable=True)

    # Status
    status = db.Column(db.String(20), nullable=True)
    print_id_card = db.Column(db.Boolean, default=False, nullable=False)
    cnt = db.Column(db.Float, nullable=True)
    online_entry = db.Column(db.Integer, default=0, nullable=False)
    general_note = db.Column(db.Text, nullable=True)
    legacy_created = db.Column(db.DateTime, nullable=True)
    legacy_updated = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    family_id = db.Column(db.Integer, ForeignKey("families.id"), nullable=True, index=True)
    family = db.relationship("Family", back_populates="students")

    __table_args__ = (Index("idx_students_name", "last_name", "first_name"),)

    def __repr__(self):
        return f"<Student {self.reference}>"
