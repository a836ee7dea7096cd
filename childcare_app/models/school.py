# childcare_app/models/school.py

from .base import BaseModel, db


class School(BaseModel):
    """School visited by the programme trucks."""

    __tablename__ = "schools"

    id = db.Column(db.Integer, primary_key=True)
    # Legacy "School Id"; natural key for idempotent imports.
    legacy_id = db.Column(db.Integer, unique=True, nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)
    short_name = db.Column(db.String(50), nullable=True)
    description = db.Column(db.String(50), nullable=True)
    truck_number = db.Column(db.Integer, nullable=True)

    # Fees
    price = db.Column(db.Numeric(10, 2), nullable=True)
    fee_description = db.Column(db.String(255), nullable=True)
    formula = db.Column(db.Numeric(10, 2), nullable=True)

    # Visit schedule
    visit_day = db.Column(db.String(50), nullable=True)
    visit_sequence = db.Column(db.String(50), nullable=True)

    # Contacts
    contact_person = db.Column(db.String(50), nullable=True)
    contact_cell = db.Column(db.String(50), nullable=True)
    telephone = db.Column(db.String(50), nullable=True)
    fax = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    circulars_email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(50), nullable=True)
    address2 = db.Column(db.String(50), nullable=True)
    headmaster = db.Column(db.String(50), nullable=True)
    headmaster_cell = db.Column(db.String(50), nullable=True)
    afterschool1_name = db.Column(db.String(50), nullable=True)
    afterschool1_contact = db.Column(db.String(50), nullable=True)
    afterschool2_name = db.Column(db.String(50), nullable=True)
    afterschool2_contact = db.Column(db.String(50), nullable=True)

    money_message = db.Column(db.String(255), nullable=True)
    print_invoice = db.Column(db.Boolean, default=False, nullable=False)
    language = db.Column(db.String(3), nullable=True)
    import_flag = db.Column(db.Boolean, default=False, nullable=False)
    safe_notes = db.Column(db.Text, nullable=True)
    web_page = db.Column(db.String(255), nullable=True)
    portal_link = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    class_groups = db.relationship("ClassGroup", back_populates="school")

    def __repr__(self):
        return f"<School {self.legacy_id} {self.name}>"
