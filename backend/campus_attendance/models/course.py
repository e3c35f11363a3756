"""Course, section and section enrollment models."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel

class Course(BaseModel):
    """Course taught by a lecturer."""

    __tablename__ = 'courses'

    course_code = db.Column(db.String(20), unique=True, nullable=False)
    course_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    lecturer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)

    lecturer = db.relationship('User', backref=db.backref('courses', lazy='dynamic'))

    def __repr__(self):
        return f'<Course {self.course_code}>'

class Section(BaseModel):
    """A cohort of students that sessions are scheduled for."""

    __tablename__ = 'sections'

    section_code = db.Column(db.String(20), unique=True, nullable=False)
    course_id = db.Column(db.String(36), db.ForeignKey('courses.id'), nullable=True)

    course = db.relationship('Course', backref=db.backref('sections', lazy='dynamic'))
    enrollments = db.relationship('SectionEnrollment', backref='section', lazy='dynamic')

    def __repr__(self):
        return f'<Section {self.section_code}>'

class SectionEnrollment(BaseModel):
    """Student membership of a section."""

    __tablename__ = 'section_enrollments'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'section_id', name='uq_section_enrollment'),
    )

    student_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    section_id = db.Column(db.String(36), db.ForeignKey('sections.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='active')  # active, inactive, withdrawn

    student = db.relationship('User', backref=db.backref('section_enrollments', lazy='dynamic'))

    def __repr__(self):
        return f'<SectionEnrollment {self.student_id}-{self.section_id}>'
