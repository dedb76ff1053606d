from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    uid = db.Column(db.String(128), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(20), default="student")
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    country = db.Column(db.String(100))
    location_preference = db.Column(db.String(120))
    quiz_responses = db.Column(db.JSON, default=dict)
    quiz_completed = db.Column(db.Boolean, nullable=False, default=False)
    quiz_completed_at = db.Column(db.DateTime)
    quiz_started_at = db.Column(db.DateTime)
    quiz_completed_sections = db.Column(db.JSON, default=list)
    quiz_time_spent = db.Column(db.Integer, default=0)
    quiz_progress = db.Column(db.Integer, default=0)
    career_preferences = db.Column(db.JSON, default=dict)
    quiz_analysis = db.Column(db.JSON)
    recommendations = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "country": self.country,
            "location_preference": self.location_preference,
            "quiz_completed": self.quiz_completed,
            "career_preferences": self.career_preferences or {},
            "created_at": _iso(self.created_at),
        }


# --- Catalog ------------------------------------------------------------------

class School(db.Model):
    __tablename__ = "schools"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    country = db.Column(db.String(100))
    city = db.Column(db.String(100))
    website = db.Column(db.String(500))
    global_ranking = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    programs = db.relationship("Program", backref="school", lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "city": self.city,
            "website": self.website,
            "global_ranking": self.global_ranking,
            "created_at": _iso(self.created_at),
        }


class Program(db.Model):
    __tablename__ = "programs"
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    degree_type = db.Column(db.String(40))
    field_of_study = db.Column(db.String(200))
    mode = db.Column(db.String(40))
    duration = db.Column(db.String(60))
    languages = db.Column(db.JSON, default=list)
    tuition_local = db.Column(db.Float)
    tuition_international = db.Column(db.Float)
    currency = db.Column(db.String(10), default="USD")
    application_fee = db.Column(db.Float)
    career_outcomes = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "school_id": self.school_id,
            "name": self.name,
            "degree_type": self.degree_type,
            "field_of_study": self.field_of_study,
            "mode": self.mode,
            "duration": self.duration,
            "languages": self.languages or [],
            "tuition_fees": {
                "local": self.tuition_local,
                "international": self.tuition_international,
                "currency": self.currency,
            },
            "application_fee": self.application_fee,
            "career_outcomes": self.career_outcomes or [],
            "created_at": _iso(self.created_at),
        }


class Scholarship(db.Model):
    __tablename__ = "scholarships"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    provider = db.Column(db.String(255))
    coverage = db.Column(db.JSON, default=list)
    value = db.Column(db.Float)
    currency = db.Column(db.String(10), default="USD")
    frequency = db.Column(db.String(30))
    eligibility = db.Column(db.JSON, default=dict)
    application_requirements = db.Column(db.JSON, default=dict)
    deadline = db.Column(db.DateTime)
    opening_date = db.Column(db.DateTime)
    application_link = db.Column(db.String(500))
    tags = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "provider": self.provider,
            "coverage": self.coverage or [],
            "value": self.value,
            "currency": self.currency,
            "frequency": self.frequency,
            "eligibility": self.eligibility or {},
            "application_requirements": self.application_requirements or {},
            "deadline": _iso(self.deadline),
            "opening_date": _iso(self.opening_date),
            "application_link": self.application_link,
            "tags": self.tags or [],
            "created_at": _iso(self.created_at),
        }


class SavedScholarship(db.Model):
    __tablename__ = "saved_scholarships"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    scholarship_id = db.Column(db.Integer, db.ForeignKey("scholarships.id"), nullable=False)
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), default="saved")
    reminder_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    scholarship = db.relationship("Scholarship")
    __table_args__ = (db.UniqueConstraint("user_id", "scholarship_id"),)

    def to_dict(self):
        return {
            "id": self.id,
            "scholarship_id": self.scholarship_id,
            "scholarship": self.scholarship.to_dict() if self.scholarship else None,
            "notes": self.notes,
            "status": self.status,
            "reminder_date": _iso(self.reminder_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


# --- Interests & packages -----------------------------------------------------

class UserInterest(db.Model):
    __tablename__ = "user_interests"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    program_id = db.Column(db.Integer, db.ForeignKey("programs.id"))
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"))
    school_name = db.Column(db.String(255))
    program_name = db.Column(db.String(255))
    application_url = db.Column(db.String(500))
    status = db.Column(db.String(20), default="interested")
    priority = db.Column(db.String(10), default="medium")
    notes = db.Column(db.Text)
    applied_at = db.Column(db.DateTime)
    interview_date = db.Column(db.DateTime)
    interview_notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "program_id": self.program_id,
            "school_id": self.school_id,
            "school_name": self.school_name,
            "program_name": self.program_name,
            "application_url": self.application_url,
            "status": self.status,
            "priority": self.priority,
            "notes": self.notes,
            "applied_at": _iso(self.applied_at),
            "interview_date": _iso(self.interview_date),
            "interview_notes": self.interview_notes,
            "created_at": _iso(self.created_at),
        }


class ApplicationPackage(db.Model):
    __tablename__ = "application_packages"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    interest_id = db.Column(db.Integer, db.ForeignKey("user_interests.id"), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    documents = db.Column(db.JSON, default=list)
    progress = db.Column(db.Integer, default=0)
    is_ready = db.Column(db.Boolean, default=False)
    applied_at = db.Column(db.DateTime)
    application_status = db.Column(db.String(30), default="not_started")
    decision = db.Column(db.String(20))
    decision_date = db.Column(db.DateTime)
    linked_scholarships = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    interest = db.relationship("UserInterest")

    def to_dict(self):
        return {
            "id": self.id,
            "interest_id": self.interest_id,
            "interest": self.interest.to_dict() if self.interest else None,
            "name": self.name,
            "type": self.type,
            "documents": self.documents or [],
            "progress": self.progress,
            "is_ready": self.is_ready,
            "applied_at": _iso(self.applied_at),
            "application_status": self.application_status,
            "decision": self.decision,
            "decision_date": _iso(self.decision_date),
            "linked_scholarships": self.linked_scholarships or [],
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


# --- Applications & requirements ----------------------------------------------

class Application(db.Model):
    __tablename__ = "applications"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    scholarship_id = db.Column(db.Integer, db.ForeignKey("scholarships.id"))
    program_id = db.Column(db.Integer, db.ForeignKey("programs.id"))
    name = db.Column(db.String(255))
    status = db.Column(db.String(20), default="draft")
    progress = db.Column(db.Integer, default=0)
    submitted_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requirements = db.relationship(
        "ApplicationRequirement", backref="application", lazy=True,
        cascade="all, delete-orphan", order_by="ApplicationRequirement.order",
    )
    scholarship = db.relationship("Scholarship")
    program = db.relationship("Program")

    def to_dict(self):
        return {
            "id": self.id,
            "scholarship_id": self.scholarship_id,
            "program_id": self.program_id,
            "name": self.name,
            "status": self.status,
            "progress": self.progress,
            "submitted_at": _iso(self.submitted_at),
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ApplicationRequirement(db.Model):
    __tablename__ = "application_requirements"
    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.Integer, db.ForeignKey("applications.id"), nullable=False)
    requirement_type = db.Column(db.String(20), nullable=False)
    category = db.Column(db.String(20), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    is_required = db.Column(db.Boolean, default=True)
    is_optional = db.Column(db.Boolean, default=False)
    status = db.Column(db.String(20), default="pending")

    # document
    document_type = db.Column(db.String(40))
    document_id = db.Column(db.Integer, db.ForeignKey("documents.id"))
    max_file_size = db.Column(db.Integer)
    allowed_file_types = db.Column(db.JSON)
    word_limit = db.Column(db.Integer)
    character_limit = db.Column(db.Integer)

    # test score
    test_type = db.Column(db.String(20))
    min_score = db.Column(db.Float)
    max_score = db.Column(db.Float)
    score_format = db.Column(db.String(60))
    submitted_score = db.Column(db.Float)

    # fee
    application_fee_amount = db.Column(db.Float)
    application_fee_currency = db.Column(db.String(10))
    application_fee_description = db.Column(db.String(255))
    application_fee_paid = db.Column(db.Boolean, default=False)

    # interview
    interview_type = db.Column(db.String(20))
    interview_duration = db.Column(db.Integer)
    interview_notes = db.Column(db.Text)
    interview_date = db.Column(db.DateTime)

    submitted_at = db.Column(db.DateTime)
    verified_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "application_id": self.application_id,
            "requirement_type": self.requirement_type,
            "category": self.category,
            "name": self.name,
            "description": self.description,
            "is_required": self.is_required,
            "is_optional": self.is_optional,
            "status": self.status,
            "document_type": self.document_type,
            "document_id": self.document_id,
            "max_file_size": self.max_file_size,
            "allowed_file_types": self.allowed_file_types,
            "word_limit": self.word_limit,
            "character_limit": self.character_limit,
            "test_type": self.test_type,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "score_format": self.score_format,
            "submitted_score": self.submitted_score,
            "application_fee_amount": self.application_fee_amount,
            "application_fee_currency": self.application_fee_currency,
            "application_fee_description": self.application_fee_description,
            "application_fee_paid": self.application_fee_paid,
            "interview_type": self.interview_type,
            "interview_duration": self.interview_duration,
            "interview_notes": self.interview_notes,
            "interview_date": _iso(self.interview_date),
            "submitted_at": _iso(self.submitted_at),
            "verified_at": _iso(self.verified_at),
            "notes": self.notes,
            "order": self.order,
        }


class RequirementsTemplate(db.Model):
    __tablename__ = "requirements_templates"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(20), nullable=False)
    requirements = db.Column(db.JSON, default=list)
    usage_count = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    is_system_template = db.Column(db.Boolean, default=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    tags = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "requirements": self.requirements or [],
            "usage_count": self.usage_count,
            "is_active": self.is_active,
            "is_system_template": self.is_system_template,
            "tags": self.tags or [],
            "created_at": _iso(self.created_at),
        }


# --- Documents & library ------------------------------------------------------

class Document(db.Model):
    __tablename__ = "documents"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    content = db.Column(db.Text, default="")
    description = db.Column(db.Text)
    tags = db.Column(db.JSON, default=list)
    version = db.Column(db.Integer, default=1)
    word_count = db.Column(db.Integer, default=0)
    character_count = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "content": self.content,
            "description": self.description,
            "tags": self.tags or [],
            "version": self.version,
            "word_count": self.word_count,
            "character_count": self.character_count,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class LibraryDocument(db.Model):
    __tablename__ = "library_documents"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(60), nullable=False)
    content = db.Column(db.Text, nullable=False)
    version = db.Column(db.Integer, default=1)
    status = db.Column(db.String(20), default="draft")
    review_status = db.Column(db.String(20), default="pending")
    review_notes = db.Column(db.Text)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    reviewed_at = db.Column(db.DateTime)
    quality_score = db.Column(db.Float)
    category = db.Column(db.String(60))
    subcategory = db.Column(db.String(60))
    tags = db.Column(db.JSON, default=list)
    target_audience = db.Column(db.String(20), default="all")
    field_of_study = db.Column(db.String(120))
    country = db.Column(db.String(100))
    view_count = db.Column(db.Integer, default=0)
    clone_count = db.Column(db.Integer, default=0)
    download_count = db.Column(db.Integer, default=0)
    average_rating = db.Column(db.Float, default=0.0)
    rating_count = db.Column(db.Integer, default=0)
    description = db.Column(db.Text)
    author = db.Column(db.String(120))
    source = db.Column(db.String(120))
    language = db.Column(db.String(10), default="en")
    word_count = db.Column(db.Integer, default=0)
    character_count = db.Column(db.Integer, default=0)
    is_template = db.Column(db.Boolean, default=False)
    allow_cloning = db.Column(db.Boolean, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    published_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, include_review=False):
        data = {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "content": self.content,
            "version": self.version,
            "status": self.status,
            "review_status": self.review_status,
            "quality_score": self.quality_score,
            "category": self.category,
            "subcategory": self.subcategory,
            "tags": self.tags or [],
            "target_audience": self.target_audience,
            "field_of_study": self.field_of_study,
            "country": self.country,
            "view_count": self.view_count,
            "clone_count": self.clone_count,
            "download_count": self.download_count,
            "average_rating": self.average_rating,
            "rating_count": self.rating_count,
            "description": self.description,
            "author": self.author,
            "language": self.language,
            "word_count": self.word_count,
            "character_count": self.character_count,
            "is_template": self.is_template,
            "allow_cloning": self.allow_cloning,
            "published_at": _iso(self.published_at),
            "created_at": _iso(self.created_at),
        }
        if include_review:
            data["review_notes"] = self.review_notes
            data["reviewed_by"] = self.reviewed_by
            data["reviewed_at"] = _iso(self.reviewed_at)
        return data


class DocumentClone(db.Model):
    __tablename__ = "document_clones"
    id = db.Column(db.Integer, primary_key=True)
    original_document_id = db.Column(db.Integer, db.ForeignKey("library_documents.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    user_document_id = db.Column(db.Integer, db.ForeignKey("documents.id"))
    cloned_content = db.Column(db.Text)
    customizations = db.Column(db.JSON, default=dict)
    access_count = db.Column(db.Integer, default=0)
    last_accessed_at = db.Column(db.DateTime)
    cloned_at = db.Column(db.DateTime, default=datetime.utcnow)

    original = db.relationship("LibraryDocument")
    user_document = db.relationship("Document")

    def to_dict(self):
        original = self.original
        return {
            "id": self.id,
            "original_document_id": self.original_document_id,
            "user_document_id": self.user_document_id,
            "cloned_content": self.cloned_content,
            "customizations": self.customizations or {},
            "access_count": self.access_count,
            "last_accessed_at": _iso(self.last_accessed_at),
            "cloned_at": _iso(self.cloned_at),
            "original_document": {
                "id": original.id,
                "title": original.title,
                "type": original.type,
                "category": original.category,
            } if original else None,
        }


class DocumentRating(db.Model):
    __tablename__ = "document_ratings"
    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey("library_documents.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    review = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("document_id", "user_id"),)


class AIReview(db.Model):
    __tablename__ = "ai_reviews"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    application_id = db.Column(db.Integer, db.ForeignKey("applications.id"), nullable=False)
    requirement_id = db.Column(db.Integer, db.ForeignKey("application_requirements.id"))
    document_id = db.Column(db.Integer, db.ForeignKey("documents.id"))
    review_type = db.Column(db.String(30), nullable=False)
    status = db.Column(db.String(20), default="pending")
    overall_score = db.Column(db.Integer)
    scores = db.Column(db.JSON, default=dict)
    feedback = db.Column(db.JSON, default=list)
    summary = db.Column(db.JSON, default=dict)
    custom_instructions = db.Column(db.Text)
    error_message = db.Column(db.Text)
    processing_ms = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            "id": self.id,
            "application_id": self.application_id,
            "requirement_id": self.requirement_id,
            "document_id": self.document_id,
            "review_type": self.review_type,
            "status": self.status,
            "overall_score": self.overall_score,
            "scores": self.scores or {},
            "feedback": self.feedback or [],
            "summary": self.summary or {},
            "error_message": self.error_message,
            "processing_ms": self.processing_ms,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }


# --- Billing ------------------------------------------------------------------

class SubscriptionPlan(db.Model):
    __tablename__ = "subscription_plans"
    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.String(40), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    plan_type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text)
    monthly_price = db.Column(db.Float, default=0.0)
    yearly_price = db.Column(db.Float, default=0.0)
    currency = db.Column(db.String(10), default="USD")
    features = db.Column(db.JSON, default=dict)
    is_active = db.Column(db.Boolean, default=True)
    sort_order = db.Column(db.Integer, default=0)

    def to_dict(self):
        return {
            "plan_id": self.plan_id,
            "name": self.name,
            "plan_type": self.plan_type,
            "description": self.description,
            "monthly_price": self.monthly_price,
            "yearly_price": self.yearly_price,
            "currency": self.currency,
            "features": self.features or {},
            "is_active": self.is_active,
        }


class Subscription(db.Model):
    __tablename__ = "subscriptions"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    plan_id = db.Column(db.Integer, db.ForeignKey("subscription_plans.id"), nullable=False)
    status = db.Column(db.String(20), default="active")
    billing_cycle = db.Column(db.String(10), default="monthly")
    current_period_start = db.Column(db.DateTime, default=datetime.utcnow)
    current_period_end = db.Column(db.DateTime)
    trial_start = db.Column(db.DateTime)
    trial_end = db.Column(db.DateTime)
    cancel_at_period_end = db.Column(db.Boolean, default=False)
    canceled_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    plan = db.relationship("SubscriptionPlan")

    @property
    def is_active(self):
        return self.status in ("active", "trialing")

    @property
    def is_trial_active(self):
        return bool(self.status == "trialing" and self.trial_end and self.trial_end > datetime.utcnow())

    def to_dict(self):
        return {
            "id": self.id,
            "plan": self.plan.to_dict() if self.plan else None,
            "status": self.status,
            "is_active": self.is_active,
            "billing_cycle": self.billing_cycle,
            "current_period_start": _iso(self.current_period_start),
            "current_period_end": _iso(self.current_period_end),
            "trial_start": _iso(self.trial_start),
            "trial_end": _iso(self.trial_end),
            "is_trial_active": self.is_trial_active,
            "cancel_at_period_end": self.cancel_at_period_end,
        }


# --- Analytics ----------------------------------------------------------------

class PageView(db.Model):
    __tablename__ = "page_views"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    session_id = db.Column(db.String(64))
    page = db.Column(db.String(500), nullable=False)
    title = db.Column(db.String(255))
    referrer = db.Column(db.String(500))
    time_on_page = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class UserEvent(db.Model):
    __tablename__ = "user_events"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    session_id = db.Column(db.String(64))
    event_type = db.Column(db.String(60), nullable=False)
    event_name = db.Column(db.String(120), nullable=False)
    properties = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class UserSession(db.Model):
    __tablename__ = "user_sessions"
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(64), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    started_at = db.Column(db.DateTime, default=datetime.utcnow)
    ended_at = db.Column(db.DateTime)
    duration = db.Column(db.Integer)
    page_views = db.Column(db.Integer, default=0)
    is_bounce = db.Column(db.Boolean, default=True)
    device = db.Column(db.String(60))
    country = db.Column(db.String(100))
