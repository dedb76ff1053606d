# Request bodies validated at the route boundary

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ProfileIn(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    location_preference: Optional[str] = Field(None, max_length=120)
    career_preferences: Optional[Dict[str, Any]] = None


class QuizSubmitIn(BaseModel):
    section_id: str = Field(..., min_length=1)
    question_id: str = Field(..., min_length=1)
    responses: Optional[Union[List[str], str]] = None
    text_response: Optional[str] = None
    is_completed: bool = False
    time_spent: int = Field(0, ge=0)


class QuizAnalysisIn(BaseModel):
    analysis_type: Literal['comprehensive', 'career-focused', 'program-focused'] = 'comprehensive'
    custom_instructions: Optional[str] = Field(None, max_length=1000)
    force_regenerate: bool = False


class SavedScholarshipIn(BaseModel):
    scholarship_id: int
    notes: Optional[str] = None
    status: Literal['saved', 'interested', 'applied', 'not_interested'] = 'saved'
    reminder_date: Optional[str] = None


class SavedScholarshipUpdate(BaseModel):
    notes: Optional[str] = None
    status: Optional[Literal['saved', 'interested', 'applied', 'not_interested']] = None
    reminder_date: Optional[str] = None


class ApplicationIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    scholarship_id: Optional[int] = None
    program_id: Optional[int] = None
    notes: Optional[str] = None


class ApplicationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[Literal['draft', 'in_progress', 'ready_for_submission', 'submitted',
                             'under_review', 'approved', 'rejected', 'waitlisted', 'withdrawn']] = None
    notes: Optional[str] = None


class RequirementIn(BaseModel):
    requirement_type: Optional[str] = None
    category: Optional[str] = None
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_required: Optional[bool] = None
    is_optional: Optional[bool] = None
    status: Optional[str] = None
    document_type: Optional[str] = None
    max_file_size: Optional[int] = None
    allowed_file_types: Optional[List[str]] = None
    word_limit: Optional[int] = None
    character_limit: Optional[int] = None
    test_type: Optional[str] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    score_format: Optional[str] = None
    submitted_score: Optional[float] = None
    application_fee_amount: Optional[float] = None
    application_fee_currency: Optional[str] = Field(None, max_length=10)
    application_fee_description: Optional[str] = None
    application_fee_paid: Optional[bool] = None
    interview_type: Optional[str] = None
    interview_duration: Optional[int] = None
    interview_notes: Optional[str] = None
    notes: Optional[str] = None
    order: Optional[int] = None


class BulkUpdateIn(BaseModel):
    requirement_ids: List[int] = Field(..., min_length=1)
    updates: RequirementIn


class LinkDocumentIn(BaseModel):
    document_id: int
    notes: Optional[str] = None


class ApplyTemplateIn(BaseModel):
    template_id: int


class ReviewIn(BaseModel):
    requirement_id: int
    document_id: Optional[int] = None
    review_type: Literal['document_review', 'requirement_compliance', 'overall_package']
    custom_instructions: Optional[str] = Field(None, max_length=1000)


class DocumentIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=40)
    content: str = ''
    description: Optional[str] = None
    tags: List[str] = []


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class RatingIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=1000)


class CloneUpdate(BaseModel):
    customizations: Dict[str, Any]


class LibraryDocumentIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: str
    content: str = Field(..., min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    tags: List[str] = []
    target_audience: Literal['undergraduate', 'graduate', 'phd', 'all'] = 'all'
    field_of_study: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    source: Optional[str] = None
    language: str = 'en'
    is_template: bool = False
    allow_cloning: bool = True


class LibraryReviewIn(BaseModel):
    action: Literal['approve', 'reject']
    notes: Optional[str] = None
    quality_score: Optional[float] = Field(None, ge=0, le=10)


class PageViewIn(BaseModel):
    page: str = Field(..., min_length=1, max_length=500)
    session_id: Optional[str] = None
    title: Optional[str] = None
    referrer: Optional[str] = None
    time_on_page: Optional[int] = Field(None, ge=0)


class EventIn(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=60)
    event_name: str = Field(..., min_length=1, max_length=120)
    session_id: Optional[str] = None
    properties: Dict[str, Any] = {}


class SessionIn(BaseModel):
    action: Literal['start', 'end']
    session_id: str = Field(..., min_length=1, max_length=64)
    device: Optional[str] = None
    country: Optional[str] = None


class SubscribeIn(BaseModel):
    plan_id: str
    billing_cycle: Literal['monthly', 'yearly'] = 'monthly'


class RoleUpdate(BaseModel):
    role: Literal['student', 'admin']


class TemplateIn(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    requirements: Optional[List[RequirementIn]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PackageDocumentIn(BaseModel):
    type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    required: Optional[bool] = None
    status: Optional[str] = None
    document_id: Optional[int] = None
    notes: Optional[str] = None


class PackageIn(BaseModel):
    interest_id: Optional[int] = None
    name: Optional[str] = Field(None, max_length=255)
    type: Optional[str] = None
    documents: Optional[List[PackageDocumentIn]] = None
    linked_scholarships: Optional[List[int]] = None
    notes: Optional[str] = None


class PackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    documents: Optional[List[PackageDocumentIn]] = None
    application_status: Optional[str] = None
    decision: Optional[str] = None
    decision_date: Optional[str] = None
    linked_scholarships: Optional[List[int]] = None
    notes: Optional[str] = None


class InterestIn(BaseModel):
    program_id: Optional[int] = None
    school_id: Optional[int] = None
    program_name: Optional[str] = Field(None, max_length=255)
    school_name: Optional[str] = Field(None, max_length=255)
    application_url: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    notes: Optional[str] = None
    interview_notes: Optional[str] = None
    interview_date: Optional[str] = None


class SchoolIn(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = None
    city: Optional[str] = None
    website: Optional[str] = None
    global_ranking: Optional[int] = None


class ProgramIn(BaseModel):
    school_id: Optional[int] = None
    name: Optional[str] = Field(None, max_length=255)
    degree_type: Optional[str] = None
    field_of_study: Optional[str] = None
    mode: Optional[str] = None
    duration: Optional[str] = None
    languages: Optional[List[str]] = None
    tuition_local: Optional[float] = None
    tuition_international: Optional[float] = None
    currency: Optional[str] = Field(None, max_length=10)
    application_fee: Optional[float] = None
    career_outcomes: Optional[List[str]] = None


class ScholarshipIn(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    provider: Optional[str] = None
    coverage: Optional[List[str]] = None
    value: Optional[float] = None
    currency: Optional[str] = Field(None, max_length=10)
    frequency: Optional[str] = None
    eligibility: Optional[Dict[str, Any]] = None
    application_requirements: Optional[Dict[str, Any]] = None
    deadline: Optional[str] = None
    opening_date: Optional[str] = None
    application_link: Optional[str] = None
    tags: Optional[List[str]] = None


class LibraryDocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    tags: Optional[List[str]] = None
    target_audience: Optional[Literal['undergraduate', 'graduate', 'phd', 'all']] = None
    field_of_study: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    source: Optional[str] = None
    language: Optional[str] = None
    is_template: Optional[bool] = None
    allow_cloning: Optional[bool] = None
    status: Optional[Literal['draft', 'review', 'published', 'archived']] = None
