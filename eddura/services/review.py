"""AI-assisted review of application documents against their requirements."""
import json
import logging
import re
from datetime import datetime

from ..errors import NotFound
from ..models import db, AIReview, Document
from .ai import friendly_error

logger = logging.getLogger(__name__)

REVIEW_TYPES = ('document_review', 'requirement_compliance', 'overall_package')
SCORE_KEYS = ('overall', 'content_quality', 'completeness', 'relevance', 'formatting', 'clarity', 'strength')
FEEDBACK_KEYS = ('type', 'category', 'title', 'description', 'severity')
SUMMARY_KEYS = ('strengths', 'weaknesses', 'recommendations', 'overall_assessment')

GENERATION_CONFIG = {"temperature": 0.3, "top_k": 40, "top_p": 0.8, "max_output_tokens": 4000}

GUIDELINES = """You are an expert scholarship and academic application reviewer. You will evaluate a document against specific requirements and provide detailed feedback with scores.

IMPORTANT GUIDELINES:
- Provide objective, constructive feedback
- Score each category from 0-100 (0 = poor, 100 = excellent)
- Be specific about strengths and areas for improvement
- Provide actionable suggestions
- Consider the scholarship/program context
- Maintain a professional, encouraging tone

REVIEW CATEGORIES TO EVALUATE:
1. Content Quality (0-100): Relevance, depth, and substance of the content
2. Completeness (0-100): How well the document meets all requirements
3. Relevance (0-100): How well the content aligns with the scholarship/program
4. Formatting (0-100): Structure, organization, and presentation
5. Clarity (0-100): How clear and understandable the content is
6. Strength (0-100): Overall impact and persuasiveness
7. Overall (0-100): Comprehensive assessment"""

RESPONSE_EXAMPLE = {
    "scores": {"overall": 85, "content_quality": 80, "completeness": 90, "relevance": 85,
               "formatting": 75, "clarity": 80, "strength": 85},
    "feedback": [
        {
            "type": "positive",
            "category": "content_quality",
            "title": "Strong Personal Motivation",
            "description": "The statement effectively conveys genuine passion for the field",
            "severity": "medium",
            "suggestions": ["Add more specific examples of relevant projects"],
            "examples": ["Mention specific tools or methods you used"],
        },
        {
            "type": "suggestion",
            "category": "clarity",
            "title": "Improve Clarity",
            "description": "Some sentences could be clearer and more concise",
            "severity": "low",
            "suggestions": ["Use shorter sentences", "Avoid jargon"],
            "examples": ["Instead of 'utilize' use 'use'"],
        },
    ],
    "summary": {
        "strengths": ["Clear personal motivation", "Good structure"],
        "weaknesses": ["Could use more specific examples"],
        "recommendations": ["Add more concrete examples of relevant experience"],
        "overall_assessment": "A solid statement with room for improvement in specificity",
    },
}


def build_review_prompt(requirement, document, application, review_type, scholarship=None, program=None,
                        custom_instructions=None):
    lines = [
        GUIDELINES,
        "",
        "REQUIREMENT DETAILS:",
        f"- Name: {requirement.name}",
        f"- Description: {requirement.description or 'No description provided'}",
        f"- Category: {requirement.category}",
        f"- Type: {requirement.requirement_type}",
        f"- Required: {'Yes' if requirement.is_required else 'No'}",
    ]
    if requirement.document_type:
        lines.append(f"- Document Type: {requirement.document_type}")
    if requirement.word_limit:
        lines.append(f"- Word Limit: {requirement.word_limit}")
    if requirement.character_limit:
        lines.append(f"- Character Limit: {requirement.character_limit}")

    app_type = 'scholarship' if application.scholarship_id else 'program' if application.program_id else 'general'
    lines += ["", "APPLICATION CONTEXT:", f"- Application Name: {application.name}", f"- Application Type: {app_type}"]

    if scholarship is not None:
        eligibility = scholarship.eligibility or {}
        lines += [
            "", "SCHOLARSHIP DETAILS:",
            f"- Name: {scholarship.title}",
            f"- Description: {scholarship.description or 'No description provided'}",
            f"- Amount: {scholarship.value} {scholarship.currency}",
            f"- Field of Study: {', '.join(eligibility.get('fields_of_study') or []) or 'Not specified'}",
            f"- Eligibility: {json.dumps(eligibility) if eligibility else 'Not specified'}",
        ]
    if program is not None:
        lines += [
            "", "PROGRAM DETAILS:",
            f"- Name: {program.name}",
            f"- Degree Type: {program.degree_type}",
            f"- Field of Study: {program.field_of_study}",
            f"- Duration: {program.duration}",
            f"- School: {program.school.name if program.school else 'Not specified'}",
        ]

    content = document.content if document is not None else 'No document content available'
    lines += ["", "DOCUMENT CONTENT TO REVIEW:", content, "", f"REVIEW TYPE: {review_type}"]
    if custom_instructions:
        lines += ["", f"CUSTOM INSTRUCTIONS: {custom_instructions}"]
    lines += [
        "",
        "CRITICAL: You must respond with ONLY valid JSON in the exact format below. "
        "Do not include any text before or after the JSON.",
        "",
        json.dumps(RESPONSE_EXAMPLE, indent=2),
    ]
    return "\n".join(lines)


def parse_review_response(text):
    cleaned = (text or '').strip()
    cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
    cleaned = re.sub(r'\s*```$', '', cleaned)
    match = re.search(r'\{.*\}', cleaned, re.DOTALL)
    if not match:
        raise ValueError("No valid JSON found in response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON in response: {e}")

    if not parsed.get('scores') or 'feedback' not in parsed or not parsed.get('summary'):
        raise ValueError("Missing required fields in AI response")

    for key in SCORE_KEYS:
        value = parsed['scores'].get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 100:
            raise ValueError(f"Invalid score for {key}")

    if not isinstance(parsed['feedback'], list):
        raise ValueError("Feedback must be an array")
    for i, item in enumerate(parsed['feedback']):
        if not isinstance(item, dict) or not all(item.get(k) for k in FEEDBACK_KEYS):
            raise ValueError(f"Invalid feedback item structure at index {i}")

    if not all(parsed['summary'].get(k) for k in SUMMARY_KEYS):
        raise ValueError("Missing required summary fields")
    return parsed


def fallback_review(document_name):
    return {
        "scores": {key: 0 for key in SCORE_KEYS},
        "feedback": [
            {
                "type": "warning",
                "category": "overall",
                "title": "AI Service Unavailable",
                "description": f'The AI review service is currently unavailable. This is a basic assessment of "{document_name}".',
                "severity": "medium",
                "suggestions": [
                    "Try again in a few minutes for a detailed AI review",
                    "Review your document manually against the requirements",
                ],
                "examples": [],
            },
            {
                "type": "suggestion",
                "category": "content_quality",
                "title": "Manual Review Recommended",
                "description": "Consider having someone review your document for clarity, completeness, "
                               "and relevance to the requirements.",
                "severity": "low",
                "suggestions": [
                    "Ask a mentor or advisor to review",
                    "Check against the scholarship requirements",
                    "Use spell-check and grammar tools",
                ],
                "examples": [],
            },
        ],
        "summary": {
            "strengths": ["Document submitted for review"],
            "weaknesses": ["Unable to perform detailed AI analysis"],
            "recommendations": [
                "Try the AI review again in a few minutes",
                "Consider manual review by an advisor",
                "Check document length and formatting",
            ],
            "overall_assessment": "AI service temporarily unavailable. Please try again later for a detailed analysis.",
        },
    }


def _resolve_document(user, requirement, document_id):
    document_id = document_id or requirement.document_id
    if not document_id:
        return None
    document = Document.query.get(document_id)
    if not document or document.user_id != user.id:
        raise NotFound("Document not found")
    return document


def request_review(user, application, requirement, review_type, client, document_id=None, custom_instructions=None):
    """Return ``(review, error_message)``; the message is set when the AI call failed."""
    document = _resolve_document(user, requirement, document_id)
    if review_type == 'document_review' and document is None:
        raise NotFound("Document not found for this requirement")

    existing = AIReview.query.filter_by(
        application_id=application.id,
        requirement_id=requirement.id,
        document_id=document.id if document else None,
        review_type=review_type,
        status='completed',
    ).first()
    if existing:
        return existing, None

    review = AIReview(
        user_id=user.id,
        application_id=application.id,
        requirement_id=requirement.id,
        document_id=document.id if document else None,
        review_type=review_type,
        status='in_progress',
        custom_instructions=custom_instructions,
    )
    db.session.add(review)
    db.session.commit()

    started = datetime.utcnow()
    prompt = build_review_prompt(requirement, document, application, review_type,
                                 scholarship=application.scholarship, program=application.program,
                                 custom_instructions=custom_instructions)
    error_message = None
    try:
        parsed = parse_review_response(client.generate_with_retry(prompt, GENERATION_CONFIG))
        review.status = 'completed'
    except Exception as e:  # any generation or parse failure degrades to the fallback
        logger.warning("AI review %s failed, storing fallback: %s", review.id, e)
        parsed = fallback_review(document.title if document else requirement.name)
        review.status = 'failed'
        review.error_message = str(e)
        error_message = friendly_error(e)

    review.scores = parsed['scores']
    review.overall_score = int(parsed['scores']['overall'])
    review.feedback = parsed['feedback']
    review.summary = parsed['summary']
    review.completed_at = datetime.utcnow()
    review.processing_ms = int((review.completed_at - started).total_seconds() * 1000)
    db.session.commit()
    return review, error_message


def list_reviews(application, requirement_id=None, review_type=None):
    query = AIReview.query.filter_by(application_id=application.id)
    if requirement_id:
        query = query.filter_by(requirement_id=requirement_id)
    if review_type:
        query = query.filter_by(review_type=review_type)
    return query.order_by(AIReview.created_at.desc()).all()
