import json
import logging
import re
from datetime import datetime

from sqlalchemy import or_

from ..ml.engine import Engine
from ..models import db, Program, Scholarship

logger = logging.getLogger(__name__)

engine = Engine()

GENERATION_CONFIG = {"temperature": 0.3, "top_k": 40, "top_p": 0.8, "max_output_tokens": 6000}

REQUIRED_SECTIONS = ('career_insights', 'program_recommendations', 'action_plan')

RESPONSE_SHAPE = {
    "career_insights": {
        "primary_career_paths": [{
            "title": "Career title", "description": "Detailed description",
            "education_requirements": ["requirement1"], "skills_needed": ["skill1"],
            "growth_potential": "High/Medium/Low", "salary_range": "Salary range",
            "work_environment": "Work environment description",
        }],
        "alternative_career_paths": [],
        "skill_gaps": [{"skill": "Skill name", "importance": "High/Medium/Low", "how_to_develop": "How"}],
        "personality_traits": ["trait1"],
        "work_style": ["style1"],
    },
    "program_recommendations": {
        "undergraduate_programs": [{
            "field_of_study": "Field name", "program_type": "Program type", "duration": "Duration",
            "why_recommended": "Why", "career_outcomes": ["outcome1"], "prerequisites": ["prerequisite1"],
            "cost_range": "Cost range",
        }],
        "postgraduate_programs": [],
        "specializations": [{"area": "Specialization area", "description": "Description",
                             "career_relevance": "Career relevance"}],
    },
    "scholarship_recommendations": {
        "scholarship_types": [{"type": "Scholarship type", "description": "Description",
                               "eligibility_criteria": ["criteria1"], "application_tips": ["tip1"]}],
        "target_fields": ["field1"],
        "application_strategy": {"timeline": "Timeline", "key_documents": ["document1"],
                                 "strengths_to_highlight": ["strength1"]},
    },
    "action_plan": {
        "immediate_steps": [{"action": "Action", "timeline": "Timeline", "priority": "High/Medium/Low",
                             "resources": ["resource1"]}],
        "short_term_goals": ["goal1"],
        "long_term_goals": ["goal1"],
    },
    "summary": {
        "key_strengths": ["strength1"], "areas_for_development": ["area1"],
        "overall_assessment": "Overall assessment", "confidence_level": "High/Medium/Low",
    },
}


def build_analysis_prompt(responses, analysis_type, custom_instructions=None):
    parts = [
        "You are an expert career counselor and educational advisor with deep knowledge of academic programs, "
        "career paths, and scholarship opportunities. Analyze the student's quiz responses and give "
        "personalized recommendations.",
        "",
        "IMPORTANT GUIDELINES:",
        "1. Focus on practical, actionable advice",
        "2. Consider the student's education level and program interests",
        "3. Provide specific program recommendations with clear reasoning",
        "4. Include scholarship opportunities that match their profile",
        "5. Create a structured action plan with timelines",
        "6. Suggest between 5 and 10 career paths, split between primary (3-5) and alternative (2-5)",
        "",
        f"STUDENT QUIZ RESPONSES: {json.dumps(responses, indent=2)}",
        f"ANALYSIS TYPE: {analysis_type}",
    ]
    if custom_instructions:
        parts.append(f"CUSTOM INSTRUCTIONS: {custom_instructions}")
    parts += ["", "Respond with ONLY valid JSON in the following format:", json.dumps(RESPONSE_SHAPE, indent=2)]
    return "\n".join(parts)


def parse_analysis(text):
    match = re.search(r'\{.*\}', text or '', re.DOTALL)
    if not match:
        raise ValueError("No valid JSON found in AI response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse AI response: {e}")
    if not all(parsed.get(k) for k in REQUIRED_SECTIONS):
        raise ValueError("AI response missing required sections")
    return parsed


def rules_analysis(responses):
    """Rule-based stand-in used when the AI service cannot produce an analysis."""
    result = engine.recommend(responses)
    preferences = engine.career_preferences(responses)
    return {
        "career_insights": {
            "insights": result["career_insights"],
            "career_paths": result["career_paths"],
            "personality_traits": preferences["personality_traits"],
            "work_style": preferences["work_style"],
            "skill_gaps": preferences["skill_gaps"],
        },
        "program_recommendations": {
            "programs": result["program_recommendations"],
            "fields": preferences["recommended_fields"],
        },
        "personality_profile": result["personality_profile"],
        "action_plan": {
            "short_term_goals": [f"Research programs in {f}" for f in preferences["recommended_fields"][:3]],
            "long_term_goals": preferences["career_goals"],
        },
    }


def matching_programs(analysis, limit=15):
    recs = analysis.get('program_recommendations') or {}
    fields = [p.get('field_of_study') for p in recs.get('undergraduate_programs') or []]
    fields += [p.get('field_of_study') for p in recs.get('postgraduate_programs') or []]
    fields += [s.get('area') for s in recs.get('specializations') or []]
    fields += recs.get('fields') or []
    fields = [f for f in fields if f]
    if not fields:
        return []
    clauses = []
    for f in fields:
        clauses += [Program.field_of_study.ilike(f"%{f}%"), Program.name.ilike(f"%{f}%")]
    return [program_with_school(p) for p in Program.query.filter(or_(*clauses)).limit(limit).all()]


def matching_scholarships(analysis, limit=10):
    recs = analysis.get('scholarship_recommendations') or {}
    terms = [t.get('type') for t in recs.get('scholarship_types') or []] + list(recs.get('target_fields') or [])
    return scholarships_for_terms(terms, limit)


def scholarships_for_terms(terms, limit=8):
    terms = [t for t in terms if t]
    if not terms:
        return []
    clauses = []
    for t in terms:
        clauses += [Scholarship.title.ilike(f"%{t}%"), Scholarship.description.ilike(f"%{t}%")]
    return [s.to_dict() for s in Scholarship.query.filter(or_(*clauses)).limit(limit).all()]


def program_with_school(program):
    data = program.to_dict()
    school = program.school
    data["school"] = {"id": school.id, "name": school.name, "country": school.country,
                      "global_ranking": school.global_ranking} if school else None
    return data


def analyze(user, client, analysis_type='comprehensive', custom_instructions=None, force_regenerate=False):
    if user.quiz_analysis and not force_regenerate:
        analysis = user.quiz_analysis
        return {
            "analysis": analysis,
            "matching_programs": matching_programs(analysis),
            "matching_scholarships": matching_scholarships(analysis),
            "career_preferences": user.career_preferences or {},
            "cached": True,
        }

    responses = user.quiz_responses or {}
    try:
        text = client.generate_with_retry(build_analysis_prompt(responses, analysis_type, custom_instructions),
                                          GENERATION_CONFIG)
        analysis = parse_analysis(text)
        source = "ai"
    except Exception as e:  # the rules engine always has an answer
        logger.warning("Quiz analysis for user %s fell back to rules: %s", user.id, e)
        analysis = rules_analysis(responses)
        source = "rules"

    analysis = {**analysis, "generated_at": datetime.utcnow().isoformat(), "analysis_type": analysis_type,
                "source": source}
    if source == "ai":
        user.quiz_analysis = analysis
        db.session.commit()
    return {
        "analysis": analysis,
        "matching_programs": matching_programs(analysis),
        "matching_scholarships": matching_scholarships(analysis),
        "career_preferences": user.career_preferences or {},
        "cached": False,
        "source": source,
    }
