import math

from eddura.ml import quiz
from eddura.ml.engine import Engine, validate_strength

engine = Engine()


def undergrad_responses() -> dict:
    return {
        "programInterest": ["undergraduate"],
        "highSchoolSubjects": ["mathematics", "physics"],
        "interestAreas": ["engineering_technology", "computer_science_it"],
        "careerValues": ["impact"],
        "workApproach": ["collaborative", "problem_solving"],
        "keyStrengths": ["analytical_thinking"],
        "learningApproach": ["practical"],
    }


def test_match_score_is_capped_at_100() -> None:
    criteria = ["engineering_technology", "computer_science_it", "mathematics"]
    assert engine.match_score(undergrad_responses(), criteria) == 100


def test_match_score_counts_interest_overlap() -> None:
    responses = {"interestAreas": ["business_management"]}
    assert engine.match_score(responses, ["business_management"]) == 30
    assert engine.match_score(responses, ["health_sciences"]) == 0


def test_career_insights_take_first_matching_rule_per_group() -> None:
    insights = engine.career_insights(undergrad_responses())
    titles = [i.title for i in insights]
    assert titles[:2] == ["Undergraduate Foundation Builder", "Quantitative Problem Solver"]
    assert all(0 <= i.strength <= 100 for i in insights)


def test_program_recommendations_follow_program_level() -> None:
    programs = engine.program_recommendations(undergrad_responses())
    assert programs
    assert programs[0].id == "ug_eng_1"
    assert all(p.id.startswith("ug_") for p in programs)
    scores = [p.match_score for p in programs]
    assert scores == sorted(scores, reverse=True)


def test_no_program_recommendations_without_program_interest() -> None:
    assert engine.program_recommendations({"interestAreas": ["business_management"]}) == []


def test_personality_profile() -> None:
    profile = engine.personality_profile(undergrad_responses())
    assert profile.work_style == "Collaborative Problem Solver"
    assert profile.learning_approach == "Practical Application Focused"
    assert profile.personality_type == "Social Impact Leader"
    assert profile.career_values == ["Making Impact"]
    assert profile.strengths == ["Analytical Thinking"]


def test_career_paths_sorted_by_match() -> None:
    responses = {"interestAreas": ["health_sciences", "computer_science_it"], "careerValues": ["impact"]}
    titles = [p.title for p in engine.career_paths(responses)]
    assert titles == ["Data Scientist", "Public Health Professional"]


def test_validate_strength_clamps_bad_values() -> None:
    assert validate_strength(150) == 100
    assert validate_strength(-5) == 0
    assert validate_strength("abc") == 0
    assert validate_strength(math.nan) == 0
    assert validate_strength(42.5) == 42.5


def test_career_preferences_maps_interest_fields() -> None:
    prefs = engine.career_preferences(undergrad_responses())
    assert prefs["recommended_fields"] == ["Engineering", "Computer Science"]
    assert prefs["personality_traits"] == ["Social Impact Leader"]
    assert len(prefs["skill_gaps"]) == 3


def test_recommend_shape() -> None:
    result = engine.recommend(undergrad_responses())
    assert set(result) == {"career_insights", "program_recommendations", "personality_profile", "career_paths"}


def test_sections_filter_by_program_interest() -> None:
    all_ids = [s.id for s in quiz.QUIZ_SECTIONS]
    assert len(all_ids) == 13
    undergrad = [s.id for s in quiz.get_filtered_sections({"programInterest": ["undergraduate"]})]
    assert "academic-preparation" in undergrad
    assert "postgraduate-background" not in undergrad
    assert len(undergrad) == 12
    neither = quiz.get_filtered_sections({})
    assert len(neither) == 11


def test_conditional_questions() -> None:
    section = quiz.get_section_by_id("education-aspirations")
    assert [q.id for q in quiz.get_filtered_questions(section, {})] == ["educationLevel", "programInterest"]
    postgrad = quiz.get_filtered_questions(section, {"programInterest": "postgraduate"})
    assert [q.id for q in postgrad][-2:] == ["careerProgression", "previousDegreeField"]
    assert len(postgrad) == 5


def test_section_navigation() -> None:
    responses = {"programInterest": ["postgraduate"]}
    assert quiz.get_next_section("education-aspirations", responses).id == "postgraduate-background"
    assert quiz.get_previous_section("education-aspirations", responses) is None
    assert quiz.get_next_section("open-ended", responses) is None
    assert quiz.get_next_section("unknown", responses) is None


def test_adaptive_progress() -> None:
    responses = {"programInterest": ["undergraduate"]}
    done = ["education-aspirations", "academic-preparation", "interest-areas"]
    assert quiz.get_adaptive_progress_percentage(done, responses) == 25
    # sections hidden for this path do not count
    assert quiz.get_adaptive_progress_percentage(["postgraduate-background"], responses) == 0


def test_question_lookup() -> None:
    assert quiz.get_question_by_id("education-aspirations", "programInterest").type == "singleselect"
    assert quiz.get_question_by_id("education-aspirations", "nope") is None
    assert quiz.get_question_by_id("nope", "programInterest") is None


def test_unfiltered_totals() -> None:
    assert quiz.get_total_questions() == sum(len(s.questions) for s in quiz.QUIZ_SECTIONS)
    # conditional questions make the full bank larger than any single path
    assert quiz.get_total_questions() > quiz.get_adaptive_total_questions({"programInterest": ["undergraduate"]})
    assert math.isclose(quiz.get_progress_percentage(["education-aspirations", "interest-areas"]), 200 / 13)
    assert quiz.get_progress_percentage([]) == 0
