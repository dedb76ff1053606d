import json

from eddura.ml import quiz
from eddura.services.ai import AIClient


def answer(client, headers, section, question, value, **extra):
    body = {"section_id": section, "question_id": question, "responses": value}
    body.update(extra)
    return client.post("/api/quiz/submit", json=body, headers=headers)


def complete_quiz(client, headers):
    answer(client, headers, "education-aspirations", "educationLevel", "high_school")
    answer(client, headers, "education-aspirations", "programInterest", ["undergraduate"])
    answer(client, headers, "interest-areas", "interestAreas", ["engineering_technology", "computer_science_it"])
    return answer(client, headers, "career-goals-values", "careerValues", ["impact"], is_completed=True)


def test_sections_for_new_user(client, student_headers) -> None:
    body = client.get("/api/quiz/sections?current=education-aspirations", headers=student_headers).get_json()
    assert body["total_sections"] == 11
    assert body["progress"] == 0
    assert body["next_section"] == "interest-areas"
    assert body["previous_section"] is None
    assert body["question_bank_size"] == quiz.get_total_questions()
    assert body["question_bank_size"] > body["total_questions"]
    first = body["sections"][0]
    assert [q["id"] for q in first["questions"]] == ["educationLevel", "programInterest"]


def test_section_completes_when_required_answers_present(client, student_headers) -> None:
    answer(client, student_headers, "education-aspirations", "educationLevel", "bachelors")
    resp = answer(client, student_headers, "education-aspirations", "programInterest", ["undergraduate"])
    # academicBackground is now shown and still unanswered
    assert resp.get_json()["progress"] == 0

    resp = answer(client, student_headers, "education-aspirations", "academicBackground", ["engineering"],
                  time_spent=40)
    assert resp.get_json()["progress"] == 8  # 1 of 12 sections
    sections = client.get("/api/quiz/sections", headers=student_headers).get_json()
    assert sections["overall_progress"] == 8  # 1 of all 13 sections

    saved = client.get("/api/quiz/submit", headers=student_headers).get_json()
    assert saved["completed_sections"] == ["education-aspirations"]
    assert saved["time_spent"] == 40
    assert saved["quiz_responses"]["programInterest"] == ["undergraduate"]

    sections = client.get("/api/quiz/sections?current=education-aspirations", headers=student_headers).get_json()
    assert sections["next_section"] == "academic-preparation"


def test_unknown_question_is_rejected(client, student_headers) -> None:
    resp = answer(client, student_headers, "education-aspirations", "favouriteColour", "blue")
    assert resp.status_code == 400
    resp = client.post("/api/quiz/submit", json={"question_id": "x"}, headers=student_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_failed"


def test_results_require_completed_quiz(client, student_headers) -> None:
    resp = client.get("/api/quiz/results", headers=student_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Quiz not completed", "quiz_completed": False}


def test_completed_quiz_results(client, student_headers, admin_headers) -> None:
    school = client.post("/api/admin/schools", json={"name": "Tech Institute", "country": "Canada"},
                         headers=admin_headers).get_json()
    client.post("/api/admin/programs", headers=admin_headers,
                json={"school_id": school["id"], "name": "BEng Software", "field_of_study": "Software Engineering"})

    client.post("/api/admin/scholarships", headers=admin_headers,
                json={"title": "Women in Engineering Grant", "deadline": "2030-03-01"})
    client.post("/api/admin/scholarships", headers=admin_headers,
                json={"title": "Music Bursary", "deadline": "2030-03-01"})

    resp = complete_quiz(client, student_headers)
    assert resp.get_json()["quiz_completed"] is True
    assert resp.get_json()["progress"] == 100

    results = client.get("/api/quiz/results", headers=student_headers).get_json()
    assert results["quiz_completed"] is True
    assert results["career_preferences"]["recommended_fields"] == ["Engineering", "Computer Science"]
    assert results["match_score"] == 80
    assert [p["name"] for p in results["recommended_programs"]] == ["BEng Software"]
    assert results["recommended_programs"][0]["school"]["name"] == "Tech Institute"
    assert [s["title"] for s in results["recommended_scholarships"]] == ["Women in Engineering Grant"]

    recs = client.get("/api/quiz/recommendations", headers=student_headers).get_json()
    assert recs["program_recommendations"][0]["id"] == "ug_eng_1"


def test_analysis_falls_back_to_rules_without_ai(client, student_headers) -> None:
    complete_quiz(client, student_headers)
    first = client.post("/api/quiz/analysis", json={}, headers=student_headers).get_json()
    assert first["source"] == "rules"
    assert first["cached"] is False
    assert first["analysis"]["program_recommendations"]["fields"] == ["Engineering", "Computer Science"]
    # rule-based results are not stored
    second = client.post("/api/quiz/analysis", json={}, headers=student_headers).get_json()
    assert second["cached"] is False


def test_analysis_from_ai_is_cached(app, client, student_headers) -> None:
    analysis = {
        "career_insights": {"personality_traits": ["Curious"]},
        "program_recommendations": {"specializations": [{"area": "Robotics"}]},
        "action_plan": {"short_term_goals": ["Take a robotics course"]},
    }
    calls = []

    def fake(prompt, config):
        calls.append(prompt)
        return "Here you go:\n" + json.dumps(analysis)

    app.extensions["eddura.ai"] = AIClient(generate=fake, sleep=lambda s: None)
    complete_quiz(client, student_headers)

    first = client.post("/api/quiz/analysis", json={"analysis_type": "career-focused"},
                        headers=student_headers).get_json()
    assert first["source"] == "ai"
    assert first["analysis"]["analysis_type"] == "career-focused"
    second = client.post("/api/quiz/analysis", json={}, headers=student_headers).get_json()
    assert second["cached"] is True
    assert len(calls) == 1

    client.post("/api/quiz/analysis", json={"force_regenerate": True}, headers=student_headers)
    assert len(calls) == 2


def test_analysis_requires_completed_quiz(client, student_headers) -> None:
    resp = client.post("/api/quiz/analysis", json={}, headers=student_headers)
    assert resp.status_code == 400


def test_anonymous_submission_in_production(prod_app) -> None:
    client = prod_app.test_client()
    resp = client.post("/api/quiz/submit", json={
        "section_id": "education-aspirations", "question_id": "educationLevel", "responses": "masters",
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["temp_id"].startswith("temp_")
    assert body["note"] == "Please register to save your responses permanently"

    assert client.get("/api/quiz/results").status_code == 401


def test_rate_limit_in_production(prod_app) -> None:
    client = prod_app.test_client()
    codes = [client.get("/health").status_code for _ in range(4)]
    assert codes == [200, 200, 200, 429]
    assert client.get("/health").get_json()["error"] == "rate_limited"


def test_results_without_recommended_fields(client, student_headers) -> None:
    answer(client, student_headers, "career-goals-values", "careerValues", ["impact"], is_completed=True)
    results = client.get("/api/quiz/results", headers=student_headers).get_json()
    assert results["career_preferences"]["recommended_fields"] == []
    assert results["match_score"] == 70
    assert results["recommended_programs"] == []
    assert results["recommended_scholarships"] == []
