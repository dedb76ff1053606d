from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple


@dataclass
class QuizQuestion:
    id: str
    type: str  # multiselect | singleselect | text | textarea
    title: str
    options: List[Tuple[str, str]] = field(default_factory=list)
    required: bool = True
    max_selections: Optional[int] = None
    show_for: Optional[Dict[str, List[str]]] = None
    depends_on: Optional[str] = None
    show_when: List[str] = field(default_factory=list)

    def to_dict(self):
        data = {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "options": [{"value": v, "label": label} for v, label in self.options],
            "required": self.required,
            "max_selections": self.max_selections,
        }
        if self.depends_on:
            data["conditional_logic"] = {"depends_on": self.depends_on, "show_when": list(self.show_when)}
        return data


@dataclass
class QuizSection:
    id: str
    title: str
    description: str
    estimated_time: int
    icon: str
    questions: List[QuizQuestion]
    show_for: Optional[Dict[str, List[str]]] = None

    def to_dict(self, questions=None):
        data = asdict(self)
        data["questions"] = [q.to_dict() for q in (self.questions if questions is None else questions)]
        return data


FIELDS = [
    ("arts_humanities", "Arts & Humanities"),
    ("business_management", "Business & Management"),
    ("computer_science_it", "Computer Science & IT"),
    ("education", "Education"),
    ("engineering_technology", "Engineering & Technology"),
    ("health_sciences", "Health Sciences"),
    ("law_public_policy", "Law & Public Policy"),
    ("natural_sciences", "Natural Sciences"),
    ("social_sciences", "Social Sciences"),
    ("mathematics_statistics", "Mathematics & Statistics"),
    ("communications_media", "Communications & Media"),
    ("creative_arts_design", "Creative Arts & Design"),
]

QUIZ_SECTIONS = [
    QuizSection(
        "education-aspirations", "Education & Aspirations",
        "Let's start by understanding your current educational background and what you're looking to achieve.",
        3, "🎓", [
            QuizQuestion("educationLevel", "singleselect",
                         "What is your current highest level of education completed or in progress?", [
                             ("high_school", "High School Diploma / Secondary School Certificate"),
                             ("some_college", "Some College/University (No Degree)"),
                             ("associates", "Associate's Degree / College Diploma"),
                             ("bachelors", "Bachelor's Degree / Undergraduate Degree"),
                             ("masters", "Master's Degree / Postgraduate Degree"),
                             ("doctorate", "Doctorate (Ph.D.) / Professional Degree (e.g., MD, JD)"),
                             ("vocational", "Vocational/Technical Certification"),
                             ("other", "Other"),
                         ]),
            QuizQuestion("programInterest", "singleselect",
                         "What type of university program are you primarily interested in pursuing?", [
                             ("undergraduate", "Undergraduate Degree (e.g., Bachelor's)"),
                             ("postgraduate", "Postgraduate Degree (e.g., Master's, Ph.D., MBA)"),
                             ("diploma", "Diploma/Certificate Program"),
                             ("undecided", "Undecided"),
                         ]),
            QuizQuestion("academicBackground", "multiselect",
                         "What subjects or fields have you studied in your previous education?", [
                             ("mathematics", "Mathematics (Algebra, Calculus, Statistics)"),
                             ("sciences", "Sciences (Biology, Chemistry, Physics)"),
                             ("languages", "Languages (English, Literature, Foreign Languages)"),
                             ("social_studies", "Social Studies (History, Geography, Economics)"),
                             ("arts", "Arts (Visual Arts, Music, Drama)"),
                             ("technology", "Technology (Computer Science, IT)"),
                             ("business", "Business Studies"),
                             ("physical_education", "Physical Education & Health"),
                             ("engineering", "Engineering (Any discipline)"),
                             ("medicine_health", "Medicine & Health Sciences"),
                             ("law", "Law & Legal Studies"),
                             ("education", "Education & Teaching"),
                             ("psychology", "Psychology & Behavioral Sciences"),
                             ("environmental", "Environmental Sciences"),
                             ("agriculture", "Agriculture & Food Sciences"),
                             ("architecture", "Architecture & Design"),
                         ], depends_on="programInterest", show_when=["undergraduate", "postgraduate"]),
            QuizQuestion("careerProgression", "multiselect", "What are your career progression goals?", [
                ("same_field_advancement", "Advance in the same field"),
                ("field_switch", "Switch to a different field"),
                ("specialization", "Specialize in a niche area"),
                ("research_academia", "Enter research or academia"),
                ("entrepreneurship", "Start my own business"),
                ("leadership_management", "Move into leadership/management"),
                ("international_career", "Pursue international opportunities"),
                ("public_service", "Enter public service or non-profit"),
            ], depends_on="programInterest", show_when=["postgraduate"]),
            QuizQuestion("previousDegreeField", "multiselect", "What was your previous degree field of study?",
                         FIELDS + [("other", "Other")],
                         depends_on="programInterest", show_when=["postgraduate"]),
        ]),
    QuizSection(
        "academic-preparation", "Academic Preparation",
        "Understanding your academic background helps us recommend the right programs for your level.",
        3, "📚", [
            QuizQuestion("highSchoolSubjects", "multiselect",
                         "Which subjects did you excel in or enjoy most during high school?", [
                             ("mathematics", "Mathematics"),
                             ("physics", "Physics"),
                             ("chemistry", "Chemistry"),
                             ("biology", "Biology"),
                             ("english_literature", "English & Literature"),
                             ("history", "History"),
                             ("geography", "Geography"),
                             ("economics", "Economics"),
                             ("computer_science", "Computer Science"),
                             ("art_design", "Art & Design"),
                             ("music", "Music"),
                             ("physical_education", "Physical Education"),
                             ("languages", "Foreign Languages"),
                             ("business_studies", "Business Studies"),
                         ], max_selections=6),
            QuizQuestion("academicAchievements", "multiselect",
                         "What academic achievements or activities are you most proud of?", [
                             ("high_gpa", "High GPA/Academic Excellence"),
                             ("honors_advanced", "Honors/Advanced Placement Courses"),
                             ("science_fair", "Science Fair/Research Projects"),
                             ("debate_competition", "Debate/Public Speaking"),
                             ("math_competition", "Math/Science Competitions"),
                             ("student_government", "Student Government/Leadership"),
                             ("clubs_activities", "Academic Clubs/Activities"),
                             ("community_service", "Community Service/Volunteering"),
                             ("sports_athletics", "Sports/Athletics"),
                             ("arts_performance", "Arts/Performance"),
                             ("entrepreneurship", "Entrepreneurship/Innovation"),
                             ("internships", "Internships/Work Experience"),
                         ], max_selections=4),
        ], show_for={"programInterest": ["undergraduate"]}),
    QuizSection(
        "postgraduate-background", "Postgraduate Background",
        "Understanding your previous academic and professional experience helps us recommend the right advanced programs.",
        4, "🎯", [
            QuizQuestion("workExperience", "multiselect", "What type of work experience do you have?", [
                ("entry_level", "Entry-level professional"),
                ("mid_level", "Mid-level professional"),
                ("senior_level", "Senior-level professional"),
                ("management", "Management/Leadership"),
                ("research", "Research experience"),
                ("teaching", "Teaching/Training"),
                ("consulting", "Consulting/Advisory"),
                ("entrepreneurship", "Entrepreneurship"),
                ("public_sector", "Public sector/Government"),
                ("non_profit", "Non-profit/Social impact"),
                ("international", "International experience"),
                ("volunteer", "Volunteer work"),
            ], max_selections=5),
            QuizQuestion("researchInterests", "multiselect", "What research areas or topics interest you most?", [
                ("artificial_intelligence", "Artificial Intelligence & Machine Learning"),
                ("sustainability", "Sustainability & Environmental Science"),
                ("healthcare_innovation", "Healthcare Innovation"),
                ("data_science", "Data Science & Analytics"),
                ("cybersecurity", "Cybersecurity & Privacy"),
                ("social_impact", "Social Impact & Development"),
                ("business_innovation", "Business Innovation & Strategy"),
                ("education_technology", "Education Technology"),
                ("urban_planning", "Urban Planning & Smart Cities"),
                ("biotechnology", "Biotechnology & Life Sciences"),
                ("renewable_energy", "Renewable Energy & Clean Tech"),
                ("digital_transformation", "Digital Transformation"),
            ], required=False, max_selections=4),
            QuizQuestion("specializationGoals", "multiselect",
                         "What are your specialization goals for your advanced degree?", [
                             ("technical_expertise", "Technical expertise"),
                             ("research_methods", "Research methods"),
                             ("leadership_skills", "Leadership skills"),
                             ("industry_knowledge", "Industry knowledge"),
                             ("global_perspective", "Global perspective"),
                             ("innovation_creativity", "Innovation and creativity"),
                             ("policy_analysis", "Policy analysis"),
                             ("entrepreneurial_skills", "Entrepreneurial skills"),
                         ], max_selections=3),
        ], show_for={"programInterest": ["postgraduate"]}),
    QuizSection(
        "interest-areas", "Interest Areas",
        "Discover what truly excites you and where your passions lie.",
        3, "🔍", [
            QuizQuestion("interestAreas", "multiselect",
                         "Which of the following broad fields spark your curiosity?",
                         FIELDS[:9] + [("trades_applied_sciences", "Trades & Applied Sciences")] + FIELDS[9:],
                         max_selections=5),
            QuizQuestion("learningApproach", "multiselect",
                         "When you encounter a new concept or topic, what excites you most?", [
                             ("theoretical", "Understanding the fundamental theories and principles behind it"),
                             ("practical", "Applying it to real-world problems and seeing its practical uses"),
                             ("creative", "Creating something new or innovative with it"),
                             ("analytical", "Analyzing data and patterns related to it"),
                             ("communicative", "Communicating it effectively to others"),
                             ("improvement", "Improving existing processes or systems based on it"),
                             ("historical", "Exploring its historical development and cultural impact"),
                             ("problem_solving", "Solving complex challenges associated with it"),
                         ], max_selections=4),
        ]),
    QuizSection(
        "work-environment", "Work Environment",
        "Understanding your preferred work setting helps us match you with the right career paths.",
        3, "🏢", [
            QuizQuestion("workEnvironment", "multiselect",
                         "Which of these work environments appeal to you the most?", [
                             ("office_corporate", "Office/Corporate"),
                             ("laboratory_research", "Laboratory/Research"),
                             ("outdoor_field", "Outdoor/Field-based"),
                             ("clinical_healthcare", "Clinical/Healthcare"),
                             ("creative_studio", "Creative Studio"),
                             ("workshop_manufacturing", "Workshop/Manufacturing"),
                             ("educational_institution", "Educational Institution"),
                             ("remote_flexible", "Remote/Flexible"),
                             ("public_service", "Public Service/Community-focused"),
                             ("travel_intensive", "Travel-intensive"),
                             ("independent_solo", "Independent/Solo"),
                         ], max_selections=4),
            QuizQuestion("projectMotivation", "multiselect",
                         "Imagine you're working on a challenging project. Which scenario would you find most motivating?", [
                             ("independent_solution", "Working independently to find a solution, with minimal interruptions"),
                             ("small_team_collaboration", "Collaborating closely with a small, dedicated team, brainstorming ideas"),
                             ("leading_team", "Leading a larger team, delegating tasks and coordinating efforts"),
                             ("client_interaction", "Working directly with clients or beneficiaries to understand their needs"),
                             ("dynamic_environment", "Being in a dynamic environment where new challenges arise constantly"),
                             ("structured_process", "Having a clear set of rules and procedures to follow, ensuring precision"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "work-style", "Work Style",
        "Your natural approach to work and collaboration style are key to finding the right fit.",
        3, "⚡", [
            QuizQuestion("workApproach", "multiselect", "How do you prefer to approach tasks and projects?", [
                ("structured_organized", "Structured & Organized"),
                ("flexible_adaptive", "Flexible & Adaptive"),
                ("collaborative", "Collaborative"),
                ("independent", "Independent"),
                ("problem_solving", "Problem-Solving Focused"),
                ("results_oriented", "Results-Oriented"),
                ("creative_innovative", "Creative & Innovative"),
                ("analytical", "Analytical"),
            ], max_selections=4),
            QuizQuestion("conflictResolution", "multiselect",
                         "You are part of a team working on a new initiative. A conflict arises regarding the best "
                         "approach. How would you most likely respond?", [
                             ("listen_compromise", "Actively listen to all perspectives, seeking common ground and compromise"),
                             ("present_argument", "Present your own well-reasoned argument, aiming to persuade others"),
                             ("gather_evidence", "Focus on gathering more data or evidence to support a logical solution"),
                             ("observe_resolve", "Step back and observe, allowing others to resolve the conflict before offering input"),
                             ("structured_process", "Suggest a structured process for conflict resolution, like a facilitated discussion"),
                             ("maintain_harmony", "Prioritize maintaining team harmony, even if it means compromising on your preferred solution"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "strengths-skills", "Strengths & Skills",
        "Identifying your core strengths helps us understand where you'll excel and what you might need to develop.",
        3, "💪", [
            QuizQuestion("keyStrengths", "multiselect", "Which of the following are your key strengths and skills?", [
                ("analytical_thinking", "Analytical Thinking"),
                ("problem_solving", "Problem-Solving"),
                ("creativity", "Creativity"),
                ("verbal_communication", "Communication (Verbal)"),
                ("written_communication", "Communication (Written)"),
                ("leadership", "Leadership"),
                ("teamwork", "Teamwork/Collaboration"),
                ("attention_detail", "Attention to Detail"),
                ("time_management", "Time Management/Organization"),
                ("technical_proficiency", "Technical Proficiency"),
                ("adaptability", "Adaptability/Flexibility"),
                ("research", "Research"),
                ("empathy", "Empathy/Interpersonal Skills"),
                ("critical_thinking", "Critical Thinking"),
                ("mathematical", "Mathematical/Quantitative Skills"),
                ("artistic_design", "Artistic/Design Skills"),
                ("practical_hands_on", "Practical/Hands-on Skills"),
            ], max_selections=6),
            QuizQuestion("skillGapResponse", "multiselect",
                         "You're faced with a project that requires a skill you don't possess. What's your typical reaction?", [
                             ("self_study", "Take the initiative to learn the new skill quickly through self-study or online resources"),
                             ("seek_mentor", "Seek out a mentor or expert who can guide you"),
                             ("collaborate", "Collaborate with someone who has the required skill"),
                             ("break_down", "Break down the task into smaller parts to see if you can manage what you already know"),
                             ("different_approach", "Consider if the task can be approached in a different way that leverages your existing strengths"),
                             ("avoid_skill", "Focus on finding a solution that avoids the need for that specific skill"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "career-goals-values", "Career Goals & Values",
        "Understanding what you value most in a career helps us align recommendations with your life goals.",
        3, "🎯", [
            QuizQuestion("careerValues", "multiselect", "What do you value most in a future career?", [
                ("impact", "Impact/Making a Difference"),
                ("financial_reward", "Financial Reward"),
                ("work_life_balance", "Work-Life Balance"),
                ("innovation", "Innovation/Cutting-Edge Work"),
                ("autonomy", "Autonomy/Independence"),
                ("creativity_expression", "Creativity/Expression"),
                ("stability_security", "Stability/Security"),
                ("continuous_learning", "Continuous Learning/Growth"),
                ("collaboration_teamwork", "Collaboration/Teamwork"),
                ("recognition_prestige", "Recognition/Prestige"),
                ("problem_solving_challenges", "Problem-Solving"),
                ("helping_others", "Helping Others"),
                ("travel_exploration", "Travel/Exploration"),
            ], max_selections=5),
            QuizQuestion("jobPreference", "multiselect",
                         "You're offered two job opportunities. Job A offers a higher salary and prestige but less "
                         "work-life balance. Job B offers a moderate salary and good work-life balance, with "
                         "opportunities for personal projects. Which would you lean towards, and why?", [
                             ("prioritize_financial", "Job A: I prioritize financial growth and professional recognition"),
                             ("dedicate_time_career", "Job A: I am willing to dedicate more time to my career for significant impact"),
                             ("thrive_pressure", "Job A: I thrive under pressure and enjoy demanding environments"),
                             ("value_personal_time", "Job B: I value personal time and well-being highly"),
                             ("pursue_diverse_interests", "Job B: I believe in pursuing diverse interests outside of work"),
                             ("fulfillment_creative", "Job B: I find fulfillment in creative or personal projects"),
                             ("moderate_salary_sufficient", "Job B: A moderate salary is sufficient for my needs"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "academic-subjects", "Academic Subjects",
        "Your academic preferences and strengths provide valuable insights into your learning style and potential career paths.",
        3, "📚", [
            QuizQuestion("academicSubjects", "multiselect",
                         "Which academic subjects did you genuinely enjoy and excel in during your schooling?", [
                             ("mathematics", "Mathematics (Algebra, Calculus, Statistics)"),
                             ("physics", "Physics"),
                             ("chemistry", "Chemistry"),
                             ("biology", "Biology"),
                             ("computer_science", "Computer Science/Programming"),
                             ("english_literature", "English/Literature"),
                             ("history_social_studies", "History/Social Studies"),
                             ("geography", "Geography"),
                             ("economics", "Economics"),
                             ("business_studies", "Business Studies"),
                             ("visual_arts_design", "Visual Arts/Design"),
                             ("music_performing_arts", "Music/Performing Arts"),
                             ("languages", "Languages (French, Spanish, etc.)"),
                             ("physical_education", "Physical Education/Sports Science"),
                             ("philosophy_ethics", "Philosophy/Ethics"),
                             ("psychology", "Psychology"),
                             ("sociology", "Sociology"),
                             ("hands_on_learning", "None of the above, I prefer hands-on learning"),
                         ], max_selections=6),
            QuizQuestion("assignmentEngagement", "multiselect",
                         "When tackling academic assignments, which aspects did you find most engaging?", [
                             ("research_analysis", "Conducting in-depth research and analysis"),
                             ("writing_essays", "Writing persuasive essays or reports"),
                             ("mathematical_problems", "Solving complex mathematical problems"),
                             ("experiments", "Designing and conducting experiments"),
                             ("group_projects", "Collaborating on group projects"),
                             ("presentations", "Presenting information and ideas to others"),
                             ("visual_artistic", "Creating visual aids or artistic interpretations"),
                             ("debates_discussions", "Debating and discussing different viewpoints"),
                             ("practical_applications", "Applying theoretical knowledge to practical scenarios"),
                         ], max_selections=4),
        ]),
    QuizSection(
        "time-commitment", "Time Commitment",
        "Understanding your timeline and commitment level helps us recommend programs that fit your life circumstances.",
        2, "⏰", [
            QuizQuestion("timeCommitment", "multiselect",
                         "How long are you realistically willing to commit to your higher education studies?", [
                             ("1_2_years", "1-2 years (e.g., Diploma, Certificate)"),
                             ("3_4_years", "3-4 years (e.g., Bachelor's Degree)"),
                             ("5_6_years", "5-6 years (e.g., Bachelor's + Master's, or some professional degrees)"),
                             ("7_plus_years", "7+ years (e.g., Doctoral studies, extensive professional degrees)"),
                             ("flexible", "I'm open to various durations if the program is the right fit"),
                         ]),
            QuizQuestion("extendedCommitment", "multiselect",
                         "A university program you're highly interested in requires a significantly longer time "
                         "commitment than you initially planned. How would you approach this?", [
                             ("open_longer_commitment", "I would be open to the longer commitment if the long-term career benefits are substantial"),
                             ("research_alternatives", "I would research alternative programs that fit my desired timeline"),
                             ("consider_financial_impact", "I would consider how this affects my financial situation and overall life plan"),
                             ("weigh_passion_against_time", "I would weigh the passion for the subject against the additional time investment"),
                             ("accelerate_studies", "I would try to find ways to accelerate my studies or gain credit for prior learning"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "budget-considerations", "Budget Considerations",
        "Financial planning is crucial for your educational journey. Let's understand your budget priorities.",
        2, "💰", [
            QuizQuestion("financialConsiderations", "multiselect",
                         "What are your primary financial considerations for university education?", [
                             ("minimize_tuition", "Minimizing tuition costs is a top priority"),
                             ("access_scholarships", "Access to scholarships, grants, or financial aid is essential"),
                             ("prepared_loans", "I am prepared to take on student loans if necessary"),
                             ("part_time_work", "I prefer programs with opportunities for part-time work or co-op"),
                             ("quality_over_cost", "Cost is a factor, but quality and fit are more important"),
                             ("financial_support", "I have significant financial support available"),
                             ("strong_roi", "I am looking for programs that offer a strong return on investment (ROI)"),
                         ], max_selections=4),
            QuizQuestion("tuitionChallenge", "multiselect",
                         "You are accepted into your dream program, but the tuition is higher than you anticipated. "
                         "What's your next step?", [
                             ("search_scholarships", "Actively search for all possible scholarships, grants, and bursaries"),
                             ("explore_loans", "Explore student loan options and repayment plans"),
                             ("consider_alternatives", "Consider alternative, more affordable programs in the same field"),
                             ("discuss_financial_advisors", "Discuss financial options with family or financial advisors"),
                             ("work_save_first", "Look for opportunities to work part-time or save money before starting"),
                             ("reassess_benefits", "Re-evaluate if the long-term benefits of the program outweigh the increased cost"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "location-preferences", "Location Preferences",
        "Where you study can significantly impact your experience and opportunities. Let's explore your preferences.",
        3, "🌍", [
            QuizQuestion("studyLocation", "multiselect", "Where would you prefer to study?", [
                ("current_city", "My current city/region (staying close to home)"),
                ("another_city_country", "Another city within my country"),
                ("internationally", "Internationally (another country)"),
                ("specific_climate", "Specific climate/environment (e.g., urban, rural, warm, cold)"),
                ("open_various_locations", "I am open to various locations if the program is ideal"),
                ("online_remote", "Online/Remote learning options are preferred"),
            ], max_selections=3),
            QuizQuestion("locationFactors", "multiselect",
                         "What factors are most important to you when considering a study location?", [
                             ("proximity_family", "Proximity to family/friends"),
                             ("cultural_experience", "Cultural experience"),
                             ("cost_of_living", "Cost of living"),
                             ("job_opportunities", "Job opportunities"),
                             ("university_reputation", "Reputation of the university/program"),
                             ("lifestyle_activities", "Lifestyle/Activities"),
                             ("safety_security", "Safety and security"),
                             ("industry_hubs", "Access to specific industries/companies"),
                             ("diversity_inclusivity", "Diversity and inclusivity"),
                         ], max_selections=5),
            QuizQuestion("locationDecision", "multiselect",
                         "You've found an ideal program, but it's located in a city or country you hadn't initially "
                         "considered. How would you weigh this decision?", [
                             ("research_location", "I would research the new location thoroughly, considering its pros and cons"),
                             ("open_to_change", "I would be open to the change if the program truly aligns with my goals"),
                             ("visit_location", "I would consider visiting the location to get a feel for it before committing"),
                             ("assess_logistical_challenges", "I would assess the logistical challenges (visa, housing, travel)"),
                             ("prioritize_program_quality", "I would prioritize the program quality over the geographical location"),
                             ("location_deal_breaker", "The location would be a deal-breaker if it doesn't align with my comfort zone"),
                         ], max_selections=3),
        ]),
    QuizSection(
        "open-ended", "Additional Insights",
        "These optional questions help us understand your unique situation and provide more personalized recommendations.",
        5, "💭", [
            QuizQuestion("additionalInfo", "textarea",
                         "Is there anything else you want us to know about your unique situation, aspirations, or challenges?",
                         required=False),
            QuizQuestion("idealDay", "textarea",
                         'Imagine your ideal "typical day" ten years from now. What does it look like?',
                         required=False),
            QuizQuestion("nonNegotiables", "textarea",
                         "What is one thing you are absolutely not willing to compromise on when it comes to your "
                         "education and future career?", required=False),
        ]),
]

TOTAL_QUIZ_TIME = sum(s.estimated_time for s in QUIZ_SECTIONS)


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _show_for_ok(show_for, responses):
    for key, allowed in (show_for or {}).items():
        answered = _as_list(responses.get(key))
        if not answered or not any(a in answered for a in allowed):
            return False
    return True


def get_filtered_sections(responses):
    return [s for s in QUIZ_SECTIONS if _show_for_ok(s.show_for, responses)]


def get_filtered_questions(section, responses):
    questions = []
    for q in section.questions:
        if q.show_for and not _show_for_ok(q.show_for, responses):
            continue
        if q.depends_on:
            answered = _as_list(responses.get(q.depends_on))
            if not answered or not any(a in q.show_when for a in answered):
                continue
        questions.append(q)
    return questions


def _index_of(sections, section_id):
    for i, s in enumerate(sections):
        if s.id == section_id:
            return i
    return -1


def get_next_section(current_id, responses):
    sections = get_filtered_sections(responses)
    i = _index_of(sections, current_id)
    if i == -1 or i == len(sections) - 1:
        return None
    return sections[i + 1]


def get_previous_section(current_id, responses):
    sections = get_filtered_sections(responses)
    i = _index_of(sections, current_id)
    if i <= 0:
        return None
    return sections[i - 1]


def get_adaptive_progress_percentage(completed_sections, responses):
    sections = get_filtered_sections(responses)
    if not sections:
        return 0
    ids = {s.id for s in sections}
    done = len([sid for sid in completed_sections if sid in ids])
    progress = done / len(sections) * 100
    return max(0, min(100, progress))


def get_adaptive_total_questions(responses):
    return sum(len(get_filtered_questions(s, responses)) for s in get_filtered_sections(responses))


def get_section_by_id(section_id):
    for s in QUIZ_SECTIONS:
        if s.id == section_id:
            return s
    return None


def get_question_by_id(section_id, question_id):
    section = get_section_by_id(section_id)
    if not section:
        return None
    for q in section.questions:
        if q.id == question_id:
            return q
    return None


def get_total_questions():
    return sum(len(s.questions) for s in QUIZ_SECTIONS)


def get_progress_percentage(completed_sections):
    return len(completed_sections) / len(QUIZ_SECTIONS) * 100
