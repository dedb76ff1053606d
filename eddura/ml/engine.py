from dataclasses import dataclass, field, asdict
from typing import List, Dict, Callable
import numpy as np

Responses = Dict[str, List[str]]


@dataclass
class CareerInsight:
    category: str
    title: str
    description: str
    icon: str
    color: str
    strength: float
    reasoning: str


@dataclass
class ProgramRecommendation:
    id: str
    name: str
    university: str
    field: str
    match_score: int
    duration: str
    location: str
    tuition: str
    description: str
    highlights: List[str] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class PersonalityProfile:
    work_style: str
    learning_approach: str
    career_values: List[str]
    strengths: List[str]
    growth_areas: List[str]
    personality_type: str


@dataclass
class CareerPath:
    title: str
    description: str
    match_score: int
    requirements: List[str]
    opportunities: List[str]
    salary: str


def validate_strength(strength) -> float:
    try:
        value = float(strength)
    except (TypeError, ValueError):
        return 0
    if not np.isfinite(value):
        return 0
    return float(np.clip(value, 0, 100))


def _get(responses, key) -> List[str]:
    value = responses.get(key) or []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _has(responses, key, *values) -> bool:
    answered = _get(responses, key)
    return any(v in answered for v in values)


def _has_all(responses, key, *values) -> bool:
    answered = _get(responses, key)
    return all(v in answered for v in values)


# Each group yields at most one insight: the first rule whose predicate holds.
INSIGHT_RULES = [
    [
        (lambda r: _has(r, 'programInterest', 'undergraduate'),
         CareerInsight('Educational Pathway', 'Undergraduate Foundation Builder',
                       "You're seeking to build a strong academic foundation and explore different fields before specializing.",
                       'GraduationCap', 'bg-blue-500', 85,
                       'Focus on undergraduate education with strong academic background in multiple subjects')),
        (lambda r: _has(r, 'programInterest', 'postgraduate'),
         CareerInsight('Educational Pathway', 'Advanced Specialization Seeker',
                       "You're ready to deepen your expertise and advance your career through specialized education.",
                       'Target', 'bg-purple-500', 90,
                       'Pursuing postgraduate education with clear career progression goals')),
    ],
    [
        (lambda r: _has_all(r, 'highSchoolSubjects', 'mathematics', 'physics'),
         CareerInsight('Academic Strengths', 'Quantitative Problem Solver',
                       'You excel in analytical and mathematical thinking, making you well-suited for technical fields.',
                       'Calculator', 'bg-green-500', 88,
                       'Strong performance in mathematics and physics subjects')),
        (lambda r: _has_all(r, 'highSchoolSubjects', 'english_literature', 'history'),
         CareerInsight('Academic Strengths', 'Critical Thinker & Communicator',
                       'You have strong analytical and communication skills, valuable in humanities and social sciences.',
                       'BookOpen', 'bg-orange-500', 82,
                       'Strong performance in English literature and history')),
    ],
    [
        (lambda r: _has(r, 'careerProgression', 'same_field_advancement'),
         CareerInsight('Career Progression', 'Field Specialist',
                       'You want to deepen your expertise in your current field and advance to senior positions.',
                       'TrendingUp', 'bg-indigo-500', 85,
                       'Clear goal to advance within the same field')),
        (lambda r: _has(r, 'careerProgression', 'field_switch'),
         CareerInsight('Career Progression', 'Career Transitioner',
                       "You're ready to pivot to a new field, bringing valuable transferable skills and experience.",
                       'RefreshCw', 'bg-yellow-500', 78,
                       'Interest in switching to a different career field')),
    ],
    [
        (lambda r: _has(r, 'workExperience', 'management'),
         CareerInsight('Professional Experience', 'Leadership Ready',
                       'You have management experience and are prepared for leadership roles in your field.',
                       'Users', 'bg-red-500', 92,
                       'Previous management and leadership experience')),
        (lambda r: _has(r, 'workExperience', 'research'),
         CareerInsight('Professional Experience', 'Research-Oriented Professional',
                       'You have research experience and are well-suited for academic or research-focused roles.',
                       'Microscope', 'bg-teal-500', 88,
                       'Previous research experience and analytical skills')),
    ],
    [
        (lambda r: _has_all(r, 'learningApproach', 'practical', 'creative'),
         CareerInsight('Learning Style', 'Hands-on Innovator',
                       'You thrive in environments where you can apply theoretical knowledge to real-world challenges while being creative.',
                       'Lightbulb', 'bg-yellow-500', 88,
                       'Strong preference for practical application and creative problem-solving')),
        (lambda r: _has(r, 'learningApproach', 'theoretical'),
         CareerInsight('Learning Style', 'Theoretical Thinker',
                       'You excel in understanding fundamental principles and building strong theoretical foundations.',
                       'Brain', 'bg-purple-500', 85,
                       'Preference for understanding fundamental theories and principles')),
    ],
    [
        (lambda r: _has(r, 'workEnvironment', 'collaborative', 'team'),
         CareerInsight('Work Environment', 'Collaborative Team Player',
                       'You excel in team settings where collaboration and shared goals drive success.',
                       'Users', 'bg-blue-500', 92,
                       'Strong preference for collaborative and team-based work environments')),
    ],
    [
        (lambda r: _has(r, 'careerValues', 'impact', 'helping_others'),
         CareerInsight('Career Values', 'Impact-Driven Professional',
                       'You prioritize making a positive difference in society through your work.',
                       'Target', 'bg-green-500', 78,
                       'Strong focus on making impact and helping others')),
    ],
    [
        (lambda r: _has(r, 'keyStrengths', 'analytical_thinking', 'problem_solving'),
         CareerInsight('Academic Strengths', 'Analytical Problem Solver',
                       'You have strong analytical and critical thinking skills that serve you well in complex problem-solving.',
                       'Brain', 'bg-indigo-500', 88,
                       'Strong analytical thinking and problem-solving capabilities')),
    ],
]


@dataclass
class ProgramTrack:
    level: str  # undergraduate | postgraduate
    trigger: Callable[[Responses], bool]
    criteria: List[str]
    template: Dict


PROGRAM_TRACKS = [
    ProgramTrack('undergraduate',
                 lambda r: _has(r, 'interestAreas', 'engineering_technology') or _has(r, 'highSchoolSubjects', 'mathematics', 'physics'),
                 ['engineering_technology', 'computer_science_it', 'mathematics'],
                 dict(id='ug_eng_1', name='Bachelor of Engineering in Computer Science', university='MIT',
                      field='Engineering & Technology', duration='4 years', location='Cambridge, MA, USA',
                      tuition='$53,790/year',
                      description='Comprehensive computer science program with strong foundation in software engineering and algorithms.',
                      highlights=['World-class faculty', 'Research opportunities', 'Industry partnerships', 'Career placement support'],
                      reasoning='Strong interest in engineering and technology, excellent performance in mathematics and physics')),
    ProgramTrack('undergraduate',
                 lambda r: _has(r, 'interestAreas', 'business_management') or _has(r, 'highSchoolSubjects', 'business_studies', 'economics'),
                 ['business_management'],
                 dict(id='ug_bus_1', name='Bachelor of Business Administration', university='University of Pennsylvania',
                      field='Business & Management', duration='4 years', location='Philadelphia, PA, USA',
                      tuition='$61,710/year',
                      description='Comprehensive business education with focus on leadership, entrepreneurship, and global business.',
                      highlights=['Wharton School prestige', 'Global network', 'Entrepreneurship focus', 'Internship opportunities'],
                      reasoning='Interest in business management and strong academic background in business studies')),
    ProgramTrack('undergraduate',
                 lambda r: _has(r, 'interestAreas', 'health_sciences') or _has(r, 'highSchoolSubjects', 'biology', 'chemistry'),
                 ['health_sciences'],
                 dict(id='ug_health_1', name='Bachelor of Science in Nursing', university='Johns Hopkins University',
                      field='Health Sciences', duration='4 years', location='Baltimore, MD, USA',
                      tuition='$58,720/year',
                      description='Preparing future nursing leaders with clinical excellence and research opportunities.',
                      highlights=['Top-ranked nursing program', 'Clinical rotations', 'Research opportunities', 'Career placement'],
                      reasoning='Strong interest in health sciences and excellent performance in biology and chemistry')),
    ProgramTrack('undergraduate',
                 lambda r: _has(r, 'interestAreas', 'arts_humanities') or _has(r, 'highSchoolSubjects', 'english_literature', 'history'),
                 ['arts_humanities'],
                 dict(id='ug_arts_1', name='Bachelor of Arts in English Literature', university='Yale University',
                      field='Arts & Humanities', duration='4 years', location='New Haven, CT, USA',
                      tuition='$59,950/year',
                      description='Explore literature, culture, and critical thinking in a rigorous academic environment.',
                      highlights=['Ivy League education', 'Small class sizes', 'Research opportunities', 'Writing intensive'],
                      reasoning='Strong interest in arts and humanities, excellent performance in English and history')),
    ProgramTrack('postgraduate',
                 lambda r: _has(r, 'careerProgression', 'same_field_advancement', 'leadership_management') or _has(r, 'workExperience', 'management'),
                 ['business_management', 'leadership_management'],
                 dict(id='pg_mba_1', name='Master of Business Administration', university='Harvard Business School',
                      field='Business & Management', duration='2 years', location='Boston, MA, USA',
                      tuition='$73,440/year',
                      description='Develop leadership skills and business acumen in a collaborative, case-based learning environment.',
                      highlights=['Global network', 'Case study method', 'Leadership development', 'Entrepreneurship focus'],
                      reasoning='Career progression goals in leadership and management, relevant work experience')),
    ProgramTrack('postgraduate',
                 lambda r: (_has(r, 'interestAreas', 'computer_science_it', 'mathematics_statistics')
                            or _has(r, 'researchInterests', 'data_science')
                            or _has(r, 'specializationGoals', 'technical_expertise')),
                 ['computer_science_it', 'mathematics_statistics', 'data_science'],
                 dict(id='pg_ds_1', name='Master of Science in Data Science', university='Stanford University',
                      field='Computer Science & Technology', duration='2 years', location='Stanford, CA, USA',
                      tuition='$58,000/year',
                      description='A comprehensive program combining statistical analysis, machine learning, and business applications.',
                      highlights=['Top-ranked program', 'Industry partnerships', 'Research opportunities', 'Career placement support'],
                      reasoning='Strong interest in computer science and mathematics, focus on technical expertise')),
    ProgramTrack('postgraduate',
                 lambda r: (_has(r, 'careerValues', 'impact')
                            or _has(r, 'interestAreas', 'law_public_policy')
                            or _has(r, 'careerProgression', 'public_service')
                            or _has(r, 'workExperience', 'public_sector')),
                 ['law_public_policy', 'impact', 'public_service'],
                 dict(id='pg_policy_1', name='Master of Public Policy', university='University of Oxford',
                      field='Public Policy & Administration', duration='1 year', location='Oxford, UK',
                      tuition='£32,000/year',
                      description='Analyze complex policy challenges and develop solutions for global impact.',
                      highlights=['International perspective', 'Policy analysis', 'Research opportunities', 'Government connections'],
                      reasoning='Strong focus on making impact and interest in public policy, relevant work experience')),
    ProgramTrack('postgraduate',
                 lambda r: (_has(r, 'interestAreas', 'engineering_technology')
                            or _has(r, 'academicBackground', 'engineering')
                            or _has(r, 'specializationGoals', 'technical_expertise')),
                 ['engineering_technology', 'technical_expertise'],
                 dict(id='pg_eng_1', name='Master of Engineering', university='MIT',
                      field='Engineering & Technology', duration='2 years', location='Cambridge, MA, USA',
                      tuition='$53,790/year',
                      description='Advanced engineering program with focus on innovation and practical application.',
                      highlights=['World-class faculty', 'Research opportunities', 'Industry connections', 'Innovation focus'],
                      reasoning='Strong interest in engineering and technology, focus on technical expertise')),
    ProgramTrack('postgraduate',
                 lambda r: (len(_get(r, 'researchInterests')) > 0
                            or _has(r, 'specializationGoals', 'research_methods')
                            or _has(r, 'workExperience', 'research')),
                 ['artificial_intelligence', 'research_methods'],
                 dict(id='pg_research_1', name='Master of Science in Artificial Intelligence',
                      university='Carnegie Mellon University', field='Computer Science & Technology',
                      duration='2 years', location='Pittsburgh, PA, USA', tuition='$49,000/year',
                      description='Advanced AI research program with focus on machine learning and robotics.',
                      highlights=['Leading AI research', 'Industry partnerships', 'Research opportunities', 'Innovation focus'],
                      reasoning='Research interests in AI and focus on research methods')),
]

VALUE_LABELS = {
    'impact': 'Making Impact',
    'financial_reward': 'Financial Success',
    'work_life_balance': 'Work-Life Balance',
    'innovation': 'Innovation',
    'autonomy': 'Independence',
    'creativity_expression': 'Creative Expression',
    'stability_security': 'Stability',
    'continuous_learning': 'Continuous Learning',
    'collaboration_teamwork': 'Collaboration',
    'recognition_prestige': 'Recognition',
    'problem_solving_challenges': 'Problem Solving',
    'helping_others': 'Helping Others',
    'travel_exploration': 'Travel & Exploration',
}

STRENGTH_LABELS = {
    'analytical_thinking': 'Analytical Thinking',
    'problem_solving': 'Problem Solving',
    'creativity': 'Creativity',
    'verbal_communication': 'Verbal Communication',
    'written_communication': 'Written Communication',
    'leadership': 'Leadership',
    'teamwork': 'Teamwork',
    'attention_detail': 'Attention to Detail',
    'time_management': 'Time Management',
    'technical_proficiency': 'Technical Proficiency',
    'adaptability': 'Adaptability',
    'research': 'Research Skills',
    'empathy': 'Empathy',
    'critical_thinking': 'Critical Thinking',
    'mathematical': 'Mathematical Skills',
    'artistic_design': 'Artistic/Design Skills',
    'practical_hands_on': 'Practical Skills',
}

GROWTH_AREAS = [
    'Public Speaking',
    'Technical Skills',
    'Industry Knowledge',
    'Networking',
    'Project Management',
    'Cross-cultural Communication',
]

# Interest area -> searchable field of study used to match catalog programs
FIELD_KEYWORDS = {
    'arts_humanities': 'Arts',
    'business_management': 'Business',
    'computer_science_it': 'Computer Science',
    'education': 'Education',
    'engineering_technology': 'Engineering',
    'health_sciences': 'Health',
    'law_public_policy': 'Law',
    'natural_sciences': 'Science',
    'social_sciences': 'Social',
    'trades_applied_sciences': 'Applied',
    'mathematics_statistics': 'Mathematics',
    'communications_media': 'Communication',
    'creative_arts_design': 'Design',
}


class Engine:
    """Rule-based recommendations derived from career quiz responses."""

    def match_score(self, responses: Responses, criteria: List[str]) -> int:
        score = 0
        interests = _get(responses, 'interestAreas')
        score += 30 * len([c for c in criteria if c in interests])
        if _has(responses, 'careerValues', 'impact', 'continuous_learning'):
            score += 20
        if _has(responses, 'workApproach', 'problem_solving', 'analytical'):
            score += 20
        if _has(responses, 'keyStrengths', 'analytical_thinking', 'problem_solving'):
            score += 20
        return min(score, 100)

    def career_insights(self, responses: Responses) -> List[CareerInsight]:
        insights = []
        for group in INSIGHT_RULES:
            for predicate, insight in group:
                if predicate(responses):
                    data = asdict(insight)
                    data['strength'] = validate_strength(insight.strength)
                    insights.append(CareerInsight(**data))
                    break
        return insights

    def program_recommendations(self, responses: Responses) -> List[ProgramRecommendation]:
        recommendations = []
        for track in PROGRAM_TRACKS:
            if not _has(responses, 'programInterest', track.level):
                continue
            if track.trigger(responses):
                recommendations.append(ProgramRecommendation(
                    match_score=self.match_score(responses, track.criteria), **track.template))
        recommendations.sort(key=lambda p: p.match_score, reverse=True)
        return recommendations[:6]

    def personality_profile(self, responses: Responses) -> PersonalityProfile:
        approach = _get(responses, 'workApproach')
        learning = _get(responses, 'learningApproach')
        values = _get(responses, 'careerValues')
        strengths = _get(responses, 'keyStrengths')
        interests = _get(responses, 'interestAreas')

        if 'collaborative' in approach and 'problem_solving' in approach:
            work_style = 'Collaborative Problem Solver'
        elif 'independent' in approach:
            work_style = 'Independent Achiever'
        elif 'leadership' in approach:
            work_style = 'Natural Leader'
        else:
            work_style = 'Adaptive Professional'

        if 'practical' in learning and 'theoretical' in learning:
            learning_type = 'Hands-on with Theoretical Foundation'
        elif 'practical' in learning:
            learning_type = 'Practical Application Focused'
        elif 'theoretical' in learning:
            learning_type = 'Theoretical Foundation Builder'
        else:
            learning_type = 'Balanced Learner'

        if 'collaborative' in approach and 'impact' in values:
            personality = 'Social Impact Leader'
        elif 'analytical_thinking' in strengths and 'computer_science_it' in interests:
            personality = 'Analytical Technologist'
        elif 'financial_reward' in values and 'results_oriented' in approach:
            personality = 'Results-Driven Professional'
        else:
            personality = 'Balanced Professional'

        return PersonalityProfile(
            work_style=work_style,
            learning_approach=learning_type,
            career_values=[VALUE_LABELS.get(v, v) for v in values[:4]],
            strengths=[STRENGTH_LABELS.get(s, s) for s in strengths[:4]],
            growth_areas=list(GROWTH_AREAS),
            personality_type=personality,
        )

    def career_paths(self, responses: Responses) -> List[CareerPath]:
        paths = []
        if _has(responses, 'interestAreas', 'computer_science_it'):
            paths.append(CareerPath(
                'Data Scientist',
                'Analyze complex data to help organizations make informed decisions.',
                90,
                ['Statistics', 'Programming', 'Machine Learning', 'Business Acumen'],
                ['Tech Companies', 'Consulting', 'Research', 'Startups'],
                '$95,000 - $150,000'))
        if _has(responses, 'interestAreas', 'business_management'):
            paths.append(CareerPath(
                'Business Consultant',
                'Help organizations improve their performance and solve business challenges.',
                85,
                ['Business Strategy', 'Analytical Skills', 'Communication', 'Problem Solving'],
                ['Consulting Firms', 'Corporations', 'Non-profits', 'Entrepreneurship'],
                '$80,000 - $130,000'))
        if _has(responses, 'careerValues', 'impact') and _has(responses, 'interestAreas', 'health_sciences'):
            paths.append(CareerPath(
                'Public Health Professional',
                'Improve community health through research, policy, and program development.',
                88,
                ['Epidemiology', 'Biostatistics', 'Health Policy', 'Research Methods'],
                ['Government', 'NGOs', 'Healthcare Organizations', 'Research Institutions'],
                '$60,000 - $100,000'))
        paths.sort(key=lambda p: p.match_score, reverse=True)
        return paths

    def recommend(self, responses: Responses) -> Dict:
        return {
            "career_insights": [asdict(i) for i in self.career_insights(responses)],
            "program_recommendations": [asdict(p) for p in self.program_recommendations(responses)],
            "personality_profile": asdict(self.personality_profile(responses)),
            "career_paths": [asdict(c) for c in self.career_paths(responses)],
        }

    def career_preferences(self, responses: Responses) -> Dict:
        # Summary stored on the user and used to match catalog programs
        profile = self.personality_profile(responses)
        interests = _get(responses, 'interestAreas')
        fields = []
        for interest in interests:
            keyword = FIELD_KEYWORDS.get(interest)
            if keyword and keyword not in fields:
                fields.append(keyword)
        return {
            "recommended_fields": fields,
            "primary_interests": interests,
            "personality_traits": [profile.personality_type],
            "work_style": [profile.work_style],
            "academic_strengths": profile.strengths,
            "skill_gaps": profile.growth_areas[:3],
            "career_goals": profile.career_values,
        }
