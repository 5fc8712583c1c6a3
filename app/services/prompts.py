import json
from typing import Any, Dict, Iterable, List, Optional

from app.services.assessment_engine.scoring import SCORE_KEYS

CAREER_ANALYSIS_SYSTEM_PROMPT = """You are an expert career counselor specializing in the Indian education system. Analyze the following student assessment results and provide detailed, personalized career guidance."""

CAREER_ANALYSIS_RESPONSE_SHAPE = """{
  "summary": "A 2-3 sentence overview of the student's strengths and potential",
  "riasecProfile": {
    "dominantType": "The highest RIASEC type (Realistic/Investigative/Artistic/Social/Enterprising/Conventional)",
    "description": "What this means for their career interests"
  },
  "recommendedStream": {
    "primary": "Science (PCM) OR Science (PCB) OR Commerce OR Arts/Humanities",
    "reasoning": "Why this stream suits them best (2-3 sentences)",
    "alternatives": ["Alternative stream 1", "Alternative stream 2"]
  },
  "subjectRecommendations": {
    "core": ["Subject 1", "Subject 2", "Subject 3"],
    "electives": ["Elective 1", "Elective 2"]
  },
  "careerPaths": [
    {
      "title": "Career Option 1",
      "ranking": 1,
      "matchScore": 95,
      "description": "Brief description",
      "requiredEducation": "Degree/qualification needed",
      "entranceExams": ["Exam 1", "Exam 2"],
      "topColleges": ["College 1", "College 2"]
    }
  ],
  "strengths": ["Key strength 1", "Key strength 2", "Key strength 3"],
  "developmentAreas": ["Area to improve 1", "Area to improve 2"],
  "actionPlan": {
    "immediate": ["Action step 1", "Action step 2"],
    "shortTerm": ["6-month goal 1", "6-month goal 2"],
    "longTerm": ["1-year+ goal 1", "1-year+ goal 2"]
  },
  "resources": {
    "books": ["Recommended book 1"],
    "websites": ["Useful website 1"],
    "courses": ["Online course 1"]
  }
}"""

RIASEC_DESCRIPTIONS = {
    "realistic": "Hands-on, practical work",
    "investigative": "Research, analysis",
    "artistic": "Creative expression",
    "social": "Helping people",
    "enterprising": "Leadership, business",
    "conventional": "Organization, detail",
}

SECTION_TITLES = {
    "interest": "RIASEC Career Interests",
    "aptitude": "Aptitude Scores",
    "personality": "Big Five Personality Traits",
    "academic": "Academic Profile",
}


def _label(key: str) -> str:
    return key.replace("_", " ").title()


def _score_lines(group: str, values: Dict[str, Any]) -> Iterable[str]:
    for key in SCORE_KEYS[group]:
        line = f"   - {_label(key)}: {values.get(key, 0) or 0}/100"
        if group == "interest":
            line += f" - {RIASEC_DESCRIPTIONS[key]}"
        yield line


def build_career_analysis_prompt(scores: Dict[str, Dict[str, Any]], profile: Dict[str, Any]) -> str:
    """Prompt embedding every score map and the student's profile"""
    sections: List[str] = []
    for number, group in enumerate(SCORE_KEYS, start=1):
        lines = "\n".join(_score_lines(group, (scores or {}).get(group) or {}))
        sections.append(f"{number}. **{SECTION_TITLES[group]}:**\n{lines}")

    return f"""{CAREER_ANALYSIS_SYSTEM_PROMPT}

**STUDENT PROFILE:**
- Name: {profile.get("name") or "Student"}
- Class/Grade: {profile.get("class") or "10th/12th"}
- Age: {profile.get("age") or "15-18"}

**ASSESSMENT SCORES:**

{chr(10).join(sections)}

**TASK:**
Based on these scores, provide a comprehensive career analysis in **JSON format only** with the following structure:

{CAREER_ANALYSIS_RESPONSE_SHAPE}

**IMPORTANT:**
- Include at least 3 career paths ranked by match score
- Focus on Indian education system (CBSE/ICSE/State boards)
- Mention relevant entrance exams (JEE, NEET, CLAT, CA, etc.)
- Suggest realistic career paths available in India
- Be encouraging but honest about strengths and areas for improvement
- Return ONLY valid JSON, no additional text before or after

Provide the complete JSON response now:"""


def build_chat_system_prompt(context: Optional[Dict[str, Any]], user: Dict[str, Any]) -> str:
    """System prompt grounding chat replies in the stored assessment snapshot"""
    context = context or {}
    subjects = user.get("subjects") or []
    prompt = f"""You are an expert career counselor and guidance assistant for Indian students. Your role is to provide personalized, actionable career advice based on the student's assessment results and profile.

**User Profile:**
- Name: {user.get("name") or "Student"}
- Current Grade: {user.get("current_grade") or "Not specified"}
- Stream: {user.get("stream") or "Not specified"}
- Subjects: {", ".join(subjects) if subjects else "Not specified"}
"""

    if context.get("assessment_results"):
        prompt += "\n**Assessment Results:**"
        interests = context.get("career_interests") or []
        if interests:
            prompt += f"\n- Career Interests (RIASEC): {', '.join(interests)}"
        aptitudes = context.get("aptitude_scores") or {}
        if aptitudes:
            prompt += "\n- Aptitude Scores:"
            for skill, score in aptitudes.items():
                prompt += f"\n  * {skill}: {score}/100"
    else:
        prompt += "\n**Note:** This student hasn't completed their career assessment yet. Encourage them to take the assessment for more personalized guidance."

    prompt += """

**Guidelines:**
1. Provide specific, actionable advice tailored to the Indian education system
2. Reference their assessment results when giving recommendations
3. Suggest relevant courses, colleges, entrance exams and career paths in India
4. Be encouraging and supportive
5. Format responses with markdown for readability
6. Keep responses focused and under 500 words unless detailed analysis is requested"""
    return prompt


OPPORTUNITY_SYSTEM_PROMPT = "You are an expert Indian education and scholarship advisor. Always return valid JSON."

OPPORTUNITY_RESPONSE_SHAPE = """{
  "scholarships": [
    {
      "type": "Merit Based | Need Based | STEM | Research | Minority",
      "name": "Specific Indian scholarship name (real scholarships only)",
      "eligibility": "Clear criteria",
      "estimatedAmount": "Amount range in INR or Full Tuition",
      "matchPercentage": 85,
      "applicationLink": "Official website or 'Contact institution'"
    }
  ],
  "higherEducation": [
    {
      "program": "Degree or course name",
      "duration": "X years",
      "topColleges": ["College 1", "College 2"],
      "careerOutcomes": ["Role 1", "Role 2"],
      "matchPercentage": 90,
      "eligibility": "Requirements and entrance exams"
    }
  ],
  "careerPaths": [
    {
      "title": "Career title",
      "description": "2-3 sentence description",
      "requiredSkills": ["Skill 1", "Skill 2", "Skill 3"],
      "salaryRange": "Realistic Indian range in LPA",
      "growthPotential": "High | Medium | Moderate",
      "matchPercentage": 88,
      "industryDemand": "Growing | Stable | Emerging"
    }
  ],
  "skillDevelopment": [
    {
      "category": "Programming | Management | Research | Communication | etc",
      "skills": ["Skill 1", "Skill 2"],
      "resources": ["Free or affordable resource 1"],
      "priority": "High | Medium | Low",
      "estimatedTime": "X months to achieve proficiency"
    }
  ],
  "confidenceScore": 85
}"""


def describe_education_status(form: Dict[str, Any]) -> str:
    level = form.get("education_level")
    status = form.get("education_status")
    academic = form.get("academic_data") or {}
    if level in ("10th Pass", "12th Pass"):
        return f"Has completed {level}"
    if status == "Currently Studying":
        return f"Currently studying {level} - {academic.get('semestersCompleted') or 'N/A'} semester(s) completed"
    if status == "Completed":
        return f"Completed {level} in {academic.get('passingYear') or 'recent years'}"
    return str(level)


def describe_academic_performance(academic: Dict[str, Any]) -> str:
    if academic.get("percentage"):
        return f"Percentage: {academic['percentage']}%"
    if academic.get("currentCGPA"):
        return f"Current CGPA: {academic['currentCGPA']}/10"
    if academic.get("finalCGPA"):
        return f"Final CGPA: {academic['finalCGPA']}/10"
    return ""


def build_opportunity_prompt(student: Dict[str, Any], form: Dict[str, Any], insights: Optional[Dict[str, Any]]) -> str:
    """Prompt for scholarship, higher-education, career and skill recommendations"""
    academic = form.get("academic_data") or {}
    if insights:
        assessment_section = (
            f"RIASEC Personality Types: {', '.join(insights.get('top_types') or []) or 'N/A'}\n"
            f"Top Career Match: {insights.get('top_career') or 'N/A'}\n"
            f"Strengths: {', '.join(insights.get('strengths') or []) or 'N/A'}"
        )
    else:
        assessment_section = "No assessment completed yet"

    status_line = f"Education Status: {form['education_status']}\n" if form.get("education_status") else ""

    return f"""You are an Indian education and career opportunity advisor specializing in scholarships, higher education, and career planning.

**STUDENT PROFILE:**
Name: {student.get("name") or "Student"}
Current Grade: {student.get("current_grade") or "Not specified"}
Stream: {student.get("stream") or "Not specified"}

**CURRENT ACADEMIC STATUS:**
{describe_education_status(form)}
{describe_academic_performance(academic)}

**OPPORTUNITY ANALYSIS REQUEST:**
Education Level: {form.get("education_level")}
{status_line}Family Annual Income: {form.get("family_income")}
Career Interest: {form.get("career_interest")}

**DETAILED ACADEMIC DATA:**
{json.dumps(academic, indent=2, sort_keys=True)}

**ASSESSMENT INSIGHTS:**
{assessment_section}

**TASK:**
Generate personalized opportunity recommendations in this EXACT JSON format:

{OPPORTUNITY_RESPONSE_SHAPE}

**GUIDELINES:**
1. Scholarships: real Indian schemes (INSPIRE, NSP, Merit-cum-Means, state and corporate scholarships). Weigh family income for need-based schemes.
2. Higher education: the realistic next step for the current level (stream choice after 10th, bachelor programs and entrance exams after 12th, lateral entry after a diploma, master's entrance exams during or after a bachelor's, PhD after a master's).
3. Career paths: 4-5 careers aligned with academics and interests, with realistic Indian salary ranges for the current level.
4. Skills: practical skills with free or affordable resources available in India (NPTEL, Coursera, YouTube).
5. Match percentages rise with academic performance, interest alignment, assessment results and semesters completed.
6. Confidence score: 90-100 with an assessment and detailed academics, 70-89 with either, 50-69 with basic information only.

Return ONLY valid JSON. No markdown. No explanations outside JSON."""
