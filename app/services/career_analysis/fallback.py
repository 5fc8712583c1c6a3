"""
Deterministic career analysis used when the AI path fails.

Produces the same structure as the AI analysis so downstream consumers never
need to know which path produced it.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

FALLBACK_MODEL = "fallback-analysis"

RIASEC_TRAITS = (
    ("realistic", "Realistic"),
    ("investigative", "Investigative"),
    ("artistic", "Artistic"),
    ("social", "Social"),
    ("enterprising", "Enterprising"),
    ("conventional", "Conventional"),
)

TRAIT_DESCRIPTIONS = {
    "Realistic": "you enjoy hands-on, practical tasks and prefer working with tangible results",
    "Investigative": "you enjoy research, analysis and solving complex problems",
    "Artistic": "you enjoy creative expression and original, unstructured work",
    "Social": "you enjoy helping, teaching and working closely with people",
    "Enterprising": "you enjoy leading, persuading and driving initiatives",
    "Conventional": "you enjoy organised work, detail and well-defined systems",
}

CAREER_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "Realistic": {
        "title": "Engineering & Technology",
        "description": "Work with machines, tools, and physical objects in technical fields",
        "requiredEducation": "B.Tech / B.E. in an engineering discipline",
        "entranceExams": ["JEE Main", "JEE Advanced", "BITSAT"],
        "topColleges": ["IIT Delhi", "IIT Bombay", "NIT Trichy"],
    },
    "Investigative": {
        "title": "Research & Sciences",
        "description": "Conduct research, analyze data, and solve complex problems",
        "requiredEducation": "B.Sc / MBBS followed by postgraduate research",
        "entranceExams": ["NEET", "IISER Aptitude Test", "IISc Entrance"],
        "topColleges": ["IISc Bangalore", "AIIMS Delhi", "TIFR Mumbai"],
    },
    "Artistic": {
        "title": "Creative Arts & Design",
        "description": "Express creativity through art, design, and media",
        "requiredEducation": "B.Des / BFA / B.A. in Mass Communication",
        "entranceExams": ["NIFT", "NID DAT", "UCEED"],
        "topColleges": ["NID Ahmedabad", "NIFT Delhi", "IIT Bombay (Design)"],
    },
    "Social": {
        "title": "Social Services & Education",
        "description": "Help others, teach, and work in community development",
        "requiredEducation": "B.A. / B.Ed / BSW, MSW for specialist roles",
        "entranceExams": ["CUET", "TISS NET"],
        "topColleges": ["Delhi University", "JNU", "TISS Mumbai"],
    },
    "Enterprising": {
        "title": "Business & Management",
        "description": "Lead teams, manage businesses, and drive growth",
        "requiredEducation": "BBA / B.Com followed by an MBA",
        "entranceExams": ["IPMAT", "CAT", "XAT"],
        "topColleges": ["IIM Ahmedabad", "XLRI Jamshedpur", "FMS Delhi"],
    },
    "Conventional": {
        "title": "Finance & Administration",
        "description": "Organize data, manage systems, and ensure accuracy",
        "requiredEducation": "B.Com with CA / CS / CMA certification",
        "entranceExams": ["CA Foundation", "CS Executive Entrance", "CUET"],
        "topColleges": ["SRCC Delhi", "St. Xavier's Mumbai", "Loyola College Chennai"],
    },
}

INTERDISCIPLINARY_TEMPLATE = {
    "title": "Interdisciplinary Fields",
    "description": "Combine multiple interests for unique career paths",
    "requiredEducation": "Liberal arts or dual-degree programmes",
    "entranceExams": ["CUET", "Various competitive exams"],
    "topColleges": ["Ashoka University", "Leading universities nationwide"],
}

STREAM_SUBJECTS = {
    "Science (PCM)": {
        "core": ["Physics", "Chemistry", "Mathematics"],
        "electives": ["Computer Science", "English"],
    },
    "Science": {
        "core": ["Physics", "Chemistry", "Biology"],
        "electives": ["Mathematics", "Psychology"],
    },
    "Commerce": {
        "core": ["Accountancy", "Business Studies", "Economics"],
        "electives": ["Mathematics", "Informatics Practices"],
    },
    "Arts/Humanities": {
        "core": ["History", "Political Science", "Psychology"],
        "electives": ["Sociology", "Fine Arts"],
    },
}

ALL_STREAMS = ("Science (PCM)", "Science", "Commerce", "Arts/Humanities")

MATCH_SCORES = (95, 85, 75)


def rank_riasec(interest: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """RIASEC traits by score, highest first; ties keep declaration order"""
    interest = interest or {}
    ranked = [{"name": name, "score": interest.get(key) or 0} for key, name in RIASEC_TRAITS]
    # sorted() is stable
    return sorted(ranked, key=lambda trait: trait["score"], reverse=True)


def recommend_stream(scores: Dict[str, Dict[str, Any]]) -> str:
    aptitude = scores.get("aptitude") or {}
    academic = scores.get("academic") or {}
    interest = scores.get("interest") or {}

    numerical = aptitude.get("numerical") or 0
    if numerical > 65 and (academic.get("mathematics") or 0) > 65:
        return "Science (PCM)"
    if numerical > 60 and (interest.get("conventional") or 0) > 60:
        return "Commerce"
    if (interest.get("artistic") or 0) > 70 or (interest.get("social") or 0) > 70:
        return "Arts/Humanities"
    return "Science"


def career_paths_for(dominant: str, secondary: str) -> List[Dict[str, Any]]:
    templates = [
        CAREER_TEMPLATES.get(dominant, CAREER_TEMPLATES["Realistic"]),
        CAREER_TEMPLATES.get(secondary, CAREER_TEMPLATES["Investigative"]),
        INTERDISCIPLINARY_TEMPLATE,
    ]
    return [
        {**template, "ranking": ranking, "matchScore": match}
        for ranking, (template, match) in enumerate(zip(templates, MATCH_SCORES), start=1)
    ]


def generate_fallback_analysis(
    scores: Optional[Dict[str, Dict[str, Any]]],
    profile: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a career analysis from the scores alone.

    Args:
        scores: The four score maps of a completed assessment
        profile: Student profile (name, class, age); only the name is used

    Returns:
        Analysis dict with the same keys as an AI-generated one
    """
    scores = scores or {}
    name = (profile or {}).get("name") or "Student"
    ranked = rank_riasec(scores.get("interest"))
    dominant, secondary, third = (trait["name"] for trait in ranked[:3])
    stream = recommend_stream(scores)
    interest = scores.get("interest") or {}

    return {
        "summary": (
            f"{name}, your assessment shows strong {dominant} and {secondary} traits. "
            f"Based on your aptitude and interests, the {stream} stream is recommended."
        ),
        "riasecProfile": {
            "dominantType": dominant,
            "secondaryType": secondary,
            "topTraits": [dominant, secondary, third],
            "scores": {key: interest.get(key) or 0 for key, _ in RIASEC_TRAITS},
            "description": f"As a {dominant} type, {TRAIT_DESCRIPTIONS[dominant]}.",
        },
        "recommendedStream": {
            "primary": stream,
            "reasoning": (
                f"Your aptitude scores and {dominant.lower()} interests align best "
                f"with the subjects of the {stream} stream."
            ),
            "alternatives": [s for s in ALL_STREAMS if s != stream][:2],
        },
        "subjectRecommendations": STREAM_SUBJECTS[stream],
        "careerPaths": career_paths_for(dominant, secondary),
        "strengths": [
            f"Strong {dominant.lower()} orientation",
            f"Good {secondary.lower()} skills",
            "Aptitude for problem-solving",
        ],
        "developmentAreas": [
            "Explore diverse learning opportunities",
            "Develop communication and teamwork skills",
        ],
        "actionPlan": {
            "immediate": [
                "Research career options in your recommended stream",
                "Talk to professionals in fields of interest",
            ],
            "shortTerm": [
                "Choose subjects aligned with your career goals",
                "Join relevant clubs or activities",
            ],
            "longTerm": [
                "Plan your higher education path",
                "Build a portfolio of projects",
            ],
        },
        "resources": {
            "books": ["What Color Is Your Parachute? for Teens"],
            "websites": ["https://www.careers360.com", "https://www.shiksha.com"],
            "courses": ["SWAYAM career readiness courses"],
        },
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "modelUsed": FALLBACK_MODEL,
    }
