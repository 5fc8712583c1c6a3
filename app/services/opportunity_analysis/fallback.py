"""
Deterministic opportunity recommendations used when the AI path fails.

Built from fixed tables keyed by education level, family income and career
interest, in the same four sections the AI returns.
"""
from typing import Any, Dict, List, Optional

NEED_BASED_INCOMES = ("Below 2 Lakhs", "2-5 Lakhs")

STREAM_FOR_INTEREST = {
    "Technical": "Science (PCM)",
    "Research": "Science (PCM/PCB)",
    "Management": "Commerce",
    "Creative": "Arts/Humanities",
    "Government Jobs": "Arts/Humanities",
    "Business": "Commerce",
}

BACHELOR_PROGRAMS: Dict[str, Dict[str, Any]] = {
    "Technical": {
        "program": "B.Tech / B.E.",
        "duration": "4 years",
        "topColleges": ["IIT Bombay", "NIT Trichy", "BITS Pilani"],
        "careerOutcomes": ["Software Engineer", "Design Engineer"],
        "eligibility": "12th with PCM; JEE Main / JEE Advanced / BITSAT",
    },
    "Research": {
        "program": "BS-MS / B.Sc (Research)",
        "duration": "4-5 years",
        "topColleges": ["IISc Bangalore", "IISER Pune", "NISER Bhubaneswar"],
        "careerOutcomes": ["Research Scientist", "Data Scientist"],
        "eligibility": "12th with Science; IISER Aptitude Test / IISc entrance",
    },
    "Management": {
        "program": "BBA / BMS",
        "duration": "3 years",
        "topColleges": ["Shaheed Sukhdev College", "NMIMS Mumbai", "Christ University"],
        "careerOutcomes": ["Business Analyst", "Operations Executive"],
        "eligibility": "12th in any stream; CUET / IPMAT / university entrance",
    },
    "Creative": {
        "program": "B.Des",
        "duration": "4 years",
        "topColleges": ["NID Ahmedabad", "NIFT Delhi", "IIT Bombay (IDC)"],
        "careerOutcomes": ["UX Designer", "Product Designer"],
        "eligibility": "12th in any stream; NID DAT / NIFT / UCEED",
    },
    "Government Jobs": {
        "program": "B.A. (Political Science / Public Administration)",
        "duration": "3 years",
        "topColleges": ["St. Stephen's College", "Hindu College", "Presidency University"],
        "careerOutcomes": ["Civil Services Officer", "Policy Analyst"],
        "eligibility": "12th in any stream; CUET",
    },
    "Business": {
        "program": "B.Com (Hons)",
        "duration": "3 years",
        "topColleges": ["SRCC Delhi", "St. Xavier's College Mumbai", "Loyola College Chennai"],
        "careerOutcomes": ["Chartered Accountant", "Financial Analyst"],
        "eligibility": "12th with Commerce preferred; CUET",
    },
}

MASTER_PROGRAMS: Dict[str, Dict[str, Any]] = {
    "Technical": {
        "program": "M.Tech",
        "duration": "2 years",
        "topColleges": ["IIT Delhi", "IIT Madras", "IISc Bangalore"],
        "careerOutcomes": ["Senior Engineer", "R&D Engineer"],
        "eligibility": "B.Tech / B.E.; GATE",
    },
    "Research": {
        "program": "M.Sc",
        "duration": "2 years",
        "topColleges": ["IIT Bombay", "IISc Bangalore", "University of Hyderabad"],
        "careerOutcomes": ["Research Associate", "Data Scientist"],
        "eligibility": "B.Sc in a related subject; IIT JAM / CUET PG",
    },
    "Management": {
        "program": "MBA",
        "duration": "2 years",
        "topColleges": ["IIM Ahmedabad", "IIM Bangalore", "XLRI Jamshedpur"],
        "careerOutcomes": ["Product Manager", "Management Consultant"],
        "eligibility": "Any bachelor's degree; CAT / XAT",
    },
    "Creative": {
        "program": "M.Des",
        "duration": "2 years",
        "topColleges": ["IIT Bombay (IDC)", "NID Ahmedabad", "IIT Delhi"],
        "careerOutcomes": ["Design Lead", "Interaction Designer"],
        "eligibility": "Bachelor's degree; CEED / NID DAT (M.Des)",
    },
    "Government Jobs": {
        "program": "M.A. Public Policy",
        "duration": "2 years",
        "topColleges": ["TISS Mumbai", "JNU", "Azim Premji University"],
        "careerOutcomes": ["Civil Services Officer", "Policy Researcher"],
        "eligibility": "Any bachelor's degree; university entrance",
    },
    "Business": {
        "program": "MBA (Finance)",
        "duration": "2 years",
        "topColleges": ["IIM Calcutta", "FMS Delhi", "JBIMS Mumbai"],
        "careerOutcomes": ["Investment Analyst", "Finance Manager"],
        "eligibility": "Any bachelor's degree; CAT / CMAT",
    },
}

LATERAL_ENTRY = {
    "program": "B.Tech (Lateral Entry)",
    "duration": "3 years",
    "topColleges": ["State government engineering colleges", "NITs (select seats)", "Deemed universities"],
    "careerOutcomes": ["Graduate Engineer Trainee", "Site Engineer"],
    "eligibility": "Diploma in engineering; state lateral-entry exam",
}

DOCTORAL_PROGRAM = {
    "program": "PhD",
    "duration": "3-5 years",
    "topColleges": ["IISc Bangalore", "IIT Bombay", "TIFR Mumbai"],
    "careerOutcomes": ["Professor", "Research Scientist"],
    "eligibility": "Master's degree; UGC NET / CSIR NET / GATE",
}

CAREERS_FOR_INTEREST: Dict[str, List[Dict[str, Any]]] = {
    "Technical": [
        {"title": "Software Engineer", "description": "Design, build and maintain software systems.",
         "requiredSkills": ["Programming", "Data Structures", "System Design"],
         "growthPotential": "High", "industryDemand": "Growing"},
        {"title": "Data Analyst", "description": "Turn raw data into reports and business insight.",
         "requiredSkills": ["SQL", "Python", "Statistics"],
         "growthPotential": "High", "industryDemand": "Growing"},
    ],
    "Research": [
        {"title": "Research Scientist", "description": "Run experiments and publish findings in a chosen field.",
         "requiredSkills": ["Research Methods", "Scientific Writing", "Data Analysis"],
         "growthPotential": "Medium", "industryDemand": "Stable"},
        {"title": "Data Scientist", "description": "Build statistical and machine-learning models from data.",
         "requiredSkills": ["Python", "Machine Learning", "Statistics"],
         "growthPotential": "High", "industryDemand": "Emerging"},
    ],
    "Management": [
        {"title": "Operations Manager", "description": "Plan and improve how an organisation delivers its work.",
         "requiredSkills": ["Planning", "Leadership", "Process Improvement"],
         "growthPotential": "Medium", "industryDemand": "Stable"},
        {"title": "Product Manager", "description": "Own what a product team builds and why.",
         "requiredSkills": ["Communication", "Prioritisation", "User Research"],
         "growthPotential": "High", "industryDemand": "Growing"},
    ],
    "Creative": [
        {"title": "UX Designer", "description": "Shape how people experience apps and websites.",
         "requiredSkills": ["User Research", "Wireframing", "Figma"],
         "growthPotential": "High", "industryDemand": "Growing"},
        {"title": "Content Creator", "description": "Produce writing, video or design for digital audiences.",
         "requiredSkills": ["Storytelling", "Video Editing", "Social Media"],
         "growthPotential": "Moderate", "industryDemand": "Emerging"},
    ],
    "Government Jobs": [
        {"title": "Civil Services Officer", "description": "Administer public policy through the IAS, IPS or allied services.",
         "requiredSkills": ["General Studies", "Essay Writing", "Current Affairs"],
         "growthPotential": "High", "industryDemand": "Stable"},
        {"title": "Public Sector Bank Officer", "description": "Manage banking operations in a public sector bank.",
         "requiredSkills": ["Quantitative Aptitude", "Reasoning", "Banking Awareness"],
         "growthPotential": "Medium", "industryDemand": "Stable"},
    ],
    "Business": [
        {"title": "Chartered Accountant", "description": "Handle audit, taxation and financial advice.",
         "requiredSkills": ["Accounting", "Taxation", "Auditing"],
         "growthPotential": "High", "industryDemand": "Stable"},
        {"title": "Entrepreneur", "description": "Start and grow a business around an unmet need.",
         "requiredSkills": ["Sales", "Financial Planning", "Networking"],
         "growthPotential": "High", "industryDemand": "Emerging"},
    ],
}

SKILLS_FOR_INTEREST: Dict[str, Dict[str, Any]] = {
    "Technical": {"category": "Programming", "skills": ["Python", "Data Structures", "Git"],
                  "resources": ["NPTEL Programming in Python", "CS50 (free online)", "GeeksforGeeks"],
                  "estimatedTime": "6 months to achieve proficiency"},
    "Research": {"category": "Research", "skills": ["Research Methods", "Statistics", "Scientific Writing"],
                 "resources": ["NPTEL research methodology courses", "Coursera audit tracks", "Khan Academy Statistics"],
                 "estimatedTime": "6 months to achieve proficiency"},
    "Management": {"category": "Management", "skills": ["Project Planning", "Excel", "Leadership"],
                   "resources": ["NPTEL management courses", "Coursera audit tracks", "Microsoft Learn Excel"],
                   "estimatedTime": "4 months to achieve proficiency"},
    "Creative": {"category": "Design", "skills": ["Figma", "Visual Design", "Portfolio Building"],
                 "resources": ["Figma Learn", "YouTube design channels", "Behance portfolios"],
                 "estimatedTime": "5 months to achieve proficiency"},
    "Government Jobs": {"category": "Exam Preparation", "skills": ["General Studies", "Current Affairs", "Answer Writing"],
                        "resources": ["NCERT textbooks", "PIB and newspaper summaries", "Previous year papers"],
                        "estimatedTime": "12 months of steady preparation"},
    "Business": {"category": "Finance", "skills": ["Accounting", "Financial Modelling", "Excel"],
                 "resources": ["ICAI study material", "NPTEL finance courses", "YouTube Excel tutorials"],
                 "estimatedTime": "6 months to achieve proficiency"},
}

COMMUNICATION_SKILLS = {
    "category": "Communication",
    "skills": ["Spoken English", "Presentation", "Professional Writing"],
    "resources": ["British Council LearnEnglish", "Toastmasters clubs", "NPTEL soft skills courses"],
    "priority": "Medium",
    "estimatedTime": "3 months to achieve proficiency",
}


def salary_range(level: str, status: Optional[str]) -> str:
    if level in ("10th Pass", "12th Pass"):
        return "₹2 - ₹5 LPA"
    if level == "Diploma":
        return "₹3 - ₹6 LPA"
    if level == "Bachelor Degree":
        return "₹4 - ₹10 LPA after graduation" if status == "Currently Studying" else "₹3 - ₹8 LPA"
    return "₹8 - ₹20 LPA"


def academic_score(academic: Dict[str, Any]) -> Optional[float]:
    """Academic performance on a 0-100 scale from a percentage or a 10-point CGPA"""
    for key, scale in (("percentage", 1), ("currentCGPA", 10), ("finalCGPA", 10)):
        value = academic.get(key)
        if value in (None, ""):
            continue
        try:
            return min(float(value) * scale, 100.0)
        except (TypeError, ValueError):
            continue
    return None


def base_match(academic: Dict[str, Any], has_assessment: bool) -> int:
    score = academic_score(academic)
    base = 70 if score is None else int(60 + score * 0.3)
    if has_assessment:
        base += 5
    return max(50, min(base, 95))


def confidence_for(academic: Dict[str, Any], has_assessment: bool) -> int:
    """Completeness of the inputs: 90 with assessment and detailed academics, 75 with either, 60 otherwise"""
    detailed = len([v for v in academic.values() if v not in (None, "")]) >= 3
    if has_assessment and detailed:
        return 90
    if has_assessment or detailed:
        return 75
    return 60


def _scholarships(form: Dict[str, Any], match: int) -> List[Dict[str, Any]]:
    interest = form["career_interest"]
    scholarships = []
    if form["family_income"] in NEED_BASED_INCOMES:
        scholarships.append({
            "type": "Need Based",
            "name": "National Scholarship Portal (NSP) schemes",
            "eligibility": "Family income within the scheme limit; check central and state schemes on NSP",
            "estimatedAmount": "Varies by scheme",
            "matchPercentage": min(match + 10, 98),
            "applicationLink": "https://scholarships.gov.in",
        })
    if interest in ("Technical", "Research"):
        scholarships.append({
            "type": "STEM",
            "name": "INSPIRE Scholarship for Higher Education (SHE)",
            "eligibility": "Top performers in Class 12 pursuing natural and basic sciences",
            "estimatedAmount": "Annual scholarship plus mentorship grant",
            "matchPercentage": match,
            "applicationLink": "https://online-inspire.gov.in",
        })
    scholarships.append({
        "type": "Merit Based",
        "name": "State merit scholarships",
        "eligibility": "Strong academic record as defined by your state",
        "estimatedAmount": "Varies by state",
        "matchPercentage": max(match - 5, 50),
        "applicationLink": "Contact your state scholarship portal",
    })
    return scholarships


def _higher_education(form: Dict[str, Any], match: int) -> List[Dict[str, Any]]:
    level = form["education_level"]
    interest = form["career_interest"]
    if level == "10th Pass":
        programs = [
            {
                "program": f"Class 11-12 in {STREAM_FOR_INTEREST[interest]}",
                "duration": "2 years",
                "topColleges": ["Kendriya Vidyalayas", "Jawahar Navodaya Vidyalayas", "State board schools"],
                "careerOutcomes": [p["title"] for p in CAREERS_FOR_INTEREST[interest]],
                "eligibility": "Class 10 pass",
            },
            BACHELOR_PROGRAMS[interest],
        ]
    elif level == "12th Pass":
        programs = [BACHELOR_PROGRAMS[interest]]
    elif level == "Diploma":
        programs = [LATERAL_ENTRY]
        if form.get("education_status") == "Completed":
            programs.append(BACHELOR_PROGRAMS[interest])
    elif level == "Bachelor Degree":
        programs = [MASTER_PROGRAMS[interest]]
    else:
        programs = [DOCTORAL_PROGRAM]
    return [dict(program, matchPercentage=max(match - 5 * rank, 50)) for rank, program in enumerate(programs)]


def generate_fallback_opportunities(form: Dict[str, Any], insights: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Rule-based opportunity recommendations.

    Args:
        form: Validated form (education_level, education_status, family_income,
            career_interest, academic_data)
        insights: Latest completed assessment summary, if any

    Returns:
        {"recommendations": {section: [...]}, "confidence_score": int}
    """
    academic = form.get("academic_data") or {}
    has_assessment = bool(insights)
    match = base_match(academic, has_assessment)
    salary = salary_range(form["education_level"], form.get("education_status"))
    interest = form["career_interest"]

    career_paths = [
        dict(career, salaryRange=salary, matchPercentage=max(match - 5 * rank, 50))
        for rank, career in enumerate(CAREERS_FOR_INTEREST[interest])
    ]
    skills = [dict(SKILLS_FOR_INTEREST[interest], priority="High"), dict(COMMUNICATION_SKILLS)]

    return {
        "recommendations": {
            "scholarships": _scholarships(form, match),
            "higherEducation": _higher_education(form, match),
            "careerPaths": career_paths,
            "skillDevelopment": skills,
        },
        "confidence_score": confidence_for(academic, has_assessment),
    }
