"""
Assessment Constants

Question table, Likert scale, major catalog and fixed validation settings.
All values are static reference data.
"""

from typing import Dict, List, Tuple

# =============================================================================
# RIASEC CATEGORIES
# =============================================================================

RIASEC_CATEGORIES: Tuple[str, ...] = (
    "realistic",
    "investigative",
    "artistic",
    "social",
    "enterprising",
    "conventional",
)

CATEGORY_CODES: Dict[str, str] = {
    "R": "realistic",
    "I": "investigative",
    "A": "artistic",
    "S": "social",
    "E": "enterprising",
    "C": "conventional",
}

# =============================================================================
# LIKERT SCALE
# =============================================================================

LIKERT_MIN = 1
LIKERT_MAX = 5

ANSWER_OPTIONS: List[Dict[str, object]] = [
    {"value": 5, "label": "Strongly agree"},
    {"value": 4, "label": "Agree"},
    {"value": 3, "label": "Neutral"},
    {"value": 2, "label": "Disagree"},
    {"value": 1, "label": "Strongly disagree"},
]

# =============================================================================
# QUESTIONS
# =============================================================================

QUESTIONS: List[Dict[str, object]] = [
    # Realistic
    {"id": 1, "type": "R", "text": "Do you enjoy working with machines or tools?"},
    {"id": 2, "type": "R", "text": "Do you like building or assembling things with your hands?"},
    {"id": 3, "type": "R", "text": "Do you prefer spending your time on outdoor activities?"},
    # Investigative
    {"id": 4, "type": "I", "text": "Do you enjoy analysing complex problems logically?"},
    {"id": 5, "type": "I", "text": "Are you interested in exploring and researching new knowledge?"},
    {"id": 6, "type": "I", "text": "Do you like science or mathematics subjects?"},
    # Artistic
    {"id": 7, "type": "A", "text": "Do you enjoy creative work or artistic expression?"},
    {"id": 8, "type": "A", "text": "Do you like coming up with original, new ideas?"},
    {"id": 9, "type": "A", "text": "Are you interested in art, music or literature?"},
    # Social
    {"id": 10, "type": "S", "text": "Do you find helping other people rewarding?"},
    {"id": 11, "type": "S", "text": "Do you enjoy talking and interacting with people?"},
    {"id": 12, "type": "S", "text": "Do you value teamwork and prefer to collaborate?"},
    # Enterprising
    {"id": 13, "type": "E", "text": "Do you like taking the lead and guiding others?"},
    {"id": 14, "type": "E", "text": "Are you confident delivering results in a competitive environment?"},
    {"id": 15, "type": "E", "text": "Are you interested in business or management?"},
    # Conventional
    {"id": 16, "type": "C", "text": "Do you prefer systematic, well-organised work?"},
    {"id": 17, "type": "C", "text": "Do you care about accuracy and detail?"},
    {"id": 18, "type": "C", "text": "Do you prefer a stable, predictable environment?"},
]

# question id -> category name
QUESTION_CATEGORY_MAP: Dict[int, str] = {
    question["id"]: CATEGORY_CODES[question["type"]] for question in QUESTIONS
}

# =============================================================================
# MAJOR CATALOG
# =============================================================================

MAJOR_PROFILES: List[Dict[str, object]] = [
    {
        "name": "Computer Engineering",
        "focus": "software development and system design",
        "riasec_types": ["R", "I"],
    },
    {
        "name": "Software Engineering",
        "focus": "programming and application development",
        "riasec_types": ["I", "C"],
    },
    {
        "name": "Information Statistics",
        "focus": "data analysis and statistics",
        "riasec_types": ["I", "C"],
    },
    {
        "name": "Digital Media",
        "focus": "multimedia and content production",
        "riasec_types": ["A", "I"],
    },
    {
        "name": "Industrial Engineering",
        "focus": "system optimisation and engineering management",
        "riasec_types": ["I", "E"],
    },
    {
        "name": "Architecture",
        "focus": "building design and spatial design",
        "riasec_types": ["R", "A"],
    },
    {
        "name": "Urban Planning",
        "focus": "city design and regional development",
        "riasec_types": ["I", "S"],
    },
    {
        "name": "Environmental Engineering",
        "focus": "environmental protection and sustainability",
        "riasec_types": ["I", "S"],
    },
    {
        "name": "Materials Science and Engineering",
        "focus": "materials research and technology development",
        "riasec_types": ["R", "I"],
    },
    {
        "name": "Chemical Engineering",
        "focus": "chemical processes and product development",
        "riasec_types": ["R", "I"],
    },
]

MAJOR_CATALOG: Tuple[str, ...] = tuple(profile["name"] for profile in MAJOR_PROFILES)

# =============================================================================
# RECOMMENDATION & VALIDATION SETTINGS
# =============================================================================

MAX_RECOMMENDATIONS = 3
MIN_RECOMMENDATIONS = 1

SCORE_MIN = 0
SCORE_MAX = 100

# Reported confidence for the deterministic validator
VALIDATION_CONFIDENCE = 0.95

DEFAULT_EXPLANATION = "Review your recommended majors and consider talking to an advisor about them."
