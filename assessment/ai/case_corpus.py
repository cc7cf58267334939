"""
Reference case studies used to seed the similarity index.

The profiles were collected as 0-1 fractions; they are converted once, here,
to the 0-100 integer scale used by live assessments.
"""

from typing import Dict, List

from ..logic.constants import RIASEC_CATEGORIES
from ..logic.contracts import CaseStudy, CategoryScores
from ..logic.scoring import round_half_up


def scores_from_fractions(fractions: Dict[str, float]) -> CategoryScores:
    return CategoryScores(**{
        category: round_half_up(fractions.get(category, 0.0) * 100)
        for category in RIASEC_CATEGORIES
    })


_RAW_REFERENCE_CASES: List[Dict[str, object]] = [
    {
        "id": "case-001",
        "fractions": {"realistic": 0.8, "investigative": 0.9, "artistic": 0.3,
                      "social": 0.4, "enterprising": 0.2, "conventional": 0.6},
        "selected_major": "Computer Engineering",
        "satisfaction_rating": 5,
        "narrative": "I chose Computer Engineering because I love logical thinking and problem solving. "
                     "Studying algorithms is genuinely fun, and solving real problems through projects is very rewarding.",
        "graduation_year": 2023,
        "career_path": "Software engineer",
    },
    {
        "id": "case-002",
        "fractions": {"realistic": 0.4, "investigative": 0.7, "artistic": 0.8,
                      "social": 0.6, "enterprising": 0.7, "conventional": 0.3},
        "selected_major": "Digital Media",
        "satisfaction_rating": 4,
        "narrative": "I picked it because I can do both creative work and technical implementation. "
                     "Game design and video production projects were especially satisfying.",
        "graduation_year": 2022,
        "career_path": "UX/UI designer",
    },
    {
        "id": "case-003",
        "fractions": {"realistic": 0.3, "investigative": 0.8, "artistic": 0.2,
                      "social": 0.3, "enterprising": 0.4, "conventional": 0.9},
        "selected_major": "Information Statistics",
        "satisfaction_rating": 5,
        "narrative": "Finding patterns through data analysis and statistical thinking is fascinating. "
                     "Solving problems with a systematic approach is very satisfying.",
        "graduation_year": 2023,
        "career_path": "Data scientist",
    },
    {
        "id": "case-004",
        "fractions": {"realistic": 0.6, "investigative": 0.5, "artistic": 0.9,
                      "social": 0.4, "enterprising": 0.6, "conventional": 0.2},
        "selected_major": "Architecture",
        "satisfaction_rating": 4,
        "narrative": "Designing spaces and seeing them built is what attracts me. "
                     "Balancing creativity and practicality is challenging but fun.",
        "graduation_year": 2021,
        "career_path": "Architectural designer",
    },
    {
        "id": "case-005",
        "fractions": {"realistic": 0.4, "investigative": 0.7, "artistic": 0.3,
                      "social": 0.8, "enterprising": 0.8, "conventional": 0.5},
        "selected_major": "Urban Planning",
        "satisfaction_rating": 4,
        "narrative": "Shaping city environments that improve people's lives is rewarding. "
                     "Planning sustainable cities with many stakeholders feels meaningful.",
        "graduation_year": 2022,
        "career_path": "Urban planning consultant",
    },
    {
        "id": "case-006",
        "fractions": {"realistic": 0.7, "investigative": 0.8, "artistic": 0.2,
                      "social": 0.6, "enterprising": 0.3, "conventional": 0.7},
        "selected_major": "Environmental Engineering",
        "satisfaction_rating": 5,
        "narrative": "Contributing to environmental problems is a big motivation for me. "
                     "Finding practical solutions through experiments and field surveys is exciting.",
        "graduation_year": 2023,
        "career_path": "Environmental consultant",
    },
    {
        "id": "case-007",
        "fractions": {"realistic": 0.5, "investigative": 0.6, "artistic": 0.7,
                      "social": 0.4, "enterprising": 0.8, "conventional": 0.4},
        "selected_major": "Software Engineering",
        "satisfaction_rating": 4,
        "narrative": "I like that I can build apps and web services myself. "
                     "User-centred development is especially fun, and it got me interested in starting a company.",
        "graduation_year": 2022,
        "career_path": "Startup developer",
    },
    {
        "id": "case-008",
        "fractions": {"realistic": 0.6, "investigative": 0.7, "artistic": 0.3,
                      "social": 0.5, "enterprising": 0.9, "conventional": 0.8},
        "selected_major": "Industrial Engineering",
        "satisfaction_rating": 5,
        "narrative": "Optimising systems and improving efficiency is really interesting. "
                     "Learning both management and engineering widened my career options.",
        "graduation_year": 2021,
        "career_path": "Project manager",
    },
]


REFERENCE_CASES: List[CaseStudy] = [
    CaseStudy(
        id=raw["id"],
        scores=scores_from_fractions(raw["fractions"]),
        selected_major=raw["selected_major"],
        satisfaction_rating=raw["satisfaction_rating"],
        narrative=raw["narrative"],
        graduation_year=raw.get("graduation_year"),
        career_path=raw.get("career_path"),
    )
    for raw in _RAW_REFERENCE_CASES
]
