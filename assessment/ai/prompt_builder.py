from typing import Iterable, List, Sequence
import json

from ..logic.constants import MAX_RECOMMENDATIONS
from ..logic.contracts import CaseStudy, CategoryScores
from .safety_rules import (
    SAFETY_RULES,
    SYSTEM_ROLE_DEFINITION,
    JSON_OUTPUT_FORMAT_INSTRUCTION,
    STRICT_RETRY_INSTRUCTION,
)


def build_system_prompt() -> str:
    """Constructs the static system prompt."""
    rules_str = "\n".join([f"- {rule}" for rule in SAFETY_RULES])

    return f"""{SYSTEM_ROLE_DEFINITION}

RULES (NON-NEGOTIABLE):
{rules_str}

OUTPUT FORMAT:
{JSON_OUTPUT_FORMAT_INSTRUCTION}
"""


def serialize_scores(scores: CategoryScores) -> str:
    """Compact JSON, e.g. {"realistic":60,"investigative":60,...}."""
    return json.dumps(scores.as_dict(), separators=(",", ":"))


def build_major_prompt(scores: CategoryScores, catalog: Iterable[str], strict: bool = False) -> str:
    """
    Constructs the user prompt asking for the top catalog majors.

    `strict` adds a reminder used when the previous answer failed to parse.
    """
    catalog_str = "\n".join([f"- {major}" for major in catalog])

    user_content = f"""
Recommend majors for the following RIASEC assessment result.

RIASEC SCORES (0-100 per category):
{serialize_scores(scores)}

MAJOR CATALOG (choose only from this list):
{catalog_str}

TASK:
Return the top {MAX_RECOMMENDATIONS} majors from the catalog as JSON:
{{"recommendations": [{{"major": "...", "matchRate": 0-100, "reason": "..."}}], "explanation": "..."}}
Never include a major that is not in the catalog.
"""
    if strict:
        user_content += STRICT_RETRY_INSTRUCTION
    return user_content


def _format_case(index: int, case: CaseStudy) -> str:
    s = case.scores
    lines = [
        f"Case {index}: chose {case.selected_major}, satisfaction {case.satisfaction_rating}/5",
        f"  Profile: R:{s.realistic} I:{s.investigative} A:{s.artistic} "
        f"S:{s.social} E:{s.enterprising} C:{s.conventional}",
        f"  Review: {case.narrative}",
    ]
    if case.career_path:
        lines.append(f"  Career: {case.career_path}")
    return "\n".join(lines)


def build_narrative_prompt(
    scores: CategoryScores,
    recommended_majors: Sequence[str],
    cases: List[CaseStudy],
) -> str:
    """Prompt asking for a short, encouraging synthesis of similar students' outcomes."""
    s = scores
    cases_text = "\n\n".join(_format_case(i + 1, case) for i, case in enumerate(cases))
    majors_text = ", ".join(recommended_majors) if recommended_majors else "not decided yet"

    return f"""
You are a university major counselor. Write feedback for a student using the information below.

STUDENT RIASEC PROFILE (0-100):
R: {s.realistic}, I: {s.investigative}, A: {s.artistic}
S: {s.social}, E: {s.enterprising}, C: {s.conventional}

RECOMMENDED MAJORS: {majors_text}

SENIOR STUDENTS WITH SIMILAR PROFILES:
{cases_text}

Using these cases, write 3-4 sentences of helpful advice for the student.
Mention concrete satisfaction levels or experiences and keep an encouraging tone.
"""
