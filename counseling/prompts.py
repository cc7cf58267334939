"""
Prompt templates for the counseling assistant.
"""

from typing import Dict, List

from assessment.logic.constants import MAJOR_PROFILES
from .conversation_store import STAGES, CounselingProfile

COUNSELOR_NAME = "Alex"

STAGE_GUIDANCE = {
    "greeting": "Welcome the student and ask what they would like to talk about.",
    "exploring": "Ask open questions about interests, strengths and experiences.",
    "recommending": "Connect what you know about the student to concrete majors from the list.",
    "follow_up": "Answer follow-up questions about the majors already discussed and suggest next steps.",
}


def _format_history(history: List[Dict[str, str]]) -> str:
    if not history:
        return "(no previous messages)"
    return "\n".join(
        f"{'Student' if entry.get('role') == 'user' else 'Counselor'}: {entry.get('content', '')}"
        for entry in history
    )


def _format_profile(profile: CounselingProfile) -> str:
    if profile.scores:
        top = ", ".join(f"{category}({value})" for category, value in profile.scores.top_categories(2))
    else:
        top = "not assessed yet"
    return (
        f"- Strongest RIASEC categories: {top}\n"
        f"- Interests: {', '.join(profile.interests) or 'still finding out'}\n"
        f"- Concerns: {', '.join(profile.concerns) or 'none mentioned'}"
    )


def _format_majors() -> str:
    return "\n".join(
        f"- {major['name']}: {major['focus']} (suits {', '.join(major['riasec_types'])})"
        for major in MAJOR_PROFILES
    )


def build_counselor_system_prompt(profile: CounselingProfile, similar_cases_context: str = "") -> str:
    similar_block = f"\nNOTES FROM SIMILAR STUDENTS:\n{similar_cases_context}\n" if similar_cases_context else ""
    return f"""
You are "{COUNSELOR_NAME}", a major counselor for a school of creative convergence.
You are warm and friendly, you understand students' worries, and you keep the conversation going.
Interpret every question in the context of choosing a major or planning a career.

CONVERSATION STAGE: {profile.stage}
{STAGE_GUIDANCE.get(profile.stage, STAGE_GUIDANCE["exploring"])}
Current focus: {profile.current_focus or 'general counseling'}

STUDENT PROFILE:
{_format_profile(profile)}
{similar_block}
MAJORS OFFERED:
{_format_majors()}

GUIDELINES:
- Reply in 2-4 sentences with a natural, friendly tone and no emoji.
- Show empathy for the student's situation and give concrete, practical advice.
- End with an open question that invites the student to share more.
- Only suggest majors from the list above.
"""


def build_counselor_user_prompt(history: List[Dict[str, str]], message: str) -> str:
    return f"""
RECENT CONVERSATION:
{_format_history(history)}

Student: {message}

Reply to the student as the counselor.
"""


def build_stage_prompt(profile: CounselingProfile, history: List[Dict[str, str]], message: str) -> str:
    return f"""
Classify the current stage of this major-counseling conversation.

RECENT CONVERSATION:
{_format_history(history)}

NEW STUDENT MESSAGE: "{message}"

STUDENT PROFILE:
{_format_profile(profile)}

Reply with JSON only:
{{"stage": "{'|'.join(STAGES)}", "current_focus": "short description of what the student is focused on"}}
"""


def build_interest_prompt(message: str) -> str:
    return f"""
Extract the student's interests and concerns from this message.

MESSAGE: "{message}"

Reply with JSON only:
{{"interests": ["short tags"], "concerns": ["short tags"]}}
Use empty arrays when there is nothing to extract.
"""


def build_summary_prompt(profile: CounselingProfile) -> str:
    return f"""
Summarize this major-counseling conversation in 2-3 sentences.
Cover the main topics, the student's areas of interest, and a recommended next step.

STUDENT PROFILE:
{_format_profile(profile)}

RECENT CONVERSATION:
{_format_history(profile.history[-10:])}
"""
