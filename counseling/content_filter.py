"""
Content filter for counseling chat messages.

Only clearly abusive input is rejected; everything else is treated as a
counseling question.
"""

import re
from typing import Optional

DENY_LIST = ("hacking", "illegal", "violence", "profanity")

_DENY_PATTERN = re.compile(r"\b(?:" + "|".join(re.escape(word) for word in DENY_LIST) + r")\b", re.IGNORECASE)
# one character repeated 16 or more times in a row
_REPEATED_CHAR_PATTERN = re.compile(r"(.)\1{15,}")

MIN_MESSAGE_LENGTH = 2

DISALLOWED_MESSAGE = "Let's keep our conversation focused on choosing a major. Could you ask a different question?"
REPETITION_MESSAGE = "Please send a meaningful question so I can help you."
TOO_SHORT_MESSAGE = "Could you tell me a little more about what you would like to know?"


def check_message(message: str) -> Optional[str]:
    """
    Returns:
        the canned reply to send instead of answering, or None when the
        message is acceptable
    """
    if _DENY_PATTERN.search(message):
        return DISALLOWED_MESSAGE
    if _REPEATED_CHAR_PATTERN.search(message):
        return REPETITION_MESSAGE
    if len(message.strip()) < MIN_MESSAGE_LENGTH:
        return TOO_SHORT_MESSAGE
    return None
