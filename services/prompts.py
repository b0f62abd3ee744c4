import logging

from models.analysis import Perspective

COACH_PERSONA = "You are a professional boxing coach."

PERSPECTIVE_INSTRUCTIONS = {
    Perspective.LEFT: (
        "The user is the boxer on the LEFT side of the video. "
        "Focus ONLY on the left-side boxer."
    ),
    Perspective.RIGHT: (
        "The user is the boxer on the RIGHT side of the video. "
        "Focus ONLY on the right-side boxer."
    ),
    Perspective.ALONE: (
        "The user is the ONLY boxer in the video. "
        "Analyze their solo performance."
    ),
}

FEEDBACK_INSTRUCTIONS = """Analyze the user's performance and provide:
1. Punching mistakes
2. Footwork issues
3. Defensive problems
4. 3 clear improvement tips

Be concise, practical, and beginner-friendly."""


def perspective_instruction(perspective: str) -> str:
    """
    Return the clause telling the model which boxer to watch.
    Unrecognized values produce an empty clause rather than an error.
    """
    known = Perspective.parse(perspective)
    if known is None:
        logging.warning(f"Unrecognized perspective '{perspective}', using empty instruction")
        return ""
    return PERSPECTIVE_INSTRUCTIONS[known]


def build_coaching_prompt(perspective: str) -> str:
    return f"""
{COACH_PERSONA}

{perspective_instruction(perspective)}

{FEEDBACK_INSTRUCTIONS}
"""
