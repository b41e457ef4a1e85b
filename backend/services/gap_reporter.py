# backend/services/gap_reporter.py
from typing import Any, Iterable, List, Mapping

from services.question_catalog import QUESTIONS, is_blank

NOT_SURE_MSG = '{label} — marked as "not sure yet". Address this before submitting.'
BLANK_MSG = "{label} — left blank. Consider adding this information."


def compute_gaps(answers: Mapping[str, Any], uncertainty: Iterable[str] = ()) -> List[str]:
    """
    Follow-up list in question-catalog order.
    Uncertain fields are always reported; blank fields only when the question is required.
    """
    answers = answers or {}
    uncertain = set(uncertainty or ())
    gaps: List[str] = []
    for q in QUESTIONS:
        if q.id in uncertain:
            gaps.append(NOT_SURE_MSG.format(label=q.label))
        elif not q.optional and is_blank(answers.get(q.id)):
            gaps.append(BLANK_MSG.format(label=q.label))
    return gaps
