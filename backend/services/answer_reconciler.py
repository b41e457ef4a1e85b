# backend/services/answer_reconciler.py
"""
Three-tier fact precedence: local detection < remote analysis < user answers.

Remote facts always win over local heuristics for display. User answers are only ever
seeded (pre-filled) for keys the user has not touched; an existing key is never overwritten.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from services.question_catalog import QUESTION_IDS, is_blank

# remote field -> local field it lands in
_REMOTE_RENAMES = {"gaps": "aiGaps"}
# remote snippets that also raise the matching presence flag
_REMOTE_FLAGS = {
    "evidence": "hasEvidence",
    "success": "hasOutcomes",
    "sustainability": "hasSustainability",
}


def merge_remote_facts(local: Mapping[str, Any], remote: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Overlay non-blank remote facts on a copy of the local facts."""
    merged: Dict[str, Any] = dict(local or {})
    for key, value in (remote or {}).items():
        if is_blank(value):
            continue
        field = _REMOTE_RENAMES.get(key, key)
        merged[field] = list(value) if isinstance(value, (list, tuple)) else value
        flag = _REMOTE_FLAGS.get(field)
        if flag:
            merged[flag] = True
    return merged


def prefill_answers(display_facts: Mapping[str, Any], prior_answers: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy detected question facts into answers only where the answer key is absent."""
    answers: Dict[str, Any] = dict(prior_answers or {})
    for field in QUESTION_IDS:
        if field in answers:
            continue
        value = display_facts.get(field)
        if not is_blank(value):
            answers[field] = value
    return answers


def reconcile(
    local: Mapping[str, Any],
    remote: Optional[Mapping[str, Any]],
    prior_answers: Mapping[str, Any],
    uncertainty: Iterable[str] = (),
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Returns (answers, display_facts). Inputs are not mutated.
    Uncertain fields keep their stored answer; read-only rendering is decided by `is_editable`.
    """
    display_facts = merge_remote_facts(local, remote)
    answers = prefill_answers(display_facts, prior_answers)
    seeded = sorted(set(answers) - set(prior_answers or {}))
    if seeded:
        logging.debug(f"[Reconcile] pre-filled answers: {seeded}")
    if uncertainty:
        logging.debug(f"[Reconcile] uncertain fields keep their answers: {sorted(set(uncertainty))}")
    return answers, display_facts


def effective_answers(answers: Mapping[str, Any], uncertainty: Iterable[str]) -> Dict[str, Any]:
    """Answers with uncertain fields suppressed, as used when rendering a document."""
    uncertain = set(uncertainty or ())
    return {k: v for k, v in (answers or {}).items() if k not in uncertain}


def is_editable(field: str, uncertainty: Iterable[str]) -> bool:
    return field not in set(uncertainty or ())


def is_prefilled(display_facts: Mapping[str, Any], field: str) -> bool:
    """Drives the 'Detected' badge on a question."""
    return not is_blank((display_facts or {}).get(field))


# ---------- Detected summary ----------
def detected_summary(display_facts: Mapping[str, Any], mode: str) -> Dict[str, Any]:
    """
    What the working page shows about the analysis:
      - mode_line, project_types, items, project_summary, strengths, areas_to_strengthen, empty_message
    """
    d = display_facts or {}
    mode_line = (
        "Optimising your draft funding bid" if mode == "draft"
        else "Building a structured bid from your notes"
    )

    items: List[str] = []
    if not is_blank(d.get("amount")):        items.append(f"Funding amount: {d['amount']}")
    if not is_blank(d.get("fundingType")):   items.append(f"Type: {d['fundingType']}")
    if not is_blank(d.get("duration")):      items.append(f"Duration: {d['duration']}")
    if not is_blank(d.get("beneficiaries")): items.append(f"Beneficiaries: {d['beneficiaries']}")
    if not is_blank(d.get("reach")):         items.append(f"Reach: {d['reach']}")
    if d.get("hasEvidence"):       items.append("Evidence of need mentioned")
    if d.get("hasOutcomes"):       items.append("Outcomes/impact mentioned")
    if d.get("hasSustainability"): items.append("Sustainability mentioned")

    empty_message = ""
    if not items:
        empty_message = (
            "We couldn't detect specific details from your input yet. "
            "Answer the questions below to build a strong application."
        )

    return {
        "mode_line": mode_line,
        "project_types": list(d.get("projectTypes") or []),
        "items": items,
        "project_summary": d.get("projectSummary") or "",
        "strengths": list(d.get("strengths") or []),
        "areas_to_strengthen": list(d.get("aiGaps") or []),
        "empty_message": empty_message,
    }
