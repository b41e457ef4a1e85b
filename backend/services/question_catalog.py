# backend/services/question_catalog.py
from typing import Dict, List, Optional

from models import QuestionDefinition

# Every fact id the pipeline knows about. Wire names match the remote service payloads.
FACT_FIELDS = (
    "amount", "fundingType", "duration", "beneficiaries", "reach",
    "evidence", "success", "sustainability", "projectTypes",
    "hasEvidence", "hasOutcomes", "hasSustainability",
    "projectSummary", "strengths", "aiGaps",
)

ONE_OFF = "One-off project"
ONGOING = "Ongoing funding"

QUESTIONS: List[QuestionDefinition] = [
    QuestionDefinition(
        id="amount",
        label="How much funding are you requesting?",
        why="Funders want specific amounts with justification",
        input_kind="text",
        placeholder="e.g. £50,000",
    ),
    QuestionDefinition(
        id="fundingType",
        label="Is this a one-off project or a request for ongoing funding?",
        why="This completely changes how your bid is framed",
        input_kind="choice-toggle",
        options=[ONE_OFF, ONGOING],
    ),
    QuestionDefinition(
        id="duration",
        label="Over what time period?",
        why="Required for budgeting narrative",
        input_kind="choice-select",
        options=["6 months", "1 year", "2 years", "3 years", "Other"],
    ),
    QuestionDefinition(
        id="beneficiaries",
        label="Who are the primary beneficiaries?",
        why="Must match funder priorities for strongest alignment",
        input_kind="text",
        placeholder="e.g. Young people aged 16-25 in South London",
    ),
    QuestionDefinition(
        id="reach",
        label="How many people will benefit?",
        why="Funders want scale and reach data",
        input_kind="text",
        placeholder="e.g. 200 direct beneficiaries, 500 indirect",
    ),
    QuestionDefinition(
        id="evidence",
        label="What evidence of need do you have?",
        why="Strengthens the case significantly",
        input_kind="longtext",
        placeholder="e.g. Local needs assessment data, ONS statistics, consultation findings...",
        optional=True,
    ),
    QuestionDefinition(
        id="success",
        label="What will success look like?",
        why="Outcomes and impact measurement are critical for funders",
        input_kind="longtext",
        placeholder="e.g. 80% of participants report improved wellbeing; 50 people gain qualifications...",
    ),
    QuestionDefinition(
        id="sustainability",
        label="What happens when the funding ends?",
        why="Sustainability: funders always ask this question",
        input_kind="longtext",
        placeholder="e.g. We will seek continuation funding, embed in core services, train volunteers...",
        optional=True,
    ),
]

QUESTION_IDS = tuple(q.id for q in QUESTIONS)
_BY_ID: Dict[str, QuestionDefinition] = {q.id: q for q in QUESTIONS}

MODE_PLACEHOLDERS = {
    "draft": (
        "Paste or type your draft funding bid here. Include as much detail as you can: what your "
        "project does, who it helps, what outcomes you expect, and how much funding you're requesting."
    ),
    "notes": (
        "Paste your rough notes, bullet points, or key ideas here. Don't worry about structure, "
        "we'll help you build a complete funding request from whatever you have."
    ),
}

MODE_HELP_TEXTS = {
    "draft": "Don't worry about it being perfect, that's what this tool is for",
    "notes": "Even a few bullet points will give us enough to work with",
}


def get_question(field_id: str) -> Optional[QuestionDefinition]:
    return _BY_ID.get(field_id)


def required_ids() -> List[str]:
    return [q.id for q in QUESTIONS if not q.optional]


def is_blank(value) -> bool:
    """None, whitespace-only strings and empty sequences count as 'no answer'."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def widget_value(question: QuestionDefinition, answer):
    """The value a question's input widget starts from: an option (or None) for choices, text otherwise."""
    if question.options:
        return answer if answer in question.options else None
    return "" if answer is None else str(answer)
