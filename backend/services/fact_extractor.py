# backend/services/fact_extractor.py
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from services.question_catalog import ONE_OFF, ONGOING

_I = re.IGNORECASE

# ---------- Amount / type / duration ----------
AMOUNT_RE = re.compile(r"[£$€]\d[\d,]*(?:\.\d{2})?")

ONE_OFF_RE = re.compile(r"\bone[- ]?off\b", _I)
PROJECT_RE = re.compile(r"\bproject\b", _I)
ONGOING_WORD_RE = re.compile(r"\bongoing\b", _I)
ONGOING_FAMILY_RE = re.compile(r"\bongoing\b|\bannual\b|\bcontinuing\b|\bcore funding\b", _I)

# Scan order matters: the first phrasing found wins.
DURATION_RULES: List[Tuple[Pattern, str]] = [
    (re.compile(r"\b6\s*months?\b", _I), "6 months"),
    (re.compile(r"\b1\s*year\b|\b12\s*months?\b|\bone\s*year\b", _I), "1 year"),
    (re.compile(r"\b2\s*years?\b|\b24\s*months?\b|\btwo\s*years?\b", _I), "2 years"),
    (re.compile(r"\b3\s*years?\b|\b36\s*months?\b|\bthree\s*years?\b", _I), "3 years"),
]

# ---------- Beneficiaries (catalog order is display order) ----------
BENEFICIARY_RULES: List[Tuple[Pattern, str]] = [
    (re.compile(r"young\s*people|youth|teenagers?", _I), "Young people"),
    (re.compile(r"children|child(?:ren)?", _I), "Children"),
    (re.compile(r"older\s*(?:people|adults?)|elderly|pensioners?|over[- ]?65s?", _I), "Older people"),
    (re.compile(r"disab(?:led|ility|ilities)", _I), "People with disabilities"),
    (re.compile(r"mental\s*health|wellbeing|well[- ]?being", _I), "People experiencing mental health challenges"),
    (re.compile(r"homeless(?:ness)?|rough\s*sleep", _I), "People experiencing homelessness"),
    (re.compile(r"refugee|asylum", _I), "Refugees and asylum seekers"),
    (re.compile(r"women|girls|female", _I), "Women and girls"),
    (re.compile(r"famil(?:y|ies)", _I), "Families"),
    (re.compile(r"carers?", _I), "Carers"),
    (re.compile(r"BAME|ethnic\s*minorit|black|Asian", _I), "Ethnic minority communities"),
    (re.compile(r"LGBTQ|LGBT|queer|trans", _I), "LGBTQ+ community"),
]

REACH_RE = re.compile(
    r"(\d[\d,]*)\s*(?:people|participants?|beneficiaries|individuals?|young\s*people|children|families|members?)",
    _I,
)

# ---------- Two-tier signals: broad flag, narrower snippet ----------
EVIDENCE_FLAG_RE = re.compile(r"evidence|research|data|statistic|survey|consultation|needs\s*assessment|census|ONS", _I)
EVIDENCE_SNIPPET_RE = re.compile(r"(?:evidence|research|data|statistic|survey|consultation)[^.]*\.", _I)

OUTCOMES_FLAG_RE = re.compile(r"outcome|impact|success|measur|result|achieve|improve", _I)
OUTCOMES_SNIPPET_RE = re.compile(r"(?:outcome|success|measur|result|achieve|improve)[^.]*\.", _I)

SUSTAIN_FLAG_RE = re.compile(r"sustainab|after\s*(?:the\s*)?funding|legacy|continuation|embed|long[- ]?term", _I)
SUSTAIN_SNIPPET_RE = re.compile(r"(?:sustainab|after\s*(?:the\s*)?funding|legacy|continuation)[^.]*\.", _I)

# (flag field, snippet field, broad pattern, snippet pattern)
SIGNAL_RULES: List[Tuple[str, str, Pattern, Pattern]] = [
    ("hasEvidence", "evidence", EVIDENCE_FLAG_RE, EVIDENCE_SNIPPET_RE),
    ("hasOutcomes", "success", OUTCOMES_FLAG_RE, OUTCOMES_SNIPPET_RE),
    ("hasSustainability", "sustainability", SUSTAIN_FLAG_RE, SUSTAIN_SNIPPET_RE),
]

# ---------- Project types (catalog order) ----------
PROJECT_TYPE_RULES: List[Tuple[Pattern, str]] = [
    (re.compile(r"training|workshop|session|programme|program", _I), "Training / programme delivery"),
    (re.compile(r"capital|building|refurbish|renovation|equipment", _I), "Capital / equipment"),
    (re.compile(r"staff|salary|salaries|coordinator|worker|officer", _I), "Staffing"),
    (re.compile(r"outreach|engagement|community\s*work", _I), "Outreach / community engagement"),
    (re.compile(r"research|evaluation|pilot", _I), "Research / pilot"),
    (re.compile(r"event|festival|celebration", _I), "Events"),
]


# ---------- Individual detectors ----------
def detect_amount(text: str) -> Optional[str]:
    m = AMOUNT_RE.search(text)
    return m.group(0) if m else None


def detect_funding_type(text: str) -> Optional[str]:
    # one-off cue, or "project" without any "ongoing" cue, is checked first
    if ONE_OFF_RE.search(text) or (PROJECT_RE.search(text) and not ONGOING_WORD_RE.search(text)):
        return ONE_OFF
    if ONGOING_FAMILY_RE.search(text):
        return ONGOING
    return None


def detect_duration(text: str) -> Optional[str]:
    for pattern, label in DURATION_RULES:
        if pattern.search(text):
            return label
    return None


def detect_beneficiaries(text: str) -> Optional[str]:
    groups = [label for pattern, label in BENEFICIARY_RULES if pattern.search(text)]
    return ", ".join(groups) if groups else None


def detect_reach(text: str) -> Optional[str]:
    m = REACH_RE.search(text)
    if not m:
        return None
    number = m.group(1)
    noun_phrase = m.group(0)[len(number):].strip()
    return f"{number.replace(',', '')} {noun_phrase}"


def detect_project_types(text: str) -> List[str]:
    return [label for pattern, label in PROJECT_TYPE_RULES if pattern.search(text)]


def _detect_signal(text: str, flag_re: Pattern, snippet_re: Pattern) -> Tuple[bool, Optional[str]]:
    if not flag_re.search(text):
        return False, None
    m = snippet_re.search(text)
    return True, (m.group(0).strip() if m else None)


# ---------- Public API ----------
def extract_facts(text: str) -> Dict[str, Any]:
    """
    Scan free text for funding-request facts.

    Returns a partial fact record: a key is only present when something was found,
    except `projectTypes`, which is always present (possibly empty).
    Total over any string; never raises.
    """
    text = text or ""
    detected: Dict[str, Any] = {}

    scalar_detectors = [
        ("amount", detect_amount),
        ("fundingType", detect_funding_type),
        ("duration", detect_duration),
        ("beneficiaries", detect_beneficiaries),
        ("reach", detect_reach),
    ]
    for field, detector in scalar_detectors:
        value = detector(text)
        if value:
            detected[field] = value

    for flag_field, snippet_field, flag_re, snippet_re in SIGNAL_RULES:
        found, snippet = _detect_signal(text, flag_re, snippet_re)
        if found:
            detected[flag_field] = True
            if snippet:
                detected[snippet_field] = snippet

    detected["projectTypes"] = detect_project_types(text)
    return detected
