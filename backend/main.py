import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from models import FundingRequestOutput, FundingSession, StepOutcome
from services.answer_reconciler import reconcile
from services.document_synthesizer import synthesize
from services.fact_extractor import extract_facts
from services.funder_profiles import resolve_funder_profile
from services.funding_api import FundingApiClient, RemoteServiceError, get_funding_api_client
from services.gap_reporter import compute_gaps
from services.question_catalog import QUESTION_IDS

APP_SETTINGS_PATH = Path(__file__).resolve().parent / "config" / "app_settings.json"
VALID_MODES = ("draft", "notes")

ANALYSE_ERROR = "We cannot analyse your request at this time. Please try again in a moment."
GENERATE_ERROR = "We cannot generate your funding request at this time. Please try again in a moment."

# Sentinel: "look the client up from settings/env". Pass None explicitly for local-only.
_FROM_SETTINGS = object()


def load_app_settings() -> Dict[str, Any]:
    with open(APP_SETTINGS_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def _normalize_mode(mode: Optional[str]) -> str:
    mode = (mode or "draft").lower()
    return mode if mode in VALID_MODES else "draft"


def _resolve_client(client) -> Optional[FundingApiClient]:
    if client is _FROM_SETTINGS:
        return get_funding_api_client(load_app_settings())
    return client


def start_session(funder_name: str, user_input: str, mode: str = "draft") -> FundingSession:
    return FundingSession(
        mode=_normalize_mode(mode),
        funder_name=(funder_name or "").strip(),
        user_input=(user_input or "").strip(),
    )


def analyse_session(session: FundingSession, client=_FROM_SETTINGS) -> StepOutcome:
    """
    Local detection + funder lookup, optionally enriched by the remote analysis service,
    then reconciled into the session's answers. On a remote failure the prior session is returned.
    """
    client = _resolve_client(client)
    local = extract_facts(session.user_input)
    profile = resolve_funder_profile(session.funder_name)

    remote: Optional[Dict[str, Any]] = None
    if client is not None:
        try:
            remote = client.analyse(session.funder_name, session.user_input, session.mode)
        except RemoteServiceError as e:
            logging.error(f"[Session] analysis failed: {e}")
            return StepOutcome(session=session, error=ANALYSE_ERROR)

    answers, display_facts = reconcile(local, remote, session.answers, session.uncertain)
    updated = session.model_copy(deep=True, update={
        "funder_profile": profile,
        "detected": display_facts,
        "answers": answers,
        "output": None,
    })
    logging.info(f"[Session] analysed input for '{session.funder_name}': detected {sorted(display_facts)}")
    return StepOutcome(session=updated)


def set_answer(session: FundingSession, field: str, value: Any) -> FundingSession:
    """Record a user edit. Once a key exists it is never pre-filled again."""
    if field not in QUESTION_IDS:
        logging.warning(f"[Session] ignoring answer for unknown field '{field}'")
        return session
    answers = dict(session.answers)
    answers[field] = value
    return session.model_copy(deep=True, update={"answers": answers})


def toggle_uncertain(session: FundingSession, field: str) -> FundingSession:
    """Flip the 'not sure yet' flag. The stored answer is kept either way."""
    if field not in QUESTION_IDS:
        logging.warning(f"[Session] ignoring 'not sure' for unknown field '{field}'")
        return session
    uncertain = set(session.uncertain)
    if field in uncertain:
        uncertain.discard(field)
    else:
        uncertain.add(field)
    return session.model_copy(deep=True, update={"uncertain": uncertain})


def generate_for_session(session: FundingSession, client=_FROM_SETTINGS) -> StepOutcome:
    """
    Produce the final document. Remote generation when a service is configured,
    otherwise the local synthesizer. Gaps are always computed locally.
    """
    client = _resolve_client(client)
    profile = session.funder_profile or resolve_funder_profile(session.funder_name)
    gaps = compute_gaps(session.answers, session.uncertain)

    if client is not None:
        try:
            remote_doc = client.generate(
                session.funder_name, session.user_input, session.mode,
                session.answers, session.uncertain, profile,
            )
        except RemoteServiceError as e:
            logging.error(f"[Session] generation failed: {e}")
            return StepOutcome(session=session, error=GENERATE_ERROR)
        output = FundingRequestOutput(
            document=remote_doc.document, alignment=remote_doc.alignment, gaps=gaps, source="remote",
        )
    else:
        result = synthesize(
            session.answers, profile, session.detected, session.mode,
            session.user_input, session.uncertain,
        )
        output = FundingRequestOutput(
            document=result.document, alignment=result.alignment, gaps=gaps, source="local",
        )

    logging.info(f"[Session] generated {output.source} document with {len(gaps)} gap(s)")
    updated = session.model_copy(deep=True, update={"funder_profile": profile, "output": output})
    return StepOutcome(session=updated)
