# backend/services/funding_api.py
import os
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import requests
from dotenv import load_dotenv
from pydantic import ValidationError

from models import FunderProfile, RemoteAnalysis, RemoteDocument
from utils.serializers import ensure_jsonable

load_dotenv()

# ---------- ENV KNOBS ----------
FUNDING_API_URL = os.getenv("FUNDING_API_URL", "").rstrip("/")
FUNDING_API_TIMEOUT = float(os.getenv("FUNDING_API_TIMEOUT", "30"))
FUNDING_REMOTE_ENABLE = os.getenv("FUNDING_REMOTE_ENABLE", "1") not in ("0", "false", "False")
MIN_DOCUMENT_CHARS = 100


class RemoteServiceError(RuntimeError):
    """Any failure talking to the analysis/generation service. Never retried automatically."""


class FundingApiClient:
    """
    Thin client for the remote analysis and generation endpoints.
    A response is either fully valid or rejected; nothing partial is returned.
    """

    def __init__(self, base_url: str, timeout: float = FUNDING_API_TIMEOUT,
                 min_document_chars: int = MIN_DOCUMENT_CHARS, session: Optional[requests.Session] = None):
        if not base_url:
            raise ValueError("FundingApiClient needs a base URL")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.min_document_chars = min_document_chars
        self.http = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.post(url, json=ensure_jsonable(payload), timeout=self.timeout,
                                  headers={"Content-Type": "application/json"})
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            logging.error(f"[FundingApi] POST {path} failed: {e}")
            raise RemoteServiceError(f"Request to {path} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            logging.error(f"[FundingApi] POST {path} returned a non-JSON body")
            raise RemoteServiceError(f"Response from {path} was not JSON") from e

        if not isinstance(data, dict):
            raise RemoteServiceError(f"Response from {path} was not a JSON object")
        return data

    def analyse(self, funder_name: str, user_input: str, mode: str) -> Dict[str, Any]:
        """
        Returns the remote facts as a partial fact record (blank fields dropped).
        """
        data = self._post("/analyse", {"funderName": funder_name, "userInput": user_input, "mode": mode})
        raw = data.get("analysis")
        if not isinstance(raw, dict):
            raise RemoteServiceError("Analysis response is missing the 'analysis' object")
        try:
            analysis = RemoteAnalysis.model_validate(raw)
        except ValidationError as e:
            logging.error(f"[FundingApi] analysis payload rejected: {e.error_count()} error(s)")
            raise RemoteServiceError("Analysis response had an unexpected shape") from e
        facts = analysis.model_dump(exclude_none=True)
        logging.info(f"[FundingApi] analysis returned fields: {sorted(facts)}")
        return facts

    def generate(self, funder_name: str, user_input: str, mode: str, answers: Mapping[str, Any],
                 uncertainty: Iterable[str], funder_profile: FunderProfile) -> RemoteDocument:
        payload = {
            "funderName": funder_name,
            "userInput": user_input,
            "mode": mode,
            "answers": dict(answers or {}),
            "notSure": {field: True for field in sorted(set(uncertainty or ()))},
            "funderInfo": funder_profile,
        }
        data = self._post("/generate", payload)
        try:
            doc = RemoteDocument.model_validate({
                "document": data.get("document"),
                "alignment": data.get("alignment") or "",
            })
        except ValidationError as e:
            raise RemoteServiceError("Generation response had an unexpected shape") from e
        if len(doc.document.strip()) < self.min_document_chars:
            logging.error(f"[FundingApi] generated document too short ({len(doc.document.strip())} chars)")
            raise RemoteServiceError("Generated document was too short")
        return doc


def get_funding_api_client(settings: Optional[Mapping[str, Any]] = None) -> Optional[FundingApiClient]:
    """
    None means local-only mode: no URL configured or the remote service switched off.
    """
    settings = settings or {}
    if not FUNDING_REMOTE_ENABLE or not settings.get("use_remote_service", True):
        logging.info("[FundingApi] remote service disabled, using local synthesis")
        return None
    if not FUNDING_API_URL:
        logging.info("[FundingApi] FUNDING_API_URL not set, using local synthesis")
        return None
    return FundingApiClient(
        FUNDING_API_URL,
        timeout=FUNDING_API_TIMEOUT,
        min_document_chars=int(settings.get("min_document_chars", MIN_DOCUMENT_CHARS)),
    )
