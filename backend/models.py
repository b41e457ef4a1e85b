from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Set

Mode = Literal["draft", "notes"]
InputKind = Literal["text", "longtext", "choice-toggle", "choice-select"]


class FunderProfile(BaseModel):
    """
    Fixed knowledge about a funding body.
    The first two values are the ones the synthesized document leans on.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The funder name exactly as the user typed it.")
    focus: str = Field(description="A phrase describing what the funder cares about, used verbatim in prose.")
    values: List[str] = Field(description="Funder priorities in priority order.")
    tip: str = Field(description="One practical tip for applying to this funder.")
    language: List[str] = Field(description="Terminology the funder prefers to see in bids.")


class QuestionDefinition(BaseModel):
    """
    One of the fixed follow-up questions asked on the working page.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    why: str
    input_kind: InputKind
    options: List[str] = Field(default_factory=list)
    placeholder: str = ""
    optional: bool = False


class RemoteAnalysis(BaseModel):
    """
    Facts returned by the remote analysis service.
    Every field is optional; a field that is missing or blank never overrides local detection.
    """
    amount: Optional[str] = None
    fundingType: Optional[str] = None
    duration: Optional[str] = None
    beneficiaries: Optional[str] = None
    reach: Optional[str] = None
    evidence: Optional[str] = None
    success: Optional[str] = None
    sustainability: Optional[str] = None
    projectSummary: Optional[str] = None
    projectTypes: Optional[List[str]] = None
    strengths: Optional[List[str]] = None
    gaps: Optional[List[str]] = None


class RemoteDocument(BaseModel):
    """
    A funding request produced by the remote generation service.
    """
    document: str
    alignment: str = ""


class DocumentSection(BaseModel):
    title: str
    body: str = Field(description="Escaped HTML paragraphs for the section.")


class SynthesisResult(BaseModel):
    """
    The locally synthesized funding request.
    """
    document: str = Field(description="The full document as HTML: a <h4> heading and body per section.")
    alignment: str = Field(description="Alignment notes as an HTML list.")
    sections: List[DocumentSection] = Field(default_factory=list)


class FundingRequestOutput(BaseModel):
    """
    What the final step shows: the document, the alignment notes and the gap list.
    """
    document: str
    alignment: str
    gaps: List[str] = Field(default_factory=list)
    source: Literal["local", "remote"] = "local"


class FundingSession(BaseModel):
    """
    Everything one user works on between 'start' and 'start over'.
    Nothing here is persisted.
    """
    mode: Mode = "draft"
    funder_name: str = ""
    user_input: str = ""
    funder_profile: Optional[FunderProfile] = None
    detected: Dict[str, Any] = Field(default_factory=dict)
    answers: Dict[str, Any] = Field(default_factory=dict)
    uncertain: Set[str] = Field(default_factory=set)
    output: Optional[FundingRequestOutput] = None


class StepOutcome(BaseModel):
    """
    Result of an orchestrated step. On failure `session` is the untouched prior session.
    """
    session: FundingSession
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
