# backend/services/document_synthesizer.py
"""
Deterministic funding-request writer.

Each section builder takes the render context and returns a DocumentSection whose body is
escaped HTML. Content sections follow the same precedence: answered -> tailored paragraph,
marked 'not sure' -> bracketed placeholder, blank -> generic paragraph plus improvement note.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping

from models import DocumentSection, FunderProfile, SynthesisResult
from services.answer_reconciler import effective_answers
from services.question_catalog import ONE_OFF, is_blank
from utils.helpers import join_html, render_html, truncate

DRAFT_SNIPPET_CHARS = 500

DEFAULT_AMOUNT = "the requested amount"
DEFAULT_FUNDING_TYPE = "project"
DEFAULT_DURATION = "the proposed period"
DEFAULT_BENEFICIARIES = "our target beneficiaries"


def _value(answers: Mapping[str, Any], field: str, default: str = "") -> str:
    v = answers.get(field)
    return default if is_blank(v) else str(v)


def build_context(
    answers: Mapping[str, Any],
    funder: FunderProfile,
    display_facts: Mapping[str, Any],
    mode: str,
    raw_input: str,
    uncertainty: Iterable[str],
) -> Dict[str, Any]:
    uncertain = set(uncertainty or ())
    a = effective_answers(answers, uncertain)
    d = display_facts or {}

    funding_type = _value(a, "fundingType", DEFAULT_FUNDING_TYPE)
    one_off = funding_type == ONE_OFF
    top_values = [v.lower() for v in funder.values[:2]]
    while len(top_values) < 2:
        top_values.append("community impact")

    raw_input = raw_input or ""
    project_types = [str(t) for t in (d.get("projectTypes") or [])]

    return {
        "funder": funder,
        "mode": mode,
        "uncertain": uncertain,
        "amount": _value(a, "amount", DEFAULT_AMOUNT),
        "amount_answered": not is_blank(a.get("amount")),
        "duration": _value(a, "duration", DEFAULT_DURATION),
        "duration_answered": not is_blank(a.get("duration")),
        "beneficiaries": _value(a, "beneficiaries", DEFAULT_BENEFICIARIES),
        "reach": _value(a, "reach"),
        "evidence": _value(a, "evidence"),
        "success": _value(a, "success"),
        "sustainability": _value(a, "sustainability"),
        "one_off": one_off,
        "kind": "project" if one_off else "programme",
        "project_types": ", ".join(project_types).lower(),
        "top_value": top_values[0],
        "second_value": top_values[1],
        "snippet": truncate(raw_input, DRAFT_SNIPPET_CHARS) if raw_input.strip() else "",
        "has_evidence": bool(d.get("hasEvidence")) or not is_blank(a.get("evidence")),
        "has_outcomes": bool(d.get("hasOutcomes")) or not is_blank(a.get("success")),
    }


# ---------- Section builders ----------
_INTRO_DRAFT = (
    "<p>We are writing to {{ funder.name }} to request funding of {{ amount }} for "
    "{% if one_off %}a {{ duration }} project{% else %}ongoing work over {{ duration }}{% endif %} "
    "that directly supports {{ funder.focus }}. This application builds on our strong track record of "
    "delivering meaningful impact for {{ beneficiaries }}, and has been informed by the people and "
    "communities who stand to benefit most.</p>"
)
_INTRO_NOTES = (
    "<p>We are seeking {{ amount }} from {{ funder.name }} to deliver "
    "{% if one_off %}a focused {{ duration }} project{% else %}an ongoing programme over {{ duration }}{% endif %} "
    "that will make a tangible difference to {{ beneficiaries }}. Our work directly aligns with your "
    "commitment to {{ funder.focus }}, and this proposal has been shaped by the needs and voices of "
    "those we serve.</p>"
)


def build_introduction(ctx: Dict[str, Any]) -> DocumentSection:
    template = _INTRO_DRAFT if ctx["mode"] == "draft" else _INTRO_NOTES
    return DocumentSection(title="Introduction", body=render_html(template, ctx))


_REACH_SENTENCE = "Our {{ kind }} will directly reach {{ reach }}"


def build_need(ctx: Dict[str, Any]) -> DocumentSection:
    if ctx["evidence"]:
        body = render_html(
            "<p>There is clear and compelling evidence for this work. {{ evidence }}</p>"
            "<p>{{ beneficiaries }} face significant challenges that require dedicated, well-resourced "
            "intervention.{% if reach %} " + _REACH_SENTENCE + ", addressing needs that are currently "
            "unmet in our area.{% endif %}</p>",
            ctx,
        )
    elif "evidence" in ctx["uncertain"]:
        body = render_html(
            "<p><em>[Evidence of need to be added — consider including local statistics, needs "
            "assessment data, or consultation findings that demonstrate why this work is necessary.]</em></p>",
            ctx,
        )
    else:
        body = render_html(
            "<p>The need for this work is evident in our community. {{ beneficiaries }} face persistent "
            "challenges that require dedicated support. {% if reach %}" + _REACH_SENTENCE + ", {% endif %}"
            "and we have seen first-hand the impact that targeted intervention can have.</p>"
            "<p><em>[Strengthen this section by adding specific local or national statistics that "
            "evidence the need. Include sources and dates for credibility.]</em></p>",
            ctx,
        )
    return DocumentSection(title="The Need", body=body)


_PROJECT_DRAFT = (
    "<p>Building on the detail in our full proposal, this {{ kind }} will deliver structured, "
    "outcomes-focused activities for {{ beneficiaries }} over {{ duration }}. "
    "{% if project_types %}Our approach includes {{ project_types }}, {% endif %}"
    "designed to create lasting positive change.</p>"
    "{% if snippet %}<p><em>From our proposal:</em> {{ snippet }}</p>{% endif %}"
)
_PROJECT_NOTES = (
    "<p>{% if project_types %}Our {{ kind }} will focus on {{ project_types }}, "
    "{% else %}Our {{ kind }} will provide {% endif %}"
    "delivering structured, evidence-informed support for {{ beneficiaries }} over {{ duration }}. "
    "{% if reach %}We aim to reach {{ reach }} through this work. {% endif %}"
    "Every element of our delivery has been designed with {{ funder.name }}'s priorities in mind, "
    "particularly around {{ top_value }} and {{ second_value }}.</p>"
)


def build_project(ctx: Dict[str, Any]) -> DocumentSection:
    template = _PROJECT_DRAFT if ctx["mode"] == "draft" else _PROJECT_NOTES
    title = "Our Project" if ctx["one_off"] else "Our Programme"
    return DocumentSection(title=title, body=render_html(template, ctx))


def build_outcomes(ctx: Dict[str, Any]) -> DocumentSection:
    if ctx["success"]:
        body = render_html(
            "<p>We have identified clear, measurable outcomes for this work:</p>"
            "<p>{{ success }}</p>"
            "<p>We will use a combination of pre- and post-intervention surveys, case studies, and regular "
            "monitoring to track progress against these outcomes. Our evaluation approach will capture both "
            "quantitative data and qualitative stories of change.</p>",
            ctx,
        )
    elif "success" in ctx["uncertain"]:
        body = render_html(
            "<p><em>[Outcomes and success measures to be defined — funders want specific, measurable "
            "outcomes. Consider what will change for your beneficiaries and how you will evidence that "
            "change.]</em></p>",
            ctx,
        )
    else:
        body = render_html(
            "<p>Our {{ kind }} will deliver measurable outcomes for {{ beneficiaries }}. We will track impact "
            "through regular monitoring and evaluation, using a mix of quantitative measures and qualitative "
            "case studies to demonstrate the difference our work makes.</p>"
            "<p><em>[Add specific, measurable outcomes here. For example: \"80% of participants will report "
            "improved confidence\" or \"50 people will gain accredited qualifications.\"]</em></p>",
            ctx,
        )
    return DocumentSection(title="Outcomes and Impact", body=body)


def build_sustainability(ctx: Dict[str, Any]) -> DocumentSection:
    if ctx["sustainability"]:
        body = render_html(
            "<p>{{ sustainability }}</p>"
            "<p>We are committed to ensuring that the impact of this work extends well beyond the funding "
            "period, and have developed a clear plan for sustaining both the activities and the outcomes "
            "achieved.</p>",
            ctx,
        )
    elif "sustainability" in ctx["uncertain"]:
        body = render_html(
            "<p><em>[Sustainability plan to be developed — funders will want to know what happens when "
            "the funding ends. Consider how you will continue the work through other funding, earned income, "
            "volunteering, or by embedding it in existing services.]</em></p>",
            ctx,
        )
    else:
        body = render_html(
            "<p>We have a clear plan for sustaining the impact of this work beyond the funding period. "
            "{% if one_off %}While this is a time-limited project, we will ensure that the learning, "
            "resources, and relationships developed are embedded in our ongoing work. We will also actively "
            "explore additional funding to continue successful elements."
            "{% else %}We are developing diverse income streams to reduce reliance on any single funder, "
            "including exploring earned income opportunities, volunteer capacity, and partnership delivery "
            "models.{% endif %}</p>"
            "<p><em>[Describe what will happen when this funding ends: which activities continue, who pays "
            "for them, and what stays in place.]</em></p>",
            ctx,
        )
    return DocumentSection(title="Sustainability", body=body)


_BUDGET_TAIL = (
    "to deliver this {{ kind }}. This represents excellent value for money"
    "{% if reach %}, with a per-beneficiary cost that reflects the depth and quality of our approach{% endif %}"
    ". A detailed budget breakdown is available on request.</p>"
)


def build_budget(ctx: Dict[str, Any]) -> DocumentSection:
    if ctx["amount_answered"]:
        body = render_html(
            "<p>We are requesting {{ amount }} "
            "{% if duration_answered %}over {{ duration }} {% endif %}" + _BUDGET_TAIL,
            ctx,
        )
    elif "amount" in ctx["uncertain"]:
        body = render_html(
            "<p><em>[Funding amount to be confirmed — funders expect a specific figure backed by a clear "
            "breakdown. Cost out staffing, activities and overheads before submitting.]</em></p>",
            ctx,
        )
    else:
        body = render_html(
            "<p>We are requesting funding "
            "{% if duration_answered %}over {{ duration }} {% endif %}" + _BUDGET_TAIL +
            "<p><em>[Add the specific amount you are requesting and summarise how it will be spent.]</em></p>",
            ctx,
        )
    return DocumentSection(title="Budget Summary", body=body)


def build_closing(ctx: Dict[str, Any]) -> DocumentSection:
    body = render_html(
        "<p>We believe this {{ kind }} strongly aligns with {{ funder.name }}'s commitment to "
        "{{ funder.focus }}. We would welcome the opportunity to discuss this proposal further and are "
        "happy to provide any additional information required.</p>"
        "<p>Thank you for considering our application. We look forward to hearing from you.</p>",
        ctx,
    )
    return DocumentSection(title="Closing", body=body)


SECTION_BUILDERS: List[Callable[[Dict[str, Any]], DocumentSection]] = [
    build_introduction,
    build_need,
    build_project,
    build_outcomes,
    build_sustainability,
    build_budget,
    build_closing,
]


# ---------- Alignment notes ----------
_ALIGNMENT = (
    "<ul>"
    "<li><strong>Language alignment:</strong> Your bid mirrors {{ funder.name }}'s terminology. "
    "Key phrases to use: <em>{{ funder.language | join(', ') }}</em>.</li>"
    "<li><strong>Priority match:</strong> Your focus on {{ beneficiaries }} aligns with their priority of "
    "<em>{{ top_value }}</em>.</li>"
    "{% if has_evidence %}"
    "<li><strong>Evidence base:</strong> You've included evidence of need, which significantly strengthens "
    "your application.</li>"
    "{% else %}"
    "<li><strong>Evidence gap:</strong> Adding local or national statistics would strengthen your case. "
    "Include sources and dates.</li>"
    "{% endif %}"
    "{% if has_outcomes %}"
    "<li><strong>Outcomes:</strong> You've outlined what success looks like. Ensure these are specific and "
    "measurable.</li>"
    "{% endif %}"
    "<li><strong>Funder insight:</strong> {{ funder.tip }}</li>"
    "</ul>"
)


def build_alignment_notes(ctx: Dict[str, Any]) -> str:
    return render_html(_ALIGNMENT, ctx)


def render_sections(sections: List[DocumentSection]) -> str:
    return join_html(*[
        render_html("<h4>{{ title }}</h4>", {"title": s.title}) + s.body for s in sections
    ])


def synthesize(
    answers: Mapping[str, Any],
    funder_profile: FunderProfile,
    display_facts: Mapping[str, Any],
    mode: str,
    raw_input: str,
    uncertainty: Iterable[str] = (),
) -> SynthesisResult:
    """
    Render the seven-section funding request and its alignment notes.
    Pure: identical inputs give identical output.
    """
    ctx = build_context(answers, funder_profile, display_facts, mode, raw_input, uncertainty)
    sections = [builder(ctx) for builder in SECTION_BUILDERS]
    logging.debug(f"[Synthesizer] built {len(sections)} sections in '{mode}' mode for '{funder_profile.name}'")
    return SynthesisResult(
        document=render_sections(sections),
        alignment=build_alignment_notes(ctx),
        sections=sections,
    )
