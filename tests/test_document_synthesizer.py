import pytest

from services.document_synthesizer import DRAFT_SNIPPET_CHARS, synthesize
from services.funder_profiles import resolve_funder_profile
from services.question_catalog import ONE_OFF

LOTTERY = resolve_funder_profile("National Lottery Community Fund")

ANSWERS = {
    "amount": "£50,000",
    "fundingType": ONE_OFF,
    "duration": "1 year",
    "beneficiaries": "Young people",
    "reach": "200 young people",
    "success": "80% report improved wellbeing.",
}


def _section(result, title):
    return next(s for s in result.sections if s.title == title)


def test_seven_sections_in_order():
    result = synthesize(ANSWERS, LOTTERY, {}, "draft", "Our draft.")
    assert [s.title for s in result.sections] == [
        "Introduction", "The Need", "Our Project", "Outcomes and Impact",
        "Sustainability", "Budget Summary", "Closing",
    ]
    assert result.document.count("<h4>") == 7
    assert result.document.startswith("<h4>Introduction</h4>")


def test_introduction_contains_funder_focus_verbatim():
    result = synthesize(ANSWERS, LOTTERY, {}, "draft", "")
    intro = _section(result, "Introduction").body
    assert LOTTERY.focus in intro
    assert "National Lottery Community Fund" in intro
    assert "£50,000" in intro
    assert "a 1 year project" in intro


def test_notes_mode_uses_notes_templates():
    result = synthesize(ANSWERS, LOTTERY, {"projectTypes": ["Training", "Events"]}, "notes", "some notes")
    assert _section(result, "Introduction").body.startswith("<p>We are seeking £50,000")
    project = _section(result, "Our Project").body
    assert "will focus on training, events" in project
    assert "community voice and ownership and reaching people most in need" in project
    assert "From our proposal" not in project


def test_missing_funding_type_means_programme():
    answers = {k: v for k, v in ANSWERS.items() if k != "fundingType"}
    result = synthesize(answers, LOTTERY, {}, "draft", "")
    assert result.sections[2].title == "Our Programme"
    assert "ongoing work over 1 year" in result.sections[0].body


def test_defaults_when_nothing_answered():
    result = synthesize({}, LOTTERY, {}, "draft", "")
    intro = result.sections[0].body
    assert "the requested amount" in intro
    assert "the proposed period" in intro
    assert "our target beneficiaries" in intro


def test_user_text_is_escaped():
    answers = dict(ANSWERS, beneficiaries="<script>alert(1)</script> & friends")
    result = synthesize(answers, LOTTERY, {}, "draft", "<b>draft</b>")
    assert "<script>" not in result.document
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; friends" in result.document
    assert "&lt;b&gt;draft&lt;/b&gt;" in result.document
    assert "<script>" not in result.alignment


def test_draft_snippet_is_truncated():
    raw = "x" * (DRAFT_SNIPPET_CHARS + 100)
    project = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", raw), "Our Project").body
    assert "x" * DRAFT_SNIPPET_CHARS + "..." in project
    assert "x" * (DRAFT_SNIPPET_CHARS + 1) not in project


def test_short_draft_snippet_is_kept_whole():
    project = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", "Short draft."), "Our Project").body
    assert "<em>From our proposal:</em> Short draft.</p>" in project


def test_need_branches():
    answered = synthesize(dict(ANSWERS, evidence="ONS data shows 40% unemployment."), LOTTERY, {}, "draft", "")
    assert "ONS data shows 40% unemployment." in _section(answered, "The Need").body
    assert "Our project will directly reach 200 young people" in _section(answered, "The Need").body

    unsure = synthesize(dict(ANSWERS, evidence="ONS data."), LOTTERY, {}, "draft", "", {"evidence"})
    body = _section(unsure, "The Need").body
    assert "[Evidence of need to be added" in body
    assert "ONS data." not in body

    blank = synthesize(ANSWERS, LOTTERY, {}, "draft", "")
    assert "[Strengthen this section" in _section(blank, "The Need").body


def test_outcomes_branches():
    answered = synthesize(ANSWERS, LOTTERY, {}, "draft", "")
    assert "<p>80% report improved wellbeing.</p>" in _section(answered, "Outcomes and Impact").body

    unsure = synthesize(ANSWERS, LOTTERY, {}, "draft", "", {"success"})
    body = _section(unsure, "Outcomes and Impact").body
    assert "[Outcomes and success measures to be defined" in body
    assert "80% report improved wellbeing." not in unsure.document

    blank = synthesize({}, LOTTERY, {}, "draft", "")
    assert "[Add specific, measurable outcomes here." in _section(blank, "Outcomes and Impact").body


def test_sustainability_branches():
    answered = synthesize(dict(ANSWERS, sustainability="Embed in core services."), LOTTERY, {}, "draft", "")
    assert _section(answered, "Sustainability").body.startswith("<p>Embed in core services.</p>")

    unsure = synthesize(ANSWERS, LOTTERY, {}, "draft", "", {"sustainability"})
    assert "[Sustainability plan to be developed" in _section(unsure, "Sustainability").body

    one_off = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", ""), "Sustainability").body
    assert "time-limited project" in one_off
    assert "[Describe what will happen when this funding ends" in one_off

    ongoing = _section(synthesize({}, LOTTERY, {}, "draft", ""), "Sustainability").body
    assert "diverse income streams" in ongoing


def test_budget_branches():
    answered = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", ""), "Budget Summary").body
    assert "We are requesting £50,000 over 1 year to deliver this project." in answered
    assert "per-beneficiary cost" in answered

    unsure = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", "", {"amount"}), "Budget Summary").body
    assert "[Funding amount to be confirmed" in unsure
    assert "£50,000" not in unsure

    blank = _section(synthesize({}, LOTTERY, {}, "draft", ""), "Budget Summary").body
    assert blank.startswith("<p>We are requesting funding to deliver this programme.")
    assert "[Add the specific amount" in blank


def test_closing_mentions_funder():
    closing = _section(synthesize(ANSWERS, LOTTERY, {}, "draft", ""), "Closing").body
    assert "National Lottery Community Fund" in closing
    assert "Thank you for considering our application." in closing


@pytest.mark.parametrize("answers, facts, expected", [
    ({}, {}, 4),
    (ANSWERS, {}, 5),
    ({}, {"hasEvidence": True, "hasOutcomes": True}, 5),
])
def test_alignment_note_count(answers, facts, expected):
    result = synthesize(answers, LOTTERY, facts, "draft", "")
    assert result.alignment.count("<li>") == expected
    assert LOTTERY.tip in result.alignment


def test_alignment_evidence_notes():
    with_evidence = synthesize({}, LOTTERY, {"hasEvidence": True}, "draft", "").alignment
    assert "Evidence base:" in with_evidence
    assert "Evidence gap:" not in with_evidence
    without = synthesize({}, LOTTERY, {}, "draft", "").alignment
    assert "Evidence gap:" in without
    assert "community-led, strengths-based, people and places, co-design" in without


def test_synthesis_is_deterministic():
    first = synthesize(ANSWERS, LOTTERY, {"projectTypes": ["Staffing"]}, "notes", "notes", {"reach"})
    second = synthesize(ANSWERS, LOTTERY, {"projectTypes": ["Staffing"]}, "notes", "notes", {"reach"})
    assert first == second


def test_inputs_are_not_mutated():
    answers = dict(ANSWERS)
    facts = {"projectTypes": ["Events"]}
    synthesize(answers, LOTTERY, facts, "draft", "draft", {"amount"})
    assert answers == ANSWERS
    assert facts == {"projectTypes": ["Events"]}


def test_funder_name_is_escaped():
    funder = resolve_funder_profile("<script>x</script> & Co's Trust")
    result = synthesize(ANSWERS, funder, {}, "notes", "")
    for html in (result.document, result.alignment):
        assert "<script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt; &amp; Co&#39;s Trust" in html
