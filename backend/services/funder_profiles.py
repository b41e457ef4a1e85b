# backend/services/funder_profiles.py
import logging
from typing import Any, Dict, List, Tuple

from models import FunderProfile

# Known funders, checked in this order; first keyword hit wins.
# "lottery heritage" names therefore resolve to the lottery profile.
FUNDER_REGISTRY: List[Tuple[str, Dict[str, Any]]] = [
    ("National Lottery Community Fund", {
        "keywords": ["lottery", "national lottery"],
        "focus": "community-led change, reaching underserved groups, and building stronger communities",
        "values": [
            "Community voice and ownership",
            "Reaching people most in need",
            "Strengths-based approaches",
            "Partnerships and collaboration",
            "Learning and evaluation",
        ],
        "tip": (
            "The National Lottery Community Fund particularly values applications where the community "
            "has been involved in designing the project. Consider adding specific examples of community "
            "consultation."
        ),
        "language": ["community-led", "strengths-based", "people and places", "co-design"],
    }),
    ("Comic Relief", {
        "keywords": ["comic relief"],
        "focus": "tackling poverty and social injustice, with a strong emphasis on lived experience and systemic change",
        "values": [
            "Lived experience leadership",
            "Tackling root causes of poverty",
            "Social justice and equity",
            "Power-shifting to communities",
            "Sustainable impact",
        ],
        "tip": (
            "Comic Relief prioritises organisations led by people with lived experience of the issues "
            "they address. Highlight any lived experience within your team or governance."
        ),
        "language": ["lived experience", "power-shifting", "systemic change", "social justice"],
    }),
    ("Lloyds Bank Foundation", {
        "keywords": ["lloyds", "lloyd"],
        "focus": "helping people overcome complex social issues through long-term, flexible partnerships",
        "values": [
            "Addressing complex social issues",
            "Unrestricted funding approaches",
            "Organisational development",
            "Long-term partnerships",
            "Reaching those most disadvantaged",
        ],
        "tip": (
            "Lloyds Foundation focuses on small and medium-sized charities. Emphasise your organisation's "
            "deep connection to the communities you serve and your track record of impact."
        ),
        "language": ["complex social issues", "unrestricted", "flexible", "partnership"],
    }),
    ("Heritage Fund", {
        "keywords": ["heritage", "lottery heritage"],
        "focus": "involving people and communities in heritage, broadening access, and building skills for heritage",
        "values": [
            "Widening access to heritage",
            "Inclusion and diversity",
            "Building heritage skills",
            "Community engagement",
            "Environmental sustainability",
        ],
        "tip": (
            "Heritage Fund applications score well when they demonstrate genuine community involvement "
            "in heritage and clear plans for widening access to underrepresented groups."
        ),
        "language": ["heritage", "access", "inclusion", "skills development"],
    }),
]

GENERIC_FOCUS = (
    "community impact, sustainability, and evidence-based approaches to social change, "
    "in line with {name}'s stated priorities"
)
GENERIC_VALUES = [
    "Demonstrated community need",
    "Clear outcomes and impact measurement",
    "Value for money",
    "Sustainability beyond the funding period",
    "Partnership working",
]
GENERIC_TIP = (
    "Research {name}'s latest annual report and funding guidelines for their current strategic "
    "priorities. Tailoring your language to match their framework significantly strengthens applications."
)
GENERIC_LANGUAGE = ["impact", "outcomes", "evidence-based", "sustainability"]


def _match_registry(funder_name: str) -> Tuple[str, Dict[str, Any]]:
    lower = (funder_name or "").lower()
    for canonical, meta in FUNDER_REGISTRY:
        if any(k in lower for k in meta["keywords"]):
            return canonical, meta
    return "", {}


def resolve_funder_profile(funder_name: str) -> FunderProfile:
    """
    Map a funder name to its profile. Case-insensitive substring match against the
    registry; anything unrecognised gets the generic profile with the name woven into the tip.
    Never raises.
    """
    name = funder_name or ""
    canonical, meta = _match_registry(name)
    if meta:
        logging.debug(f"[FunderProfile] '{name}' matched registry entry '{canonical}'")
        return FunderProfile(
            name=name,
            focus=meta["focus"],
            values=list(meta["values"]),
            tip=meta["tip"],
            language=list(meta["language"]),
        )

    logging.debug(f"[FunderProfile] '{name}' not in registry, using generic profile")
    return FunderProfile(
        name=name,
        focus=GENERIC_FOCUS.format(name=name),
        values=list(GENERIC_VALUES),
        tip=GENERIC_TIP.format(name=name),
        language=list(GENERIC_LANGUAGE),
    )
