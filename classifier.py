"""
Tech stack classifier used when seeding the catalog.

A community is labelled by walking RULES in order and taking the first rule
that matches. A rule matches when any of its keywords hits:

- ``title``: substring of the lowercased title
- ``tags``: equal to one of the lowercased tags
- ``text``: substring of the lowercased title, descriptions and tags joined together

The Python rule carries refinements (Django, Flask) that are only consulted
once Python has matched. Standalone Django and Flask rules further down the
chain catch records that never matched Python.
"""
from typing import Any, Mapping, NamedTuple, Optional, Tuple

CANONICAL_STACKS = ("React", "Node.js", "Python", "Machine Learning", "Vue", "Angular", "Django", "Flask")
FALLBACK_STACK = "General"


class Signals(NamedTuple):
    title: str
    tags: Tuple[str, ...]
    text: str


class Rule(NamedTuple):
    label: str
    title: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    text: Tuple[str, ...] = ()
    refinements: Tuple["Rule", ...] = ()

    def matches(self, signals: Signals) -> bool:
        return (
            any(k in signals.title for k in self.title)
            or any(k in signals.tags for k in self.tags)
            or any(k in signals.text for k in self.text)
        )

    def resolve(self, signals: Signals) -> "Rule":
        for refinement in self.refinements:
            if refinement.matches(signals):
                return refinement
        return self


RULES = (
    Rule(
        "React",
        title=("react", "reactiflux", "next.js", "nextjs", "remix", "react native"),
        tags=("react", "next.js", "nextjs"),
        text=("react.js", "reactjs", "react framework", "jsx"),
    ),
    Rule(
        "Node.js",
        title=("node", "nodeiflux", "express.js", "expressjs"),
        tags=("node.js", "nodejs", "node", "express"),
        text=("node.js", "nodejs", "express.js", "backend js", "server-side js"),
    ),
    Rule(
        "Python",
        title=("python", "pyslackers", "real python", "r/python", "python cpython"),
        tags=("python",),
        text=("python programming", "pythonista"),
        refinements=(
            Rule("Django", title=("django",), tags=("django",), text=("django framework",)),
            Rule("Flask", title=("flask",), tags=("flask",), text=("flask framework",)),
        ),
    ),
    Rule(
        "Django",
        title=("django",),
        tags=("django",),
        text=("django framework", "django web"),
    ),
    Rule(
        "Flask",
        title=("flask",),
        tags=("flask",),
        text=("flask framework", "flask web"),
    ),
    Rule(
        "Machine Learning",
        title=(
            "machine learning",
            "ml",
            "ai",
            "artificial intelligence",
            "tensorflow",
            "pytorch",
            "deep learning",
            "neural",
            "kaggle",
            "fast.ai",
            "learnmachinelearning",
            "machinelearning",
        ),
        tags=("machine learning", "ml", "ai", "tensorflow", "pytorch", "deep learning"),
        text=("neural network", "data science", "data scientist", "ml model", "ai model"),
    ),
    Rule(
        "Vue",
        title=("vue", "nuxt"),
        tags=("vue", "vue.js", "vuejs", "nuxt"),
        text=("vue.js", "vuejs", "nuxt.js"),
    ),
    Rule(
        "Angular",
        title=("angular",),
        tags=("angular", "angular.js"),
        text=("angular.js", "angular framework", "typescript framework"),
    ),
)


def extract_signals(community: Mapping[str, Any]) -> Signals:
    title = (community.get("title") or "").lower()
    tags = tuple(t.lower() for t in (community.get("tags") or []))
    description = (community.get("description") or "").lower()
    full_description = (community.get("full_description") or "").lower()
    text = f"{title} {description} {full_description} {' '.join(tags)}"
    return Signals(title=title, tags=tags, text=text)


def match_rule(community: Mapping[str, Any]) -> Optional[Rule]:
    """Return the rule that labels this community, refinements applied, or None."""
    signals = extract_signals(community)
    for rule in RULES:
        if rule.matches(signals):
            return rule.resolve(signals)
    return None


def classify(community: Mapping[str, Any]) -> str:
    rule = match_rule(community)
    if rule is not None:
        return rule.label

    existing = (community.get("tech_stack") or "").strip()
    if existing in CANONICAL_STACKS:
        return existing
    return existing or FALLBACK_STACK
