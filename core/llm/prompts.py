import json
from typing import Dict, List, Optional

REFINEMENT_SYSTEM_PROMPT = (
    "You are a comprehensive dating profile evaluator. "
    "Return valid JSON with refined score and reasoning."
)

REFINEMENT_USER_TEMPLATE = """Profile Analysis:
Bio: {bio}
Personality: {personality}
Values: {values}
Interests: {interests}
Education: {education}
Physical: {physical}
Mental: {mental}
Description: {description}

Rule-based Score: {rule_score}
Detected Persona: {persona}
Key Behaviors: {behaviors}

Return JSON: {{"final_score": number, "reason": "string", "persona": "{persona}", "insights": "brief analysis"}}"""


def _as_json(value) -> str:
    return json.dumps(value if value else "Not provided")


def build_refinement_messages(
    profile: Dict,
    rule_score: float,
    persona: str,
    behaviors: List[str],
    physical: Optional[str] = None,
    mental: Optional[str] = None,
    description: Optional[str] = None,
) -> List[Dict[str, str]]:
    """Messages asking the model to refine the rule-based score.

    `profile` is a NormalizedProfile dict; the optional hints come from the
    scoring request and only shape the prompt.
    """
    user_prompt = REFINEMENT_USER_TEMPLATE.format(
        bio=profile.get("bio") or "Not provided",
        personality=_as_json(profile.get("personality")),
        values=_as_json(profile.get("values")),
        interests=_as_json(profile.get("interests")),
        education=profile.get("field_of_study") or "Not provided",
        physical=physical or "Not provided",
        mental=mental or "Not provided",
        description=description or profile.get("bio") or "Not provided",
        rule_score=round(rule_score, 2),
        persona=persona,
        behaviors=", ".join(behaviors) or "None",
    )
    return [
        {"role": "system", "content": REFINEMENT_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]
