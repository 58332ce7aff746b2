from core.scorer.normalizer import NormalizedProfile
from core.scorer.rubric import RubricTables, DEFAULT_RUBRIC


def _text_bag(profile: NormalizedProfile) -> str:
    tokens = []
    for items in (profile.personality, profile.values, profile.interests):
        if items:
            tokens.extend(items)
    if profile.body_type:
        tokens.append(profile.body_type)
    return " ".join(token.lower() for token in tokens)


def classify_persona(profile: NormalizedProfile, tables: RubricTables = DEFAULT_RUBRIC) -> str:
    """Pick the persona whose keywords appear most often in the profile text.

    Ties go to the persona declared first; no hits at all yields the
    default persona.
    """
    bag = _text_bag(profile)
    best_persona = tables.default_persona
    best_hits = 0

    for persona, keywords in tables.personas:
        hits = sum(1 for keyword in keywords if keyword in bag)
        if hits > best_hits:
            best_persona = persona
            best_hits = hits

    return best_persona
