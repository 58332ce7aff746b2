#!/usr/bin/env python3
"""
Scoring Module - QCS (quality/compatibility score) computation.

Public API:
- QCSScoringService: Main scoring service orchestrator
- QCSResult: Dataclass for a computed QCS

The module is split into focused, single-responsibility modules:

- rubric.py: Weight, alias and persona tables (RubricTables)
- normalizer.py: Loosely typed profile fields -> NormalizedProfile
- categories.py: Pure per-category fraction scorers
- engine.py: Deterministic weighted logic score
- persona.py / psychology.py: Persona label and Big-5 diagnostic
- components.py: Profile / college / personality / behavior breakdown
- blend.py: Logic + AI score blending
- persistence.py: Database writes (atomic, with sequential fallback)
- service.py: QCSScoringService orchestrator
"""

from core.scorer.models import QCSResult, AiPhaseResult
from core.scorer.service import QCSScoringService

__all__ = ['QCSScoringService', 'QCSResult', 'AiPhaseResult']
