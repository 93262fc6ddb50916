"""Tailoring of selected resume bullets toward a target role.

Public API:
    - BulletTailor: Rewrites one bullet
    - TailoringStage: Stage-2 batch over the selection table
    - Rewritten / NotSuitable / TailorResult: Rewrite outcomes
    - TailoringError: Unusable answer or blank input
    - TailoringConfig: Tailoring settings
"""

from src.tailoring.config import TailoringConfig
from src.tailoring.models import NotSuitable, Rewritten, TailoringSummary, TailorResult
from src.tailoring.service import BulletTailor, TailoringError, parse_tailor_response
from src.tailoring.stage import TailoringStage

__all__ = [
    "BulletTailor",
    "TailoringStage",
    "Rewritten",
    "NotSuitable",
    "TailorResult",
    "TailoringSummary",
    "TailoringError",
    "TailoringConfig",
    "parse_tailor_response",
]
