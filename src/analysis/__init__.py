"""Job description analysis.

Public API:
    - JobDescriptionAnalyzer: LLM-backed analyzer
    - JobDescriptionAnalysis: Structured analysis model
    - AnalysisError: Raised for empty input or malformed responses
"""

from src.analysis.models import JobDescriptionAnalysis
from src.analysis.service import AnalysisError, JobDescriptionAnalyzer, parse_analysis

__all__ = [
    "JobDescriptionAnalyzer",
    "JobDescriptionAnalysis",
    "AnalysisError",
    "parse_analysis",
]
