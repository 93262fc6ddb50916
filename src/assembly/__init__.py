"""Stage-3 assembly of the job-specific resume.

Public API:
    - ResumeAssembler: Joins selections onto the master record
    - SummaryGenerator / SummaryError: Regenerated summary
    - AssemblyConfig: Threshold and caps
"""

from src.assembly.assembler import ResumeAssembler
from src.assembly.config import AssemblyConfig
from src.assembly.summary import SummaryError, SummaryGenerator

__all__ = [
    "ResumeAssembler",
    "SummaryGenerator",
    "SummaryError",
    "AssemblyConfig",
]
