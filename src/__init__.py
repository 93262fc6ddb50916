"""Resume tailoring pipeline: score, tailor and assemble a resume for a job."""

__version__ = "0.1.0"
