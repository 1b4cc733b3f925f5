"""Processing orchestration module."""
from .processor import AnalysisOrchestrator, ProcessingResult

__all__ = ["AnalysisOrchestrator", "ProcessingResult"]
