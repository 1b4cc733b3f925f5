"""LLM processing module."""
from .results import Ok, ParseError, LLMResult
from .vendor_cache import VendorCache
from .categorizer import LLMCategorizer

__all__ = ["Ok", "ParseError", "LLMResult", "VendorCache", "LLMCategorizer"]
