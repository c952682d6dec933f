"""
Client adapters for the Gemini image model.
"""
from .gemini import GeminiImageClient, extract_result

__all__ = ["GeminiImageClient", "extract_result"]
