"""
Virtual try-on orchestration on top of the Gemini image model.
"""
from .clients.gemini import GeminiImageClient
from .config import load_config
from .controller import TryOnController

__all__ = ["GeminiImageClient", "TryOnController", "load_config"]
