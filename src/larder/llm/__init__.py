"""Text generation collaborator and pantry assistant."""

from .assistant import PantryAssistant, TextGenerationBackend
from .client import LLMConfig, TextGenerator, build_text_generator
from .parsing import extract_json_array

__all__ = [
    "LLMConfig",
    "PantryAssistant",
    "TextGenerationBackend",
    "TextGenerator",
    "build_text_generator",
    "extract_json_array",
]
