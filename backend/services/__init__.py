"""
Services module for external AI providers
"""

from .ai_service import AIService, get_ai_service
from .fal_client import FalClient, get_fal_client
from .openrouter_client import OpenRouterClient

__all__ = ["AIService", "get_ai_service", "FalClient", "get_fal_client", "OpenRouterClient"]
