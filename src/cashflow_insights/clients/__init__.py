"""Remote text-generation clients."""

from cashflow_insights.clients.gemini import GeminiAnalysisClient, GenerationResult

__all__ = ["GeminiAnalysisClient", "GenerationResult"]
