"""Business services for PersonaBrief."""

from personabrief.services.analyzer import AnalyzerService
from personabrief.services.persona import PersonaService
from personabrief.services.pipeline import PersonaPipeline
from personabrief.services.script import ScriptService

__all__ = ["AnalyzerService", "PersonaService", "ScriptService", "PersonaPipeline"]
