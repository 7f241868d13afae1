"""Service-layer utilities."""

from .advisory import AiAdvisorySynthesizer, RuleBasedSynthesizer, synthesize_advisory
from .delivery import DeliveryOutcome, DeliveryPipeline, build_pipeline
from .reports import ReportService, ReportSubmission, SubmissionResult
from .weather import DemoWeatherProvider, WeatherApiClient, WeatherSnapshot

__all__ = [
    "synthesize_advisory",
    "RuleBasedSynthesizer",
    "AiAdvisorySynthesizer",
    "DeliveryOutcome",
    "DeliveryPipeline",
    "build_pipeline",
    "ReportService",
    "ReportSubmission",
    "SubmissionResult",
    "WeatherApiClient",
    "DemoWeatherProvider",
    "WeatherSnapshot",
]
