import logging

import openai

from adapters.openai import OpenAIAdapter
from analysis.models import CorrelationInsight, CorrelationResult, Dataset, MethodSuggestion
from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def describe_correlation(suggestion: MethodSuggestion) -> str:
    return (
        f"Analysis was performed using the {suggestion.suggested_method} "
        f"correlation method. {suggestion.reasoning}"
    ).strip()


def generate_summary(
    adapter: OpenAIAdapter,
    dataset1: Dataset,
    dataset2: Dataset,
    suggestion: MethodSuggestion,
    result: CorrelationResult,
) -> str:
    insights = [
        CorrelationInsight(
            item1=dataset1.value_field,
            item2=dataset2.value_field,
            correlation=result.coefficient,
        )
    ]

    try:
        summary = adapter.summarize_insights(
            dataset1.name,
            dataset2.name,
            describe_correlation(suggestion),
            insights,
        )
    except openai.OpenAIError as e:
        logger.exception("Summary generation failed")
        raise ExternalServiceError("The summary could not be generated.") from e

    if summary is None:
        raise ExternalServiceError("The summary could not be generated.")
    return summary
