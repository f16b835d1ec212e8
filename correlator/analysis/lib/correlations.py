import logging

from django.conf import settings
import openai
from ddtrace.trace import tracer

from adapters.openai import OpenAIAdapter, get_openai_adapter
from analysis.lib.report import generate_summary
from analysis.models import AnalysisResult, Dataset, MethodSuggestion
from core.correlation import correlate, describe_strength, select_method
from core.data_processing import align_datasets
from core.exceptions import (
    ExternalServiceError,
    InsufficientDataError,
    ParseError,
    UndefinedCorrelationError,
)
from core.parsing import parse_file

logger = logging.getLogger(__name__)


def load_dataset(
    name: str,
    contents: str | bytes,
    format_hint: str,
    time_field: str,
    value_field: str,
) -> Dataset:
    records = parse_file(contents, format_hint)
    if len(records) == 0:
        raise ParseError("File is empty or could not be parsed.")

    dataset = Dataset(
        name=name, records=records, time_field=time_field, value_field=value_field
    )
    dataset.check_fields()
    return dataset


def describe_dataset(dataset: Dataset) -> str:
    return f'A time-series dataset named "{dataset.name}" with numerical values.'


def suggest_method(
    adapter: OpenAIAdapter, dataset1: Dataset, dataset2: Dataset
) -> MethodSuggestion:
    try:
        suggestion = adapter.suggest_correlation_method(
            describe_dataset(dataset1), describe_dataset(dataset2)
        )
    except openai.OpenAIError as e:
        logger.exception("Correlation method suggestion failed")
        raise ExternalServiceError(
            "A correlation method could not be suggested."
        ) from e

    if suggestion is None:
        raise ExternalServiceError("A correlation method could not be suggested.")
    return suggestion


@tracer.wrap("correlations.run_analysis")
def run_analysis(
    dataset1: Dataset,
    dataset2: Dataset,
    adapter: OpenAIAdapter | None = None,
) -> AnalysisResult:
    """Align two datasets, correlate them and summarize the result.

    Input problems are raised before the language model is called.
    """
    dataset1.check_fields()
    dataset2.check_fields()

    aligned_data = align_datasets(dataset1, dataset2)
    if len(aligned_data) < settings.MIN_ALIGNED_POINTS:
        raise InsufficientDataError(
            "Not enough overlapping data points to perform analysis. "
            "Please check your datasets and timestamps."
        )

    if adapter is None:
        adapter = get_openai_adapter()

    suggestion = suggest_method(adapter, dataset1, dataset2)
    method = select_method(suggestion.suggested_method)

    x = [point.value1 for point in aligned_data]
    y = [point.value2 for point in aligned_data]
    result = correlate(x, y, method)
    if not result.is_defined:
        raise UndefinedCorrelationError(
            "Correlation could not be calculated. This might be due to a lack "
            "of variation in one of your datasets."
        )

    logger.info(
        "%s correlation between %s and %s over %d days: %.4f",
        method.value,
        dataset1.name,
        dataset2.name,
        len(aligned_data),
        result.coefficient,
    )

    summary = generate_summary(adapter, dataset1, dataset2, suggestion, result)

    return AnalysisResult(
        aligned_data=aligned_data,
        correlation=result.coefficient,
        method=suggestion.suggested_method,
        correlation_method=result.method,
        reasoning=suggestion.reasoning,
        summary=summary,
        strength=describe_strength(result.coefficient),
        dataset1_name=dataset1.name,
        dataset2_name=dataset2.name,
        dataset1_value_field=dataset1.value_field,
        dataset2_value_field=dataset2.value_field,
    )
