from functools import cache
import json

from django.conf import settings
import openai

from analysis.models import CorrelationInsight, MethodSuggestion

SUGGEST_METHOD_PROMPT = (
    "You are an expert statistician. Based on the descriptions of two datasets, "
    "suggest the most appropriate statistical correlation method to use. "
    "Consider the data types, distributions, and potential non-linear relationships "
    "when making your suggestion. Provide a clear reasoning for your choice. "
    "You should return your response in a JSON format. \n A sample schema is: \n "
    "{ \n 'suggestedMethod': 'Pearson', \n 'reasoning': 'Reasoning behind the suggested method' \n } \n"
)

SUMMARIZE_PROMPT = (
    "You are an expert data analyst tasked with summarizing the key findings from a "
    "correlation analysis between two datasets. Provide a concise, human-readable summary "
    "of the key insights, highlighting statistically significant correlations and potential "
    "relationships between the datasets. Focus on the most important and actionable findings "
    "for a health researcher or individual practicing self-quantification. Mention the "
    "potential relationships and further investigations that should be considered, and the "
    "caveats of the analysis. You should return your response in a JSON format. \n "
    "A sample schema is: \n { \n 'summary': 'Summary of the insights' \n } \n"
)


class OpenAIAdapter:
    def __init__(self):
        self.api_key = settings.OPENAI_API_KEY
        if self.api_key is None:
            raise ValueError("OPENAI_API_KEY is not set in settings.py")
        self.model = settings.OPENAI_MODEL
        self.client = openai.OpenAI(
            api_key=self.api_key,
            timeout=settings.OPENAI_TIMEOUT,
            max_retries=settings.OPENAI_MAX_RETRIES,
        )

    def _complete_json(self, system_prompt: str, input_text: str) -> dict | None:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": system_prompt,
                },
                {
                    "role": "user",
                    "content": input_text,
                },
            ],
            response_format={"type": "json_object"},
        )

        choices = response.choices
        if len(choices) == 0:
            return None

        content = choices[0].message.content
        if content is None:
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            return None

        if not isinstance(data, dict):
            return None
        return data

    def suggest_correlation_method(
        self, dataset1_description: str, dataset2_description: str
    ) -> MethodSuggestion | None:
        content = (
            f"Dataset 1 Description: {dataset1_description}\n"
            f"Dataset 2 Description: {dataset2_description}"
        )
        data = self._complete_json(SUGGEST_METHOD_PROMPT, content)
        if data is None or not isinstance(data.get("suggestedMethod"), str):
            return None

        return MethodSuggestion(
            suggested_method=data["suggestedMethod"],
            reasoning=str(data.get("reasoning", "")),
        )

    def summarize_insights(
        self,
        dataset1_name: str,
        dataset2_name: str,
        correlation_description: str,
        significant_correlations: list[CorrelationInsight],
    ) -> str | None:
        correlations_text = "\n".join(
            format_insight(insight) for insight in significant_correlations
        )
        content = (
            f"Dataset 1 Name: {dataset1_name}\n"
            f"Dataset 2 Name: {dataset2_name}\n"
            f"Correlation Description: {correlation_description}\n"
            f"Significant Correlations:\n{correlations_text}"
        )
        data = self._complete_json(SUMMARIZE_PROMPT, content)
        if data is None or not isinstance(data.get("summary"), str):
            return None

        return data["summary"]


def format_insight(insight: CorrelationInsight) -> str:
    text = f"- {insight.item1} and {insight.item2}: Correlation = {insight.correlation}"
    if insight.p_value is not None:
        text += f", p-value = {insight.p_value}"
    return text


@cache
def get_openai_adapter() -> OpenAIAdapter:
    return OpenAIAdapter()
