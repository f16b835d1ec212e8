import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import MissingFieldError


class CorrelationMethod(str, Enum):
    PEARSON = "Pearson"
    SPEARMAN = "Spearman"


class Dataset(BaseModel):
    name: str
    records: list[dict[str, Any]]
    time_field: str
    value_field: str

    @property
    def columns(self) -> list[str]:
        if len(self.records) == 0:
            return []
        return list(self.records[0].keys())

    def check_fields(self) -> None:
        """Raise MissingFieldError unless both selected fields are columns."""
        columns = self.columns
        for field in (self.time_field, self.value_field):
            if field not in columns:
                raise MissingFieldError(field, self.name)


class AlignedPoint(BaseModel):
    date: str
    value1: float
    value2: float


class CorrelationResult(BaseModel):
    coefficient: float
    method: CorrelationMethod

    @property
    def is_defined(self) -> bool:
        return not math.isnan(self.coefficient)


class MethodSuggestion(BaseModel):
    # Keys match the JSON the language model is asked to return
    model_config = ConfigDict(populate_by_name=True)

    suggested_method: str = Field(alias="suggestedMethod")
    reasoning: str = ""


class CorrelationInsight(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item1: str
    item2: str
    correlation: float
    p_value: float | None = Field(default=None, alias="pValue")


class AnalysisResult(BaseModel):
    aligned_data: list[AlignedPoint]
    correlation: float
    method: str
    correlation_method: CorrelationMethod
    reasoning: str
    summary: str
    strength: str

    dataset1_name: str
    dataset2_name: str
    dataset1_value_field: str
    dataset2_value_field: str
