from datetime import datetime
import math
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import List, Optional, Any, Dict, Union, Literal


class NumericSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int
    sum: float
    mean: float
    median: float
    min: float
    max: float
    std: float  # population standard deviation

    @field_serializer("sum", "mean", "median", "min", "max", "std")
    def serialize_finite(self, value: float) -> Optional[float]:
        # JSON has no inf; an overflowed sum is reported as null
        return value if math.isfinite(value) else None


class CategoricalSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    unique_values: int
    value_counts: Dict[str, int]  # first-seen order


class HistogramBin(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: str
    count: int
    start: float
    end: float


class PieSlice(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: int


class HistogramChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["histogram"] = "histogram"
    data: List[HistogramBin]


class PieChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["pie"] = "pie"
    data: List[PieSlice]


ChartSpec = Union[HistogramChart, PieChart]
ColumnSummary = Union[NumericSummary, CategoricalSummary]


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: Dict[str, ColumnSummary] = {}
    charts: Dict[str, ChartSpec] = {}
    insights: List[str] = []


class AnalysisOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    include_charts: bool = Field(default=True, alias="includeCharts")
    include_insights: bool = Field(default=True, alias="includeInsights")


class WorkflowRequest(BaseModel):
    data: List[Dict[str, Any]]
    options: AnalysisOptions = AnalysisOptions()


class FileAnalysis(BaseModel):
    file_name: str
    row_count: int
    column_count: int
    analysis: Dict[str, Any]


class WorkflowAnalysis(BaseModel):
    row_count: int
    column_count: int
    analysis: Dict[str, Any]
    timestamp: str
    request_id: str


class UploadedFile(BaseModel):
    file_name: str
    upload_time: datetime
    size: int
    path: str


class ApiResponse(BaseModel):
    status: str = "success"
    message: Optional[str] = None
    data: Optional[Any] = None
