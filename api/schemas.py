from pydantic import BaseModel, Field
from typing import Optional, List, Literal


# 1. GET /zip/{zip}/income-history
class YearlyValue(BaseModel):
    year: int
    value: Optional[float] = None


class IncomeHistoryResponse(BaseModel):
    zip_code: str
    records: List[YearlyValue] = Field(..., description="Oldest year first")
    start_year: int
    min_year: int
    max_samples: int
    requests_issued: int
    stopped_on_quota: bool


# 2. GET /zip/{zip}/rank
class ZipRankResponse(BaseModel):
    zip_code: str
    latest_year: Optional[int] = None
    median_income: Optional[float] = None
    median_income_display: str
    crime_grade: Optional[str] = None
    rank: Literal["S", "A", "B", "C", "D", "N/A"]
    rank_color: str
    grade_color: Optional[str] = None
    source: Literal["cache", "series", "none"]


# 3. GET /zip/{zip}/chart
class ChartResponse(BaseModel):
    zip_code: str
    figure: dict


# 4. POST /state/{state}/preload
class PreloadResponse(BaseModel):
    state: str
    incomes_loaded: int
    grades_loaded: int
