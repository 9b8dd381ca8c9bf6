from fastapi import APIRouter, Query, HTTPException, Request
from typing import Optional

from api.schemas import ChartResponse, IncomeHistoryResponse, ZipRankResponse
from core.formatting import format_usd
from core.parsing import normalize_zip
from services import ranking_service
from services.chart_service import build_income_figure
from services.income_fetcher import InvalidConfigurationError
from services.serialization import series_payload, to_jsonable


router = APIRouter()


def _zip_or_400(zip_code: str) -> str:
    normalized = normalize_zip(zip_code)
    if normalized is None:
        raise HTTPException(status_code=400, detail=f"Invalid ZIP code: {zip_code!r}")
    return normalized


@router.get("/zip/{zip_code}/income-history", response_model=IncomeHistoryResponse)
def get_income_history(
    request: Request,
    zip_code: str,
    current_year: Optional[int] = Query(None, description="First (most recent) year to query"),
    max_samples: Optional[int] = Query(None, description="Max number of yearly records"),
    min_year: Optional[int] = Query(None, description="Oldest year allowed"),
):
    """Median income history of a ZIP code (oldest year first)"""
    try:
        series = ranking_service.income_series(
            _zip_or_400(zip_code),
            fetcher=request.app.state.fetcher,
            cache=request.app.state.cache,
            current_year=current_year,
            max_samples=max_samples,
            min_year=min_year,
        )
        return series_payload(series)

    except InvalidConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get income history: {str(e)}")


@router.get("/zip/{zip_code}/rank", response_model=ZipRankResponse)
def get_zip_rank(
    request: Request,
    zip_code: str,
    grade: Optional[str] = Query(None, description="Crime grade override (A+ .. F)"),
):
    """S/A/B/C/D (or N/A) rank of a ZIP code, with display colors"""
    try:
        ranking = ranking_service.rank_zip(
            _zip_or_400(zip_code),
            fetcher=request.app.state.fetcher,
            cache=request.app.state.cache,
            grade=grade,
        )
        payload = to_jsonable(ranking)
        payload["median_income_display"] = format_usd(ranking.median_income)
        return payload

    except InvalidConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to rank ZIP {zip_code}: {str(e)}")


@router.get("/zip/{zip_code}/chart", response_model=ChartResponse)
def get_income_chart(request: Request, zip_code: str):
    """Plotly figure of the median income history"""
    try:
        normalized = _zip_or_400(zip_code)
        series = ranking_service.income_series(
            normalized,
            fetcher=request.app.state.fetcher,
            cache=request.app.state.cache,
        )
        figure = build_income_figure(series)
        return {"zip_code": normalized, "figure": to_jsonable(figure)}

    except InvalidConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to build chart: {str(e)}")
