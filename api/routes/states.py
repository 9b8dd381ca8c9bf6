from fastapi import APIRouter, HTTPException, Request

from api.schemas import PreloadResponse
from services.batch_service import BatchLoadError, preload_state
from services.boundary_service import BoundaryLoadError, annotate_boundaries, fetch_zip_boundaries


router = APIRouter()


def _state_or_400(state: str) -> str:
    code = state.strip().upper()
    if len(code) != 2 or not code.isalpha():
        raise HTTPException(status_code=400, detail=f"Invalid state code: {state!r}")
    return code


@router.get("/state/{state}/boundaries")
def get_state_boundaries(request: Request, state: str):
    """ZIP GeoJSON of a state, annotated with rank and colors from the cache"""
    try:
        collection = fetch_zip_boundaries(request.app.state.transport, _state_or_400(state))
        return annotate_boundaries(collection, request.app.state.cache)

    except BoundaryLoadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get boundaries: {str(e)}")


@router.post("/state/{state}/preload", response_model=PreloadResponse)
def preload_state_data(request: Request, state: str):
    """Load latest incomes and crime grades of a state in one go"""
    try:
        summary = preload_state(request.app.state.transport, _state_or_400(state), request.app.state.cache)
        return PreloadResponse(
            state=summary.state,
            incomes_loaded=summary.incomes_loaded,
            grades_loaded=summary.grades_loaded,
        )

    except BatchLoadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to preload {state}: {str(e)}")
