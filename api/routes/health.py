from __future__ import annotations

from fastapi import APIRouter, Depends

from input_processing.request_pipeline import RequestPipeline

from ..schemas import HealthResponse
from ..services.pipeline_factory import get_pipeline

router = APIRouter()


@router.get("/health", tags=["system"], response_model=HealthResponse)
def health(pipeline: RequestPipeline = Depends(get_pipeline)) -> HealthResponse:
    """
    GET /health returns:
      {
        "status": "ok",
        "classifier": "external" | "local"
      }
    """
    return HealthResponse(
        status="ok",
        classifier="external" if pipeline.uses_external_classifier else "local",
    )
