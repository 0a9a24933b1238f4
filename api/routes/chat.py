from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse
from starlette import status

from input_processing.request_pipeline import (
    Admitted,
    ContentBlocked,
    RateLimited,
    RequestPipeline,
    ValidationFailed,
)

from ..errors import json_error_response
from ..schemas import (
    ChatPrepareRequest,
    ChatPrepareResponse,
    ChatResponseAnalysis,
    ChatResponseRequest,
    CodeRequestModel,
    ComplianceModel,
    GenerationModel,
    PreparedMessage,
    ScanResultModel,
    SentimentModel,
)
from ..services.pipeline_factory import get_pipeline

if TYPE_CHECKING:
    from input_processing.stages.rate_limiter import RateLimitStatus

router = APIRouter(prefix="/chat", tags=["chat"])


def caller_identity(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket address, else "anonymous"."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client is not None and request.client.host:
        return request.client.host
    return "anonymous"


def rate_limit_headers(rl: RateLimitStatus) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(rl.limit),
        "X-RateLimit-Remaining": str(rl.remaining),
        "X-RateLimit-Reset": str(int(rl.reset_at)),
    }


@router.post(
    "/prepare",
    response_model=ChatPrepareResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {}, 429: {}},
)
def prepare(
    body: ChatPrepareRequest,
    request: Request,
    pipeline: RequestPipeline = Depends(get_pipeline),
) -> Any:
    """
    POST /chat/prepare
    - Rate limit, validate, moderate and classify a conversation
    - Returns the system prompt and model tier for the downstream model call
    """
    outcome = pipeline.run(
        [m.model_dump() for m in body.messages],
        caller_identity(request),
        settings=body.settings,
        context=body.context.to_context() if body.context is not None else None,
    )

    if isinstance(outcome, RateLimited):
        rl = outcome.status
        return json_error_response(
            request=request,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code="ERR_RATE_LIMITED",
            error="Too Many Requests",
            message=rl.message or "Rate limit exceeded",
            headers={"Retry-After": str(rl.retry_after), **rate_limit_headers(rl)},
        )
    if isinstance(outcome, ValidationFailed):
        return json_error_response(
            request=request,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="ERR_VALIDATION",
            error="Validation Error",
            message="Invalid input",
            details=list(outcome.errors),
        )
    if isinstance(outcome, ContentBlocked):
        return json_error_response(
            request=request,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="ERR_CONTENT_BLOCKED",
            error="Content Blocked",
            message="Content violates safety guidelines",
            details=list(outcome.reasons),
        )

    admitted = cast("Admitted", outcome)
    payload = ChatPrepareResponse(
        system_prompt=admitted.system_prompt,
        model_id=admitted.model_id,
        messages=[
            PreparedMessage(id=m.id, role=m.role.value, content=m.content) for m in admitted.messages
        ],
        request=CodeRequestModel.model_validate(admitted.request.to_dict()),
        sentiment=SentimentModel.model_validate(admitted.sentiment.to_dict()),
        generation=GenerationModel.from_settings(admitted.settings),
        warnings=list(admitted.warnings),
    )
    # Admission headers are informative on success too
    return ORJSONResponse(
        content=payload.model_dump(by_alias=True),
        headers=rate_limit_headers(admitted.rate_limit),
    )


@router.post("/response", response_model=ChatResponseAnalysis, response_model_exclude_none=True)
def analyze_response(
    body: ChatResponseRequest,
    pipeline: RequestPipeline = Depends(get_pipeline),
) -> ChatResponseAnalysis:
    """
    POST /chat/response
    - Extract fenced code blocks from model output
    - With scan=true (default), scan every synthetic file and score compliance
    """
    analysis = pipeline.process_response(body.content, scan=body.scan)
    compliance = None
    if analysis.compliance is not None and analysis.compliance_score is not None:
        compliance = ComplianceModel.from_framework(analysis.compliance, analysis.compliance_score)
    return ChatResponseAnalysis(
        blocks=[{"language": b.language, "code": b.code} for b in analysis.blocks],
        files=analysis.files,
        scans=(
            {name: ScanResultModel.model_validate(r.to_dict()) for name, r in analysis.scans.items()}
            if body.scan
            else None
        ),
        compliance=compliance,
    )
