from __future__ import annotations

from fastapi import APIRouter, Depends

from input_processing.localization import detect_language, get_language_direction, translate
from input_processing.request_pipeline import RequestPipeline
from input_processing.stages.security_scanner import compliance_score, generate_security_report
from input_processing.stages.vibe import determine_layout_style, generate_vibe_prompt

from ..schemas import (
    ComplianceModel,
    ScanResultModel,
    SecurityScanRequest,
    SecurityScanResponse,
    VibeAnalysisModel,
    VibeRequest,
    VibeResponse,
)
from ..services.pipeline_factory import get_pipeline

router = APIRouter(tags=["analysis"])


@router.post("/vibe", response_model=VibeResponse)
def vibe(req: VibeRequest, pipeline: RequestPipeline = Depends(get_pipeline)) -> VibeResponse:
    """
    POST /vibe
    - Aesthetic classification of a free-text description
    - Returns the analysis, layout style and a localized design prompt
    - Language is detected from the script of the text when not given
    """
    language = req.language or detect_language(req.text)
    analysis = pipeline.vibe_scorer.detect_vibe(req.text, req.cultural_background)
    return VibeResponse(
        analysis=VibeAnalysisModel.model_validate(analysis.to_dict()),
        layout_style=determine_layout_style(analysis.primary_vibe),
        prompt=generate_vibe_prompt(analysis, language),
        language=language,
        direction=get_language_direction(language),
        primary_vibe_label=translate("primaryVibe", language),
    )


@router.post("/security/scan", response_model=SecurityScanResponse)
def security_scan(
    req: SecurityScanRequest, pipeline: RequestPipeline = Depends(get_pipeline)
) -> SecurityScanResponse:
    """
    POST /security/scan
    - Pattern scan for vulnerability classes
    - Compliance controls, score and a Markdown report
    """
    scanner = pipeline.security_scanner
    result = scanner.scan(req.code)
    framework = scanner.compliance_check(req.code)
    return SecurityScanResponse(
        result=ScanResultModel.model_validate(result.to_dict()),
        compliance=ComplianceModel.from_framework(framework, compliance_score(framework)),
        report=generate_security_report(result, framework),
    )
