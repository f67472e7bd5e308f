import json
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status

from app.ai.config import load_analyzer_credentials, select_provider
from app.ai.types import NoProviderConfigured
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.core.resume_store import get_resume_store
from app.core.security import require_api_key
from app.parsing.parse import UnsupportedDocumentType, extract_text_from_bytes, source_type_for
from app.schemas.resumes import AnalyzerStatusResponse, ResumeAnalysisResponse, ResumeRecord
from app.services.analysis_pipeline import RESUME_KEY_PREFIX, ResumeAnalysisPipeline, resume_key

router = APIRouter()
logger = logging.getLogger(__name__)

DELETED_MARKER = "deleted"


def _load_record(raw: str | None) -> ResumeRecord | None:
    if not raw or raw == DELETED_MARKER:
        return None
    try:
        return ResumeRecord.model_validate(json.loads(raw))
    except ValueError as exc:
        logger.warning("resume_record_unreadable: %s", exc)
        return None


@router.post(
    "/resumes",
    response_model=ResumeAnalysisResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_key)],
)
@rate_limit()
def analyze_resume(
    request: Request,
    file: UploadFile = File(...),
    company_name: str = Form(default=""),
    job_title: str = Form(default=""),
    job_description: str = Form(default=""),
):
    _ = request
    filename = file.filename or "resume"
    try:
        source_type_for(filename)
    except UnsupportedDocumentType as exc:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc

    content = file.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum upload size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
        )
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    logger.info("resume_upload_received filename=%s bytes=%s", filename, len(content))

    pipeline = ResumeAnalysisPipeline(
        load_analyzer_credentials(),
        get_resume_store(),
        min_text_chars=settings.min_ocr_text_chars,
        provider_timeout_s=settings.provider_timeout_s,
    )
    outcome = pipeline.run(
        lambda: extract_text_from_bytes(content, filename).text,
        job_title.strip(),
        job_description.strip(),
        company_name=company_name.strip(),
        filename=filename,
    )
    return ResumeAnalysisResponse(
        id=outcome.resume_id,
        status=outcome.status,
        source=outcome.source,
        fallback_reason=outcome.fallback_reason,
        feedback=outcome.feedback.to_wire(),
        bands=outcome.feedback.score_bands(),
        status_history=outcome.status_history,
    )


@router.get("/resumes", response_model=list[ResumeRecord], dependencies=[Depends(require_api_key)])
def list_resumes():
    store = get_resume_store()
    records = []
    for key in store.list(RESUME_KEY_PREFIX):
        record = _load_record(store.get(key))
        if record is not None:
            records.append(record)
    return records


@router.get("/resumes/{resume_id}", response_model=ResumeRecord, dependencies=[Depends(require_api_key)])
def get_resume(resume_id: str):
    record = _load_record(get_resume_store().get(resume_key(resume_id)))
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found.")
    return record


@router.delete(
    "/resumes/{resume_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_api_key)],
)
def delete_resume(resume_id: str):
    store = get_resume_store()
    key = resume_key(resume_id)
    if _load_record(store.get(key)) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found.")
    store.set(key, DELETED_MARKER)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/analyzer/status", response_model=AnalyzerStatusResponse)
def analyzer_status():
    try:
        config = select_provider(load_analyzer_credentials())
    except NoProviderConfigured:
        return AnalyzerStatusResponse(ai_configured=False)
    return AnalyzerStatusResponse(ai_configured=True, provider=config.provider, model=config.model)
