from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_current_uid, get_gateway, get_profile_store
from config import settings
from models.requests import (
    AtsAnalyzeRequest,
    ChatRequest,
    JobSuggestRequest,
    ResumeBuildRequest,
    ResumeTailorRequest,
    RewriteBulletsRequest,
)
from models.responses import (
    AtsAnalysisResponse,
    BulletsResponse,
    ChatResponse,
    HealthResponse,
    JobSuggestionsResponse,
    PingResponse,
    ResumeResponse,
)
from services import ats_analyzer, chat_assistant, job_suggester, pdf_parser, resume_builder
from services.generation_gateway import GenerationGateway
from services.profile_store import ProfileStore
from services.structured_generation import AIRequestError

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("/health", response_model=HealthResponse)
async def health(gateway: GenerationGateway = Depends(get_gateway)):
    return HealthResponse(status="ok", gemini_configured=gateway.configured)


@router.get("/ping", response_model=PingResponse)
async def ping(gateway: GenerationGateway = Depends(get_gateway)):
    return PingResponse(
        ok=True,
        key_count=len(gateway.pool),
        keys=gateway.pool.snapshot(),
    )


@router.post("/ats-analyzer", response_model=AtsAnalysisResponse)
@limiter.limit(settings.ats_rate_limit)
async def ats_analyzer_route(
    request: Request,
    body: AtsAnalyzeRequest,
    gateway: GenerationGateway = Depends(get_gateway),
):
    if not body.job_description.strip() or not body.resume_text.strip():
        raise HTTPException(
            status_code=400, detail="job_description and resume_text are required."
        )
    return await ats_analyzer.analyze(body.resume_text, body.job_description, gateway)


@router.post("/ats-analyzer/upload", response_model=AtsAnalysisResponse)
@limiter.limit(settings.ats_rate_limit)
async def ats_analyzer_upload(
    request: Request,
    resume_file: UploadFile = File(...),
    job_description: str = Form(...),
    gateway: GenerationGateway = Depends(get_gateway),
):
    # Validate file type
    if not resume_file.filename or not resume_file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    if not job_description.strip():
        raise HTTPException(status_code=400, detail="job_description is required.")

    try:
        resume_text = pdf_parser.extract_text(content)
    except Exception:
        raise HTTPException(status_code=400, detail="Could not parse PDF file")

    if not resume_text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from PDF")

    return await ats_analyzer.analyze(resume_text, job_description, gateway)


@router.post("/job-suggestions", response_model=JobSuggestionsResponse)
@limiter.limit(settings.ai_rate_limit)
async def job_suggestions(
    request: Request,
    body: JobSuggestRequest,
    gateway: GenerationGateway = Depends(get_gateway),
    profile_store: ProfileStore = Depends(get_profile_store),
    uid: str | None = Depends(get_current_uid),
):
    current_profile = body.current_profile.strip()
    interests = body.interests.strip()
    if not current_profile and not interests:
        raise HTTPException(
            status_code=400, detail="Provide at least current_profile or interests"
        )

    try:
        jobs = await job_suggester.suggest_jobs(
            gateway,
            current_profile,
            interests,
            body.location_pref.strip(),
            uid=uid,
            profile_store=profile_store,
        )
    except AIRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return JobSuggestionsResponse(ok=True, jobs=jobs, key_status=gateway.pool.snapshot())


@router.post("/resume-builder/ai-build", response_model=ResumeResponse)
@limiter.limit(settings.ai_rate_limit)
async def resume_ai_build(
    request: Request,
    body: ResumeBuildRequest,
    gateway: GenerationGateway = Depends(get_gateway),
):
    if not body.resume:
        raise HTTPException(status_code=400, detail="Missing resume")
    try:
        resume = await resume_builder.build_resume(gateway, body.resume, body.template)
    except AIRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ResumeResponse(ok=True, resume=resume)


@router.post("/resume-builder/tailor", response_model=ResumeResponse)
@limiter.limit(settings.ai_rate_limit)
async def resume_tailor(
    request: Request,
    body: ResumeTailorRequest,
    gateway: GenerationGateway = Depends(get_gateway),
):
    if not body.resume:
        raise HTTPException(status_code=400, detail="Missing resume")
    if not body.job_description.strip():
        raise HTTPException(status_code=400, detail="Missing job_description")
    try:
        resume = await resume_builder.tailor_resume(
            gateway, body.resume, body.job_description, body.template, body.target_role
        )
    except AIRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ResumeResponse(ok=True, resume=resume)


@router.post("/resume-builder/rewrite-bullets", response_model=BulletsResponse)
@limiter.limit(settings.ai_rate_limit)
async def resume_rewrite_bullets(
    request: Request,
    body: RewriteBulletsRequest,
    gateway: GenerationGateway = Depends(get_gateway),
):
    if not body.item:
        raise HTTPException(status_code=400, detail="Missing item")
    try:
        bullets = await resume_builder.rewrite_bullets(
            gateway, body.section, body.item, body.target_role, body.job_description
        )
    except AIRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BulletsResponse(ok=True, bullets=bullets)


@router.post("/ai/chat", response_model=ChatResponse)
@limiter.limit(settings.ai_rate_limit)
async def ai_chat(
    request: Request,
    body: ChatRequest,
    gateway: GenerationGateway = Depends(get_gateway),
):
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    audio_meta = body.audio_meta.model_dump(exclude_none=True) if body.audio_meta else None
    try:
        text = await chat_assistant.reply(gateway, body.message, audio_meta)
    except AIRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ChatResponse(reply=text)
