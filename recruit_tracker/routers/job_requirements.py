import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, status as http_status
from pymongo.errors import DuplicateKeyError

from recruit_tracker.models.requests import JobRequirementCreate
from recruit_tracker.models.schemas import JobRequirementModel, SessionContext
from recruit_tracker.services.db import job_requirements_coll, to_dict
from recruit_tracker.services.session_manager import get_session_context
from recruit_tracker.utils.exceptions import ConflictError, ExceptionContext, ValidationError
from recruit_tracker.utils.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/all", response_model=List[JobRequirementModel])
async def list_all_job_requirements(ctx: SessionContext = Depends(get_session_context)):
    """Get all job requirements in the system"""
    with ExceptionContext("list_job_requirements", logger):
        cursor = job_requirements_coll.find({})
        docs = await cursor.to_list(length=None)
    return [JobRequirementModel(**to_dict(d)) for d in docs]


@router.post("/", response_model=JobRequirementModel, status_code=http_status.HTTP_201_CREATED)
async def create_job_requirement(
    body: JobRequirementCreate,
    request: Request,
    ctx: SessionContext = Depends(get_session_context),
):
    request_id = getattr(request.state, 'request_id', 'unknown')
    title = body.title.strip()
    if not title:
        raise ValidationError("Title cannot be empty", field="title", value=body.title)

    skills = [s.strip() for s in body.required_skills if s and s.strip()]
    if not skills:
        # recommendations against this job would be refused; warn but accept
        logger.warning(f"Job requirement '{title}' created without required skills", extra={"request_id": request_id})

    requirement = JobRequirementModel(
        job_requirement_id=str(uuid.uuid4()),
        title=title,
        required_skills=skills,
    )

    with ExceptionContext("insert_job_requirement", logger, request_id=request_id):
        try:
            await job_requirements_coll.insert_one(requirement.model_dump())
        except DuplicateKeyError as e:
            raise ConflictError("Job requirement already exists", resource="job_requirements", cause=e) from e

    logger.info(f"Created job requirement {requirement.job_requirement_id} ({title})", extra={"request_id": request_id})
    return requirement
