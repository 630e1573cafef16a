import logging

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from app.api.uploads import fasta_response, validate_vcf_upload
from app.core.config import get_config
from app.schemas.conversion_schema import ConversionJobStatus
from app.services.pipeline.conversion_pipeline import split_sample_names
from app.services.pipeline.jobs import JOB_STORE, ConversionJob, JobStatus
from app.services.vcf.line_source import iter_bytes_chunks

router = APIRouter()
logger = logging.getLogger(__name__)


def _status(job: ConversionJob) -> ConversionJobStatus:
    payload = job.snapshot()
    if job.status == JobStatus.COMPLETED and JOB_STORE.get(job.job_id) is job:
        payload["result_url"] = f"/api/v1/jobs/{job.job_id}/result"
    return ConversionJobStatus(**payload)


def _get_job_or_404(job_id: str) -> ConversionJob:
    job = JOB_STORE.get(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown job {job_id}")
    return job


@router.post(
    "/",
    response_model=ConversionJobStatus,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start a background conversion",
)
async def create_job(
    file: UploadFile = File(..., description="Multi-sample VCF file"),
    sample_names: str = Form(..., description="Whitespace-separated sample names, in genotype column order"),
) -> ConversionJobStatus:
    """Queue a conversion and return immediately; poll the job for progress."""
    validate_vcf_upload(file)
    names = split_sample_names(sample_names)
    if not names:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one sample name is required.")

    # The upload is closed once this request returns, so buffer it first.
    content = await file.read()
    config = get_config()

    job = JOB_STORE.create(names, len(content), config=config)
    job.submit(iter_bytes_chunks(content, config.stream.chunk_size))
    return _status(job)


@router.get("/{job_id}", response_model=ConversionJobStatus)
async def get_job(job_id: str) -> ConversionJobStatus:
    """Poll conversion progress by job_id."""
    return _status(_get_job_or_404(job_id))


@router.delete("/{job_id}", response_model=ConversionJobStatus)
async def cancel_job(job_id: str) -> ConversionJobStatus:
    """Cancel a running job, or discard a finished one and its result."""
    job = _get_job_or_404(job_id)
    if job.done:
        JOB_STORE.remove(job_id)
        logger.info("Discarded job %s (%s)", job_id, job.status.value)
    else:
        job.cancel()
    return _status(job)


@router.get("/{job_id}/result")
async def get_job_result(job_id: str):
    """Download the FASTA once the job has completed."""
    job = _get_job_or_404(job_id)
    if job.status != JobStatus.COMPLETED or job.artifact is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job {job_id} is {job.status.value}" + (f": {job.error}" if job.error else ""),
        )
    return fasta_response(job.artifact)
