import logging

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status

from app.api.uploads import fasta_response, validate_vcf_upload
from app.core.config import get_config
from app.core.errors import ConversionError
from app.services.pipeline.conversion_pipeline import convert, split_sample_names
from app.services.vcf.line_source import iter_upload_chunks

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/",
    response_class=Response,
    responses={200: {"content": {"text/plain": {}}, "description": "Aligned FASTA download"}},
    summary="Convert VCF to aligned FASTA",
)
async def convert_vcf(
    file: UploadFile = File(..., description="Multi-sample VCF file"),
    sample_names: str = Form(..., description="Whitespace-separated sample names, in genotype column order"),
):
    """
    Upload a VCF and receive one aligned sequence per sample plus the reference.

    - **file**: The VCF file (uncompressed .vcf).
    - **sample_names**: Names for the genotype columns after FORMAT.
    """
    validate_vcf_upload(file)
    config = get_config()

    try:
        artifact = await convert(
            iter_upload_chunks(file, config.stream.chunk_size),
            file.size,
            split_sample_names(sample_names),
            config=config,
        )
    except ConversionError as e:
        logger.warning("Conversion of %s rejected: %s", file.filename, str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error converting {file.filename}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during conversion."
        )

    return fasta_response(artifact)
