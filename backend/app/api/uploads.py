from fastapi import HTTPException, Response, UploadFile, status

from app.services.alignment import FastaArtifact


def validate_vcf_upload(file: UploadFile) -> None:
    """Only plain-text .vcf uploads are accepted."""
    filename = file.filename or ""
    if filename.endswith(".vcf.gz") or filename.endswith(".gz"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Compressed VCF input is not supported. Please upload an uncompressed .vcf file."
        )
    if not filename.endswith(".vcf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file format. Please upload a .vcf file."
        )


def fasta_response(artifact: FastaArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.content_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
