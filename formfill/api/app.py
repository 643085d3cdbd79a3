"""FastAPI application for the form-fill assistant.

Provides REST endpoints for multi-document extraction, identifier
validation, printable export, document-type listing and health checks.
"""

import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from formfill.documents.loader import UnsupportedDocumentError, document_from_bytes
from formfill.documents.models import (
    FILENAME_ALIASES,
    DocumentClass,
    DocumentStatus,
    UploadedDocument,
    record_field_name,
)
from formfill.export.html import render_html
from formfill.extraction.client import GatewayExtractionClient
from formfill.extraction.modes import narrow_mode
from formfill.merge.engine import MergeEngine, MergeResult, NoDocumentsError
from formfill.utils.config import AppConfig, ConfigurationError, load_config
from formfill.utils.logger import get_logger
from formfill.validation.identifiers import FieldValidator

from .schemas import (
    DocumentOutcomeResponse,
    DocumentTypeInfo,
    DocumentTypesResponse,
    HealthResponse,
    MergeResponse,
    RecordSchema,
    ValidateRequest,
    ValidateResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"


@lru_cache(maxsize=1)
def _get_config() -> AppConfig:
    """Configuration loaded once per process."""
    return load_config()


@lru_cache(maxsize=1)
def _get_client() -> GatewayExtractionClient | None:
    """Gateway client built once; ``None`` when the API key is missing."""
    try:
        return GatewayExtractionClient.from_config(_get_config().gateway)
    except ConfigurationError as exc:
        logger.error("Gateway client unavailable: %s", exc)
        return None


def _get_engine(config: AppConfig) -> MergeEngine:
    """Build a per-request merge engine around the shared gateway client.

    Raises:
        ConfigurationError: If the gateway API key is missing.
    """
    client = _get_client()
    if client is None:
        raise ConfigurationError(f"{config.gateway.api_key_env} is not configured")
    return MergeEngine(client, FieldValidator())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration and the gateway client once at startup."""
    _get_config()
    _get_client()
    yield


app = FastAPI(
    title="Identity Document Form-Fill API",
    description="Extract and merge personal details from Indian identity documents",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _success_message(result: MergeResult, document_count: int) -> str:
    if result.is_empty:
        return "Processing completed, but no usable data could be extracted"
    plural = "s" if document_count > 1 else ""
    return f"Data extracted from {document_count} document{plural} with smart merging"


def _document_outcomes(
    documents: list[UploadedDocument], result: MergeResult
) -> list[DocumentOutcomeResponse]:
    responses: list[DocumentOutcomeResponse] = []
    for document in documents:
        outcomes = [o for o in result.outcomes if o.document_id == document.document_id]
        failures = [o for o in outcomes if not o.succeeded]
        responses.append(
            DocumentOutcomeResponse(
                document_id=document.document_id,
                filename=document.filename,
                document_class=document.document_class,
                status=document.status,
                mode=outcomes[0].mode if outcomes else None,
                error=failures[-1].error if failures else None,
                error_kind=failures[-1].error_kind if failures else None,
            )
        )
    return responses


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service health and whether the gateway key is present."""
    return HealthResponse(
        status="healthy", version=VERSION, gateway_configured=_get_client() is not None
    )


@app.post("/extract", response_model=MergeResponse)
async def extract_documents(
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> MergeResponse:
    """Extract and merge personal details from uploaded documents.

    Args:
        files: Document scans (PDF, JPEG or PNG) in upload order.

    Returns:
        The merged profile, per-document outcomes and call statistics.
    """
    start_time = time.time()
    config = _get_config()

    if not files:
        raise HTTPException(
            status_code=400, detail="Please upload at least one document first"
        )

    documents: list[UploadedDocument] = []
    try:
        for upload in files:
            filename = upload.filename or "document"
            content = await upload.read()
            documents.append(
                document_from_bytes(
                    filename,
                    content,
                    upload.content_type,
                    config.upload.allowed_content_types,
                )
            )
    except UnsupportedDocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        engine = _get_engine(config)
        for document in documents:
            document.advance(DocumentStatus.PROCESSING)
        result = await engine.merge(documents)
    except ConfigurationError as exc:
        logger.error("Extraction unavailable: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except NoDocumentsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    for document in documents:
        document.advance(result.status_for(document.document_id))

    return MergeResponse(
        success=True,
        empty=result.is_empty,
        message=_success_message(result, len(documents)),
        extracted=RecordSchema.from_record(result.extracted),
        working=RecordSchema.from_record(result.working),
        documents=_document_outcomes(documents, result),
        extraction_calls=result.extraction_calls,
        fallback_used=result.fallback_used,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/validate", response_model=ValidateResponse)
async def validate_field(request: ValidateRequest) -> ValidateResponse:
    """Validate a single identifier value as entered.

    The sanitized form shows what the input field would hold after typing;
    validation runs on the raw value so pasted letters are still reported.
    """
    validator = FieldValidator()
    field_name = record_field_name(request.field)
    if not validator.validates(field_name):
        raise HTTPException(
            status_code=400,
            detail=(
                f"Unknown identifier field: {request.field}. "
                f"Expected one of: {', '.join(validator.field_names)}"
            ),
        )

    sanitized = (
        validator.sanitize(field_name, request.value) if request.value else None
    )
    result = validator.validate(field_name, request.value)
    return ValidateResponse(
        field=field_name,
        sanitized=sanitized,
        is_valid=result.is_valid,
        canonical_form=result.canonical_form,
        error_message=result.error_message,
    )


@app.post("/export", response_class=HTMLResponse)
async def export_record(record: RecordSchema) -> HTMLResponse:
    """Render a profile as a printable HTML document."""
    return HTMLResponse(content=render_html(record.to_record()))


@app.get("/document-types", response_model=DocumentTypesResponse)
async def list_document_types() -> DocumentTypesResponse:
    """List recognised document classes with their filename keywords."""
    aliases = dict(FILENAME_ALIASES)
    return DocumentTypesResponse(
        document_types=[
            DocumentTypeInfo(
                document_class=document_class,
                filename_aliases=list(aliases.get(document_class, ())),
                secondary_mode=narrow_mode(document_class),
            )
            for document_class in DocumentClass
        ]
    )
