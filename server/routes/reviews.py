"""Review search and import endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from models.errors import ErrorKind, ReviewImportError
from orchestrator.review_import import ReviewImportService
from orchestrator.testimonial_import import import_review as import_into_sink
from server.dependencies import get_review_import_service, get_testimonial_sink
from server.schemas.requests import ImportReviewRequest, SearchBusinessesRequest
from server.schemas.responses import (
    ErrorResponseDTO,
    ImportedTestimonialDTO,
    ImportReviewResponseDTO,
    SearchBusinessesResponseDTO,
    SearchResultDTO,
)
from server.utils import MIN_QUERY_LENGTH, clamp_review_rating, is_valid_query
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/reviews", tags=["Reviews"])


def _error(status_code: int, message: str, kind: ErrorKind | None = None) -> JSONResponse:
    body = ErrorResponseDTO(error=message, kind=kind.value if kind else None)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/search-businesses", response_model=SearchBusinessesResponseDTO)
async def search_businesses(
    request: SearchBusinessesRequest,
    service: ReviewImportService = Depends(get_review_import_service),
):
    """Search every configured review platform for businesses matching the query."""
    if not is_valid_query(request.query):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            f"Query must be at least {MIN_QUERY_LENGTH} characters long",
        )

    try:
        results = await service.search_businesses(request.query.strip())
    except ReviewImportError as e:
        logger.error(
            f"Search businesses error: {e.message}",
            extra={"extra_fields": {"kind": e.kind.value, **e.details}},
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to search businesses", e.kind
        )

    return SearchBusinessesResponseDTO(
        data=[SearchResultDTO.from_search_result(r) for r in results]
    )


@router.post("/import", response_model=ImportReviewResponseDTO)
async def import_review(request: ImportReviewRequest, sink=Depends(get_testimonial_sink)):
    """Validate one selected review and hand it to the testimonial store."""
    if not request.place_id or not request.review:
        return _error(status.HTTP_400_BAD_REQUEST, "Place ID and review are required")

    try:
        draft = import_into_sink(clamp_review_rating(request.review), request.place_id, sink)
    except ReviewImportError as e:
        logger.warning(
            f"Import review error: {e.message}",
            extra={"extra_fields": {"kind": e.kind.value, "place_id": request.place_id}},
        )
        return _error(status.HTTP_400_BAD_REQUEST, e.message, e.kind)

    return ImportReviewResponseDTO(data=ImportedTestimonialDTO.from_draft(draft))
