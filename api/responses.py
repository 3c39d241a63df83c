"""
Standardized API response models and utilities.
Provides consistent response formatting across all endpoints.
"""

from typing import Generic, TypeVar, Optional, Any, List
from pydantic import BaseModel, Field
from datetime import datetime

from domain.schemas import BulkPropagationResult, PropagationResult

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated API response"""

    items: List[T] = Field(..., description="List of items")
    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Number of items per page")
    has_next: bool = Field(..., description="Whether there are more pages")
    has_prev: bool = Field(..., description="Whether there are previous pages")

    model_config = {"from_attributes": True}


class ErrorDetail(BaseModel):
    """Detailed error information"""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: Optional[Any] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standardized error response"""

    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Error timestamp"
    )


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid meal edit"},
    404: {"model": ErrorResponse, "description": "Unknown seller tier, offering or subscription"},
    409: {"model": ErrorResponse, "description": "Subscription is not active"},
}


class PropagationResponse(BaseModel):
    """Outcome of a meal edit fanned out to subscriptions"""

    success: bool = Field(
        True, description="The edit was applied; per-subscription failures are in data"
    )
    message: str = Field(..., description="Human-readable summary")
    data: PropagationResult
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Response timestamp"
    )


class BulkPropagationResponse(BaseModel):
    """Outcome of a multi-tier meal edit"""

    success: bool = Field(True, description="Every tier was propagated; failures are in data")
    message: str = Field(..., description="Human-readable summary")
    data: BulkPropagationResult
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Response timestamp"
    )


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Check timestamp"
    )


def propagation_response(result: PropagationResult) -> PropagationResponse:
    """Wrap a propagation result with a summary message"""
    message = (
        f"Meal updated for {result.updated_count} of "
        f"{result.total_subscriptions} subscriptions in tier {result.tier!r}"
    )
    if result.skipped_count:
        message += f" ({result.skipped_count} outside the edited shift)"
    if result.failed_count:
        message += f"; {result.failed_count} failed"
    if not result.configuration_updated:
        message += "; tier configuration was not saved"
    return PropagationResponse(success=True, message=message, data=result)


def bulk_propagation_response(result: BulkPropagationResult) -> BulkPropagationResponse:
    message = (
        f"Meal updated for {result.updated_count} of {result.total_subscriptions} "
        f"subscriptions across {len(result.tiers)} tiers"
    )
    if result.failed_count:
        message += f"; {result.failed_count} failed"
    unsaved = [r.tier for r in result.results if not r.configuration_updated]
    if unsaved:
        message += f"; configuration not saved for {', '.join(unsaved)}"
    return BulkPropagationResponse(success=True, message=message, data=result)


def paginated_response(
    items: List[Any],
    total: int,
    page: int,
    page_size: int,
) -> dict:
    """Create a standardized paginated response"""
    total_pages = (total + page_size - 1) // page_size
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }
