"""Review routes."""

from fastapi import APIRouter, status

from grinfood.api.deps import CurrentPrincipal, CurrentSubject, ServicesDep
from grinfood.schemas.review import ReviewCreate

router = APIRouter()


@router.get("")
async def list_reviews(services: ServicesDep):
    return await services.reviews.list()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(body: ReviewCreate, subject: CurrentSubject, services: ServicesDep):
    return await services.reviews.create(subject, body)


@router.delete("/{review_id}")
async def delete_review(review_id: str, principal: CurrentPrincipal, services: ServicesDep):
    await services.reviews.delete(principal, review_id)
    return {"message": "Review deleted"}
