"""Investment goal router - API endpoints for investment goal management."""
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from app.database import get_engine
from app.exceptions import StoreError
from app.models.investment_goal import (
    InvestmentGoal,
    InvestmentGoalCreate,
    InvestmentGoalUpdate,
    MessageResponse,
    Month,
    compute_monthly_value,
)
from app.services.investment_goal_service import InvestmentGoalService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/investment-goals", tags=["investment-goals"])

NOT_FOUND_MESSAGE = "Investment goal not found."

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": MessageResponse, "description": "Invalid request"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": MessageResponse, "description": "Unexpected failure"},
}
NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {"model": MessageResponse, "description": "Goal not found"},
}

GoalId = Annotated[int, Path(gt=0, description="Investment goal id")]


def get_goal_service(engine=Depends(get_engine)) -> InvestmentGoalService:
    """Dependency to build the service for a request."""
    return InvestmentGoalService(engine)


def _store_failure(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Could not {action} the investment goal.",
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)


@router.post(
    "",
    response_model=InvestmentGoal,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create investment goal",
)
@router.post(
    "/",
    response_model=InvestmentGoal,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_investment_goal(
    goal: InvestmentGoalCreate,
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """
    Create a new investment goal.

    - Monthly value is derived from value and the number of months
    """
    monthly_value = compute_monthly_value(goal.value, goal.months)

    try:
        return await service.create_goal(
            name=goal.name,
            months=goal.months,
            value=goal.value,
            monthly_value=monthly_value,
        )
    except StoreError:
        logger.exception("Failed to create investment goal")
        raise _store_failure("create")


@router.get(
    "",
    response_model=list[InvestmentGoal],
    responses=ERROR_RESPONSES,
    summary="List investment goals",
)
@router.get("/", response_model=list[InvestmentGoal], include_in_schema=False)
async def list_investment_goals(
    name: Optional[str] = Query(None, description="Filter by name (case-insensitive, contains)"),
    month: Optional[Month] = Query(None, description="Filter by month (goal includes it)"),
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """
    List investment goals, newest first.

    - Optional filters: name, month
    """
    try:
        return await service.list_goals(name=name, month=month)
    except StoreError:
        logger.exception("Failed to list investment goals")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not list the investment goals.",
        )


@router.get(
    "/{goal_id}",
    response_model=InvestmentGoal,
    responses={**ERROR_RESPONSES, **NOT_FOUND_RESPONSE},
    summary="Get investment goal by id",
)
async def get_investment_goal(
    goal_id: GoalId,
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """Get a single investment goal."""
    try:
        goal = await service.get_goal(goal_id)
    except StoreError:
        logger.exception("Failed to fetch investment goal %s", goal_id)
        raise _store_failure("fetch")

    if goal is None:
        raise _not_found()
    return goal


@router.put(
    "/{goal_id}",
    response_model=InvestmentGoal,
    responses={**ERROR_RESPONSES, **NOT_FOUND_RESPONSE},
    summary="Replace investment goal",
)
async def replace_investment_goal(
    goal: InvestmentGoalCreate,
    goal_id: GoalId,
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """
    Replace every field of an investment goal.

    - Monthly value is recalculated
    - Returns 404 if goal not found
    """
    monthly_value = compute_monthly_value(goal.value, goal.months)

    try:
        updated = await service.replace_goal(
            goal_id,
            name=goal.name,
            months=goal.months,
            value=goal.value,
            monthly_value=monthly_value,
        )
    except StoreError:
        logger.exception("Failed to update investment goal %s", goal_id)
        raise _store_failure("update")

    if updated is None:
        raise _not_found()
    return updated


@router.patch(
    "/{goal_id}",
    response_model=InvestmentGoal,
    responses={**ERROR_RESPONSES, **NOT_FOUND_RESPONSE},
    summary="Partially update investment goal",
)
async def patch_investment_goal(
    goal_update: InvestmentGoalUpdate,
    goal_id: GoalId,
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """
    Update only the supplied fields.

    - Monthly value is recalculated from the resulting value and months
    - Returns 404 if goal not found
    """
    try:
        updated = await service.patch_goal(goal_id, goal_update.supplied())
    except StoreError:
        logger.exception("Failed to update investment goal %s", goal_id)
        raise _store_failure("update")

    if updated is None:
        raise _not_found()
    return updated


@router.delete(
    "/{goal_id}",
    response_model=MessageResponse,
    responses={**ERROR_RESPONSES, **NOT_FOUND_RESPONSE},
    summary="Delete investment goal",
)
async def delete_investment_goal(
    goal_id: GoalId,
    service: InvestmentGoalService = Depends(get_goal_service),
):
    """
    Permanently delete an investment goal.

    - Returns 404 if goal not found
    """
    try:
        deleted = await service.delete_goal(goal_id)
    except StoreError:
        logger.exception("Failed to delete investment goal %s", goal_id)
        raise _store_failure("delete")

    if not deleted:
        raise _not_found()
    return {"message": "Investment goal deleted successfully."}
