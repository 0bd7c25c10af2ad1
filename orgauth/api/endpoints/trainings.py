# orgauth/api/endpoints/trainings.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.api.deps import get_current_user, get_db_session
from orgauth.models.training import Training
from orgauth.models.user import User
from orgauth.schemas.training import EligibilityRead
from orgauth.services.directory_service import get_employee_for_user
from orgauth.services.eligibility_service import (
    available_spots,
    check_enrollment,
    get_restrictions,
    has_capacity,
    is_eligible,
)

router = APIRouter(
    prefix="/api/trainings",
    tags=["Trainings"]
)


@router.get("/{training_id}/eligibility", response_model=EligibilityRead)
async def my_eligibility(
    training_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    training = await session.get(Training, training_id)
    if not training:
        raise HTTPException(404, "Training not found")

    employee = await get_employee_for_user(session, current_user)
    if not employee:
        raise HTTPException(400, "User has no employee record")

    restrictions = await get_restrictions(session, training.id)

    return EligibilityRead(
        training_id=training.id,
        employee_id=employee.id,
        is_eligible=await is_eligible(session, restrictions, employee),
        has_capacity=await has_capacity(session, training),
        available_spots=await available_spots(session, training),
        decision=await check_enrollment(session, training, employee),
    )
