from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel


class OfferingRestrictions(BaseModel):
    # Empty set = unrestricted on that dimension
    faculty_ids: FrozenSet[int] = frozenset()
    department_ids: FrozenSet[int] = frozenset()
    position_ids: FrozenSet[int] = frozenset()

    @property
    def is_unrestricted(self) -> bool:
        return not (self.faculty_ids or self.department_ids or self.position_ids)


class EnrollmentBlock(str, Enum):
    not_eligible = "not_eligible"
    full = "full"
    reapply_limit_reached = "reapply_limit_reached"


class EnrollmentDecision(BaseModel):
    allowed: bool
    reason: Optional[EnrollmentBlock] = None
    available_spots: Optional[int] = None


class EligibilityRead(BaseModel):
    training_id: int
    employee_id: int
    is_eligible: bool
    has_capacity: bool
    available_spots: Optional[int]
    decision: EnrollmentDecision
