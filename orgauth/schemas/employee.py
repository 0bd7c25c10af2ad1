from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------
# READ EMPLOYEE (response)
# ---------------------------------------------------------
class EmployeeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    surname: str
    position_id: Optional[int] = None
    department_id: Optional[int] = None
