from enum import Enum

class DepartmentType(str, Enum):
    academic = "academic"
    administrative = "administrative"

class TrainingApplicationStatus(str, Enum):
    SignedUp = "Signed Up"
    Approved = "Approved"
    Ongoing = "Ongoing"
    Completed = "Completed"
    Cancelled = "Cancelled"
    Rejected = "Rejected"
    NoShow = "No Show"
