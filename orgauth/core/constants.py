# orgauth/core/constants.py

from orgauth.models.enums import TrainingApplicationStatus

# ==========================================================
# HIERARCHY LEVELS (positions.hierarchy_level)
# ==========================================================
LEVEL_STAFF = 1
LEVEL_DEPARTMENT_HEAD = 8
LEVEL_ASSOCIATE_DEAN = 9
LEVEL_DEAN = 10

# Dean tier: faculty-wide authority
FACULTY_LEVELS = (LEVEL_ASSOCIATE_DEAN, LEVEL_DEAN)

# ==========================================================
# TRAINING APPLICATIONS
# ==========================================================
# Statuses that occupy a seat in a training
COUNTED_APPLICATION_STATUSES = (
    TrainingApplicationStatus.SignedUp,
    TrainingApplicationStatus.Approved,
)
