from .user import User, UserRole, Gender, Department
from .inventory import Item, Transaction, TransactionType
from .project import Project, ProjectStatus, ProjectVolunteer, VolunteerStatus, Allocation
from .borrowing import Request, RequestStatus, Borrowing
from .competition import Competition, CompetitionItem, CompetitionVolunteer
from .assignment import Assignment, Submission, SubmissionStatus
from .history import History
