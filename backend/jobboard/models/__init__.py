from jobboard.models.application import JobApplication
from jobboard.models.cv import CV
from jobboard.models.job import Job
from jobboard.models.match import Match
from jobboard.models.student_profile import StudentProfile
from jobboard.models.user import User

__all__ = ["User", "StudentProfile", "CV", "Job", "Match", "JobApplication"]
