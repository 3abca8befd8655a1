import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Optional

from beanie import Document, Indexed, PydanticObjectId, Replace, Save, before_event
from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
LINKEDIN_RE = re.compile(r"^https://.*linkedin\.com/.*")

TEAMS = ("binary-hub", "binary-digital")
DEPARTMENTS = (
    "Web Development",
    "UI UX Designing",
    "Graphic Designing",
    "Amazon",
    "Digital Marketing",
    "Bookkeeping",
)
PAYMENT_METHODS = ("easypaisa", "bank")
ENROLLMENT_STATUSES = ("pending", "approved", "rejected")
NOTIFICATION_TYPES = ("admission_accepted", "admission_rejected", "welcome", "course_renewal")

Team = Literal["binary-hub", "binary-digital"]
Department = Literal[
    "Web Development",
    "UI UX Designing",
    "Graphic Designing",
    "Amazon",
    "Digital Marketing",
    "Bookkeeping",
]
PaymentMethod = Literal["easypaisa", "bank"]
EnrollmentStatus = Literal["pending", "approved", "rejected"]
NotificationType = Literal["admission_accepted", "admission_rejected", "welcome", "course_renewal"]


def _one_of(value: Any, allowed: Iterable[str], label: str) -> Any:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValueError(f"{label} must be one of: {', '.join(allowed)}")
    return value


class TimestampedDocument(Document):
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @before_event(Replace, Save)
    def refresh_updated_at(self):
        self.updated_at = datetime.utcnow()

    def public(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"revision_id", *exclude})


# Accounts

class Account(TimestampedDocument):
    full_name: str
    email: Indexed(str, unique=True)
    password_hash: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = str(v or "").strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email")
        return v

    def public(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        return super().public(exclude=("password_hash", *exclude))


class User(Account):
    class Settings:
        name = "users"


class Admin(Account):
    class Settings:
        name = "admins"


# Directory records

class Profile(TimestampedDocument):
    name: str
    linkedin: str
    image: Optional[str] = None

    @field_validator("linkedin")
    @classmethod
    def check_linkedin(cls, v):
        if not LINKEDIN_RE.match(v):
            raise ValueError("Must be a valid LinkedIn URL")
        return v


class TeamMember(Profile):
    designation: str
    team: Team = "binary-hub"

    @field_validator("team", mode="before")
    @classmethod
    def check_team(cls, v):
        return _one_of(v, TEAMS, "Team")

    class Settings:
        name = "team_members"


class Mentor(Profile):
    department: Department

    @field_validator("department", mode="before")
    @classmethod
    def check_department(cls, v):
        return _one_of(v, DEPARTMENTS, "Department")

    class Settings:
        name = "mentors"


class Freelancer(Profile):
    title: str
    skills: List[str]
    department: Department

    @field_validator("department", mode="before")
    @classmethod
    def check_department(cls, v):
        return _one_of(v, DEPARTMENTS, "Department")

    @field_validator("skills")
    @classmethod
    def check_skills(cls, v):
        if not v:
            raise ValueError("At least one skill is required")
        return v

    class Settings:
        name = "freelancers"


# Enrollment workflow

class CourseRef(BaseModel):
    slug: str
    title: str


class Applicant(BaseModel):
    user_id: PydanticObjectId
    full_name: str
    email: str
    phone: Optional[str] = None


class Payment(BaseModel):
    method: PaymentMethod
    screenshot: str

    @field_validator("method", mode="before")
    @classmethod
    def check_method(cls, v):
        if v not in PAYMENT_METHODS:
            raise ValueError('Payment method must be either "easypaisa" or "bank"')
        return v


class Enrollment(TimestampedDocument):
    course: CourseRef
    user: Applicant
    payment: Payment
    status: EnrollmentStatus = "pending"
    message: Optional[str] = None
    purchase_date: Optional[datetime] = None
    expiration_date: Optional[datetime] = None
    renewal_notification_sent: bool = False
    expired: bool = False

    class Settings:
        name = "enrollments"


class Notification(TimestampedDocument):
    user_id: PydanticObjectId
    type: NotificationType
    title: str
    message: str
    read: bool = False
    enrollment_id: Optional[PydanticObjectId] = None

    class Settings:
        name = "notifications"
        indexes = ["user_id"]


DOCUMENT_MODELS = [User, Admin, TeamMember, Mentor, Freelancer, Enrollment, Notification]
