"""
Report and session models.

Attribute names are snake_case; the wire format used by the report API is
PascalCase and is handled through field aliases, so
``ReportRecord.model_validate(api_json)`` and ``record.to_payload()`` round
trip the remote shape.
"""

from datetime import date as date_type
from enum import Enum
from typing import Annotated, Any, Dict, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from placement_tracker.aggregator import parse_count


def _as_text(value: Any) -> Any:
    """Numeric-as-text fields: numbers become their text form, null becomes ''"""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_count(value: Any) -> int:
    """Integer fields read from the store parse leniently and never go negative"""
    return max(0, parse_count(value))


def _none_as_empty(value: Any) -> Any:
    return {} if value is None else value


def _none_as_sequence(value: Any) -> Any:
    return () if value is None else value


CountText = Annotated[str, BeforeValidator(_as_text)]
Text = Annotated[str, BeforeValidator(_as_text)]
Count = Annotated[int, BeforeValidator(_as_count)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class UnplacedStudentsCount(_WireModel):
    """Point-in-time unplaced counts for the two colleges"""
    college_a: Count = Field(0, alias="SNSCE")
    college_b: Count = Field(0, alias="SNSCT")

    @property
    def total(self) -> int:
        return self.college_a + self.college_b


class FinalYearPlacementUpdates(_WireModel):
    offers_received: CountText = Field("", alias="OffersReceived")
    total_since_april: CountText = Field("", alias="TotalSinceApril")
    remarks: Text = Field("", alias="Remarks")
    unplaced: Annotated[UnplacedStudentsCount, BeforeValidator(_none_as_empty)] = Field(
        default_factory=UnplacedStudentsCount, alias="UnplacedStudentsCount"
    )
    awaited_results: Text = Field("", alias="AwaitedResults")


class PreFinalYearInternships(_WireModel):
    offers_today: CountText = Field("", alias="OffersToday")
    total_since_april: Count = Field(0, alias="TotalSinceApril")
    remarks: Text = Field("", alias="Remarks")


class HighSalaryOpportunities(_WireModel):
    """Pre-final year offers at 10 LPA and above"""
    offers_today: CountText = Field("", alias="OffersToday")
    total_since_april: CountText = Field("", alias="TotalSinceApril")
    remarks: Text = Field("", alias="Remarks")


class InternshipUpdate(_WireModel):
    company: Text = Field("", alias="Company")
    department: Text = Field("", alias="Department")
    number_of_students: Count = Field(0, alias="NumberOfStudents")
    status: Text = Field("", alias="Status")


class ReportRecord(_WireModel):
    """One day's placement and internship submission"""

    date: Text = Field("", alias="Date")
    reported_by: Text = Field("", alias="ReportedBy")
    final_year: Annotated[FinalYearPlacementUpdates, BeforeValidator(_none_as_empty)] = Field(
        default_factory=FinalYearPlacementUpdates, alias="FinalYearPlacementUpdates"
    )
    pre_final_year_internships: Annotated[PreFinalYearInternships, BeforeValidator(_none_as_empty)] = Field(
        default_factory=PreFinalYearInternships, alias="PreFinalYearInternships"
    )
    pre_final_year_high_salary: Annotated[HighSalaryOpportunities, BeforeValidator(_none_as_empty)] = Field(
        default_factory=HighSalaryOpportunities, alias="PreFinalYearHighSalaryOpportunities"
    )
    internship_updates: Annotated[Tuple[InternshipUpdate, ...], BeforeValidator(_none_as_sequence)] = Field(
        default=(), alias="InternshipUpdates"
    )

    @classmethod
    def blank(cls, reported_by: str = "", today: Optional[date_type] = None) -> "ReportRecord":
        """Empty template for a new day's report"""
        today = today or date_type.today()
        return cls(
            date=today.isoformat(),
            reported_by=reported_by,
            internship_updates=(InternshipUpdate(),),
        )

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ReportRecord":
        return cls.model_validate(data)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize in the API's PascalCase shape"""
        return self.model_dump(by_alias=True, mode="json")


# ==================== Session ====================

class UserRole(str, Enum):
    """Roles issued by the session provider"""
    ADMIN = "admin"
    USER = "user"


def _as_role(value: Any) -> Any:
    if isinstance(value, UserRole):
        return value
    return UserRole.ADMIN if value == UserRole.ADMIN.value else UserRole.USER


def _as_optional_text(value: Any) -> Any:
    if value is None:
        return None
    return str(value)


class UserSession(BaseModel):
    """Authenticated identity persisted between runs"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Annotated[Optional[str], BeforeValidator(_as_optional_text)] = None
    username: str
    email: str = ""
    role: Annotated[UserRole, BeforeValidator(_as_role)] = UserRole.USER
    token: Annotated[Optional[str], BeforeValidator(_as_optional_text)] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    username: str
    email: str
    password: str
