"""Pydantic schemas for the 11-step digital employee wizard.

Every step schema uses Optional fields so PATCH (partial save) works.
The `StepNComplete` variants define the required fields of the gated
steps (1, 3, 6, 8, 9); the controller validates the session snapshot
against them before allowing forward navigation.

Wire format is camelCase; Python attributes are snake_case.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from nonplo.schemas.validators import validate_time

TOTAL_STEPS = 11

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

Tone = Literal["sevecen", "profesyonel", "arkadas_canlisi", "konuskan", "ozel"]
ResponseLength = Literal["kisa", "orta", "uzun"]
FileStatus = Literal["uploading", "uploaded", "processing", "indexed", "error"]


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# ── Nested value objects ─────────────────────────────────────

class DayHours(CamelModel):
    open: str = "09:00"
    close: str = "18:00"
    closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def _time_format(cls, v: str) -> str:
        return validate_time(v)


class HolidaysConfig(CamelModel):
    national_holidays: bool = True
    religious_holidays: bool = True
    custom_holidays: list[Any] = []


class PlaceComponents(CamelModel):
    city: str | None = None
    country: str | None = None


class AddressData(CamelModel):
    """Structured place result from the address search."""
    place_id: str
    formatted_address: str
    latitude: float
    longitude: float
    components: PlaceComponents = PlaceComponents()


class Personality(CamelModel):
    tone: Tone = "profesyonel"
    formality: int = Field(3, ge=1, le=5)
    creativity: float = Field(0.7, ge=0.1, le=2.0)
    response_length: ResponseLength = "orta"
    use_emojis: bool = False
    custom_instructions: str = ""


def _empty_to_none(v: Any) -> Any:
    # The backend defaults JSON columns to {}; treat that as "not set".
    if isinstance(v, dict) and not v:
        return None
    return v


# ── Session ──────────────────────────────────────────────────

class WizardSessionUpdate(CamelModel):
    """Partial session record accepted by PATCH /api/wizard/sessions/:id."""
    current_step: int | None = Field(None, ge=1, le=TOTAL_STEPS)

    # Step 1
    business_name: str | None = None
    industry: str | None = None
    # Step 2
    address: str | None = None
    address_data: AddressData | None = None
    timezone: str | None = None
    # Step 3
    working_hours: dict[str, DayHours] | None = None
    holidays_config: HolidaysConfig | None = None
    # Step 4
    website: str | None = None
    social_media: dict[str, str] | None = None
    # Step 5
    faq_raw: str | None = None
    # Step 6
    product_service_raw: str | None = None
    # Step 7
    training_files_count: int | None = None
    files_index_status: str | None = None
    # Step 8
    employee_name: str | None = None
    employee_role: str | None = None
    # Step 9
    personality: Personality | None = None
    # Step 10
    selected_tools: dict[str, bool] | None = None

    @field_validator("address_data", "personality", "holidays_config", mode="before")
    @classmethod
    def _empty_objects(cls, v: Any) -> Any:
        return _empty_to_none(v)


class WizardSession(WizardSessionUpdate):
    id: str
    current_step: int = Field(1, ge=1, le=TOTAL_STEPS)
    created_at: str | None = None
    updated_at: str | None = None


class WizardFile(CamelModel):
    id: str
    original_name: str
    file_size: int
    mime_type: str | None = None
    status: FileStatus = "uploading"


# ── Step 1: Business identity ────────────────────────────────

class Step1Data(CamelModel):
    business_name: str | None = None
    industry: str | None = None


class Step1Complete(Step1Data):
    """Business name and industry are required."""
    business_name: str = Field(min_length=1)
    industry: str = Field(min_length=1)


# ── Step 2: Address (optional) ───────────────────────────────

class Step2Data(CamelModel):
    address: str | None = None
    address_data: AddressData | None = None
    timezone: str | None = None


# ── Step 3: Working hours ────────────────────────────────────

class Step3Data(CamelModel):
    working_hours: dict[str, DayHours] | None = None
    holidays_config: HolidaysConfig | None = None


class Step3Complete(Step3Data):
    """At least one weekday entry is required."""
    working_hours: dict[str, DayHours] = Field(min_length=1)


# ── Step 4: Website & social media (optional) ────────────────

class Step4Data(CamelModel):
    website: str | None = None
    social_media: dict[str, str] | None = None


# ── Step 5: FAQ (optional) ───────────────────────────────────

class Step5Data(CamelModel):
    faq_raw: str | None = None


# ── Step 6: Products & services ──────────────────────────────

class Step6Data(CamelModel):
    product_service_raw: str | None = None


class Step6Complete(Step6Data):
    """Product/service description is required."""
    product_service_raw: str = Field(min_length=1)


# ── Step 7: Training files (optional) ────────────────────────

class Step7Data(CamelModel):
    training_files_count: int | None = None
    files_index_status: str | None = None


# ── Step 8: Employee profile ─────────────────────────────────

class Step8Data(CamelModel):
    employee_name: str | None = None
    employee_role: str | None = None


class Step8Complete(Step8Data):
    """Employee name and role description are required."""
    employee_name: str = Field(min_length=1)
    employee_role: str = Field(min_length=1)


# ── Step 9: Personality ──────────────────────────────────────

class Step9Data(CamelModel):
    personality: Personality | None = None

    @field_validator("personality", mode="before")
    @classmethod
    def _empty_personality(cls, v: Any) -> Any:
        return _empty_to_none(v)


class Step9Complete(Step9Data):
    """A personality configuration is required."""
    personality: Personality


# ── Step 10: Tools (optional) ────────────────────────────────

class Step10Data(CamelModel):
    selected_tools: dict[str, bool] | None = None


STEP_DATA_MODELS: dict[int, type[CamelModel]] = {
    1: Step1Data,
    2: Step2Data,
    3: Step3Data,
    4: Step4Data,
    5: Step5Data,
    6: Step6Data,
    7: Step7Data,
    8: Step8Data,
    9: Step9Data,
    10: Step10Data,
}

STEP_COMPLETE_MODELS: dict[int, type[CamelModel]] = {
    1: Step1Complete,
    3: Step3Complete,
    6: Step6Complete,
    8: Step8Complete,
    9: Step9Complete,
}
