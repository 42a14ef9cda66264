"""Step forms for the 11-step wizard.

Each step owns a fixed set of session fields. A form produces the initial
values for a fresh render (session values, else defaults) and the diff of
owned fields the user actually changed; the controller persists that diff.

Gated steps (1, 3, 6, 8, 9) are validated against their ``StepNComplete``
schema before forward navigation.
"""

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ValidationError

from nonplo.exceptions import NonploError, ValidationFailedError
from nonplo.schemas.validators import business_name_status, format_social_url, NameStatus, SOCIAL_PLATFORMS
from nonplo.schemas.wizard import (
    AddressData,
    CamelModel,
    Personality,
    STEP_COMPLETE_MODELS,
    STEP_DATA_MODELS,
    Step3Data,
    WizardSession,
)
from nonplo.wizard import presets

if TYPE_CHECKING:
    from nonplo.wizard.controller import WizardController

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    BUSINESS = 1
    ADDRESS = 2
    HOURS = 3
    SOCIAL = 4
    FAQ = 5
    PRODUCTS = 6
    FILES = 7
    EMPLOYEE = 8
    PERSONALITY = 9
    TOOLS = 10
    APPROVAL = 11


STEP_TITLES = {
    WizardStep.BUSINESS: "İşletme Bilgileri",
    WizardStep.ADDRESS: "Adres Bilgisi",
    WizardStep.HOURS: "Çalışma Saatleri",
    WizardStep.SOCIAL: "Sosyal Medya",
    WizardStep.FAQ: "Sık Sorulan Sorular",
    WizardStep.PRODUCTS: "Ürün/Hizmet Bilgileri",
    WizardStep.FILES: "Eğitim Dosyaları",
    WizardStep.EMPLOYEE: "Çalışan Bilgileri",
    WizardStep.PERSONALITY: "Kişilik & Ton",
    WizardStep.TOOLS: "Araçlar",
    WizardStep.APPROVAL: "Onay & Oluştur",
}

REQUIRED_STEPS = frozenset(STEP_COMPLETE_MODELS)


# ── Required-field predicate ─────────────────────────────────

def missing_fields(step: int, snapshot: Optional[WizardSession]) -> list[str]:
    """Required fields of ``step`` that the snapshot does not satisfy."""
    model = STEP_COMPLETE_MODELS.get(step)
    if model is None:
        return []

    data = snapshot.model_dump(include=set(model.model_fields)) if snapshot else {}
    try:
        model.model_validate(data)
    except ValidationError as exc:
        aliases = {f.alias or name: name for name, f in model.model_fields.items()}
        missing = []
        for error in exc.errors():
            name = aliases.get(str(error["loc"][0]), str(error["loc"][0]))
            if name not in missing:
                missing.append(name)
        return missing
    return []


def can_proceed(step: int, snapshot: Optional[WizardSession]) -> bool:
    if snapshot is None:
        return False
    return not missing_fields(step, snapshot)


# ── Base form ────────────────────────────────────────────────

def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _is_blank(value: Any) -> bool:
    # An empty input and an unset column are the same value
    return value is None or value == "" or value == {}


class StepForm:
    """View model for one wizard step."""

    step: WizardStep
    fields: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step]

    @property
    def required(self) -> bool:
        return self.step in REQUIRED_STEPS

    @property
    def model(self) -> type[CamelModel] | None:
        return STEP_DATA_MODELS.get(self.step)

    def defaults(self) -> dict[str, Any]:
        return {name: None for name in self.fields}

    def initial(self, snapshot: Optional[WizardSession]) -> dict[str, Any]:
        """Form values for a fresh render: session values, else defaults."""
        values = self.defaults()
        if snapshot is not None:
            for name in self.fields:
                current = getattr(snapshot, name, None)
                if current is not None:
                    values[name] = _plain(current)
        return values

    def normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        return values

    def changes(self, values: dict[str, Any], snapshot: Optional[WizardSession]) -> dict[str, Any]:
        """Owned fields whose value differs from the snapshot.

        Raises:
            ValidationFailedError: If a value does not match the step schema
        """
        owned = {k: v for k, v in values.items() if k in self.fields}
        owned = self.normalize(owned)
        if self.model is not None:
            try:
                owned = self.model.model_validate(owned).model_dump(exclude_unset=True)
            except ValidationError as exc:
                first = exc.errors()[0]
                raise ValidationFailedError(first["msg"], field=str(first["loc"][0])) from exc

        diff = {}
        for name, value in owned.items():
            current = _plain(getattr(snapshot, name, None)) if snapshot is not None else None
            if _is_blank(value) and _is_blank(current):
                continue
            if value != current:
                diff[name] = value
        return diff


# ── Step 1: Business ─────────────────────────────────────────

class BusinessForm(StepForm):
    step = WizardStep.BUSINESS
    fields = ("business_name", "industry")

    def defaults(self) -> dict[str, Any]:
        return {"business_name": "", "industry": ""}

    def industries(self, term: str = "") -> list[str]:
        return presets.filter_industries(term)

    async def name_status(self, controller: "WizardController", name: str | None) -> NameStatus:
        """Moderation status of the business name against the cached word list."""
        words = await controller.api.forbidden_words()
        return business_name_status(name, words)


# ── Step 2: Address ──────────────────────────────────────────

class AddressForm(StepForm):
    step = WizardStep.ADDRESS
    fields = ("address", "address_data", "timezone")

    def select_place(self, place: AddressData | dict) -> dict[str, Any]:
        place = AddressData.model_validate(place)
        return {
            "address": place.formatted_address,
            "address_data": place.model_dump(),
            "timezone": presets.timezone_from_coords(place.latitude, place.longitude),
        }

    def clear(self) -> dict[str, Any]:
        return {"address": "", "address_data": None, "timezone": ""}


# ── Step 3: Working hours ────────────────────────────────────

class HoursForm(StepForm):
    step = WizardStep.HOURS
    fields = ("working_hours", "holidays_config")

    def defaults(self) -> dict[str, Any]:
        return {
            "working_hours": _plain(presets.default_working_hours()),
            "holidays_config": presets.default_holidays().model_dump(),
        }

    def apply_preset(self, name: str) -> dict[str, Any]:
        preset = presets.apply_hours_preset(name)
        return {
            "working_hours": _plain(preset.working_hours),
            "holidays_config": preset.holidays.model_dump(),
        }

    def set_day(self, values: dict[str, Any], day: str, **hours) -> dict[str, Any]:
        schedule = Step3Data.model_validate(
            {"working_hours": values.get("working_hours") or {}}
        ).working_hours or {}
        updated = presets.set_day_hours(schedule, day, **hours)
        return {**values, "working_hours": _plain(updated)}


# ── Step 4: Social media ─────────────────────────────────────

class SocialForm(StepForm):
    step = WizardStep.SOCIAL
    fields = ("website", "social_media")

    def defaults(self) -> dict[str, Any]:
        return {"website": "", "social_media": {key: "" for key in SOCIAL_PLATFORMS}}

    def normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        social = values.get("social_media")
        if social is None:
            return values
        formatted = {
            platform: format_social_url(link, platform) if platform in SOCIAL_PLATFORMS else link
            for platform, link in social.items()
            if link
        }
        return {**values, "social_media": formatted}

    def connected_count(self, values: dict[str, Any]) -> int:
        return sum(1 for link in (values.get("social_media") or {}).values() if link)


# ── Steps 5, 6, 8: Free text with AI optimization ────────────

class OptimizableTextForm(StepForm):
    """Step with a long text field that can be rewritten by the backend."""

    optimize_field: str
    field_type: str

    def defaults(self) -> dict[str, Any]:
        return {name: "" for name in self.fields}

    async def optimize(self, controller: "WizardController", text: str | None) -> str | None:
        """Replace the field with the optimized text and save it.

        Blank text is refused locally without a request.

        Raises:
            ValidationFailedError: If ``text`` is blank
        """
        if not text or not text.strip():
            controller.notify("warning", "Uyarı", "Lütfen önce bir metin girin.")
            raise ValidationFailedError("Lütfen önce bir metin girin.", field=self.optimize_field)

        try:
            optimized = await controller.api.optimize_text(text, self.field_type)
        except NonploError as exc:
            logger.warning(f"Text optimization failed for {self.field_type}: {exc.message}")
            controller.notify("error", "Hata", exc.message or "Optimizasyon sırasında bir hata oluştu.")
            raise

        if not optimized:
            return None

        controller.save_step_data({self.optimize_field: optimized})
        controller.notify("success", "Başarılı!", "Metniniz AI ile optimize edildi.")
        return optimized


class FaqForm(OptimizableTextForm):
    step = WizardStep.FAQ
    fields = ("faq_raw",)
    optimize_field = "faq_raw"
    field_type = "faq"


class ProductsForm(OptimizableTextForm):
    step = WizardStep.PRODUCTS
    fields = ("product_service_raw",)
    optimize_field = "product_service_raw"
    field_type = "product"


class EmployeeForm(OptimizableTextForm):
    step = WizardStep.EMPLOYEE
    fields = ("employee_name", "employee_role")
    optimize_field = "employee_role"
    field_type = "role"


# ── Step 7: Training files ───────────────────────────────────

class FilesForm(StepForm):
    """Counters only; uploads go through ``TrainingFiles``."""

    step = WizardStep.FILES
    fields = ("training_files_count", "files_index_status")

    def defaults(self) -> dict[str, Any]:
        return {"training_files_count": 0, "files_index_status": None}


# ── Step 9: Personality ──────────────────────────────────────

class PersonalityForm(StepForm):
    step = WizardStep.PERSONALITY
    fields = ("personality",)

    def defaults(self) -> dict[str, Any]:
        return {"personality": presets.default_personality().model_dump()}

    def normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        personality = values.get("personality")
        if personality is None:
            return values
        personality = Personality.model_validate(personality)
        if personality.tone != presets.CUSTOM_TONE:
            personality = personality.model_copy(update={"custom_instructions": ""})
        return {**values, "personality": personality.model_dump()}


# ── Step 10: Tools ───────────────────────────────────────────

class ToolsForm(StepForm):
    step = WizardStep.TOOLS
    fields = ("selected_tools",)

    def defaults(self) -> dict[str, Any]:
        return {"selected_tools": presets.default_selected_tools()}

    def toggle(self, values: dict[str, Any], tool_key: str) -> dict[str, Any]:
        selected = dict(values.get("selected_tools") or {})
        selected[tool_key] = not selected.get(tool_key, False)
        return {**values, "selected_tools": selected}

    def enabled_count(self, values: dict[str, Any]) -> int:
        return presets.selected_tools_count(values.get("selected_tools"))


# ── Step 11: Approval ────────────────────────────────────────

class ApprovalForm(StepForm):
    step = WizardStep.APPROVAL


_FORMS: dict[WizardStep, StepForm] = {
    form.step: form
    for form in (
        BusinessForm(),
        AddressForm(),
        HoursForm(),
        SocialForm(),
        FaqForm(),
        ProductsForm(),
        FilesForm(),
        EmployeeForm(),
        PersonalityForm(),
        ToolsForm(),
        ApprovalForm(),
    )
}


def form_for(step: int) -> StepForm:
    """Return the form for a step number.

    Raises:
        ValueError: If ``step`` is outside 1..11
    """
    return _FORMS[WizardStep(step)]
