"""Approval step summary: what is filled in and how complete the session is."""

from dataclasses import dataclass
from typing import Optional

from nonplo.schemas.wizard import WizardSession
from nonplo.wizard.presets import selected_tools_count

CONFIGURED = "Ayarlandı"


@dataclass(frozen=True)
class SummaryField:
    label: str
    value: Optional[str]
    required: bool = False

    @property
    def filled(self) -> bool:
        return bool(self.value)

    @property
    def preview(self) -> str:
        return truncate(self.value, 20)


@dataclass(frozen=True)
class ApprovalSummary:
    required: list[SummaryField]
    optional: list[SummaryField]
    social_connections: int
    tools_enabled: int
    completeness: float
    role_preview: str

    @property
    def is_complete(self) -> bool:
        return all(f.filled for f in self.required)


def truncate(value: Optional[str], limit: int) -> str:
    if not value:
        return ""
    return f"{value[:limit]}..." if len(value) > limit else value


def build_summary(session: WizardSession) -> ApprovalSummary:
    required = [
        SummaryField("İşletme Adı", session.business_name, required=True),
        SummaryField("Sektör", session.industry, required=True),
        SummaryField("Çalışma Saatleri", CONFIGURED if session.working_hours else None, required=True),
        SummaryField("Ürün/Hizmet", session.product_service_raw, required=True),
        SummaryField("Çalışan Adı", session.employee_name, required=True),
        SummaryField("Görev Tanımı", session.employee_role, required=True),
        SummaryField("Kişilik", CONFIGURED if session.personality else None, required=True),
    ]

    files = session.training_files_count or 0
    optional = [
        SummaryField("Adres", session.address),
        SummaryField("Web Sitesi", session.website),
        SummaryField("FAQ", session.faq_raw),
        SummaryField("Eğitim Dosyaları", f"{files} dosya" if files > 0 else None),
    ]

    social = session.social_media or {}
    filled = sum(1 for f in required if f.filled)

    return ApprovalSummary(
        required=required,
        optional=optional,
        social_connections=sum(1 for link in social.values() if link),
        tools_enabled=selected_tools_count(session.selected_tools),
        completeness=filled / len(required) * 100,
        role_preview=truncate(session.employee_role, 100),
    )
