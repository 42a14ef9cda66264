"""Fixed catalogs and presets offered by the wizard steps.

Industries (step 1), timezone detection (step 2), working-hour presets
(step 3), personality presets (step 9) and the tool catalog (step 10).
"""

from dataclasses import dataclass

from nonplo.schemas.wizard import DayHours, HolidaysConfig, Personality, WEEKDAYS


# ── Step 1: Industries ───────────────────────────────────────

POPULAR_INDUSTRIES = [
    "Restoran & Cafe",
    "Kuaför & Güzellik",
    "Eczane",
    "Diş Kliniği",
    "Veteriner Hekim",
    "Emlak",
    "Otel & Turizm",
    "Fitness & Spor",
    "Eğitim & Kurs",
    "Hukuk & Danışmanlık",
    "Muhasebe",
    "Teknoloji & IT",
    "E-ticaret",
    "Temizlik Hizmetleri",
    "Nakliyat & Lojistik",
    "İnşaat & Mimarlık",
    "Sağlık & Medikal",
    "Otomotiv",
    "Gıda & İçecek",
    "Moda & Tekstil",
]


def filter_industries(term: str) -> list[str]:
    """Case-insensitive substring search over the curated industry list."""
    needle = (term or "").replace("İ", "i").lower()
    return [i for i in POPULAR_INDUSTRIES if needle in i.replace("İ", "i").lower()]


# ── Step 2: Timezone ─────────────────────────────────────────

DEFAULT_TIMEZONE = "Europe/Istanbul"


def timezone_from_coords(latitude: float, longitude: float) -> str:
    """Timezone for a selected place.

    Every supported business is in Turkey, so this is always the default zone
    until places abroad are supported.
    """
    return DEFAULT_TIMEZONE


# ── Step 3: Working hours ────────────────────────────────────

@dataclass(frozen=True)
class Day:
    key: str
    label: str
    short: str


DAYS = [
    Day("monday", "Pazartesi", "Pzt"),
    Day("tuesday", "Salı", "Sal"),
    Day("wednesday", "Çarşamba", "Çar"),
    Day("thursday", "Perşembe", "Per"),
    Day("friday", "Cuma", "Cum"),
    Day("saturday", "Cumartesi", "Cmt"),
    Day("sunday", "Pazar", "Paz"),
]

WEEKEND = {"saturday", "sunday"}

PRESET_ALWAYS_OPEN = "7/24 Açık"
PRESET_WEEKDAYS = "Hafta İçi 9-18"
PRESET_CUSTOM = "Özel"


@dataclass(frozen=True)
class HoursPreset:
    name: str
    working_hours: dict[str, DayHours]
    holidays: HolidaysConfig
    shows_day_rows: bool = False


def _week(build) -> dict[str, DayHours]:
    return {day: build(day) for day in WEEKDAYS}


def default_working_hours() -> dict[str, DayHours]:
    return _week(lambda day: DayHours(open="09:00", close="18:00", closed=False))


def default_holidays() -> HolidaysConfig:
    return HolidaysConfig(national_holidays=True, religious_holidays=True, custom_holidays=[])


HOURS_PRESETS: dict[str, HoursPreset] = {
    PRESET_ALWAYS_OPEN: HoursPreset(
        name=PRESET_ALWAYS_OPEN,
        working_hours=_week(lambda day: DayHours(open="00:00", close="23:59", closed=False)),
        holidays=HolidaysConfig(national_holidays=False, religious_holidays=False),
    ),
    PRESET_WEEKDAYS: HoursPreset(
        name=PRESET_WEEKDAYS,
        working_hours=_week(
            lambda day: DayHours(open="09:00", close="18:00", closed=day in WEEKEND)
        ),
        holidays=HolidaysConfig(national_holidays=False, religious_holidays=False),
    ),
    PRESET_CUSTOM: HoursPreset(
        name=PRESET_CUSTOM,
        working_hours=default_working_hours(),
        holidays=default_holidays(),
        shows_day_rows=True,
    ),
}


def apply_hours_preset(name: str) -> HoursPreset:
    """Return a fresh copy of a named preset.

    Raises:
        KeyError: If the preset name is unknown
    """
    preset = HOURS_PRESETS[name]
    return HoursPreset(
        name=preset.name,
        working_hours={k: v.model_copy() for k, v in preset.working_hours.items()},
        holidays=preset.holidays.model_copy(deep=True),
        shows_day_rows=preset.shows_day_rows,
    )


def set_day_hours(
    hours: dict[str, DayHours],
    day: str,
    *,
    open: str | None = None,
    close: str | None = None,
    closed: bool | None = None,
) -> dict[str, DayHours]:
    """Edit one weekday row, returning a new schedule."""
    if day not in WEEKDAYS:
        raise ValueError(f"Unknown weekday: {day}")

    current = hours.get(day) or DayHours()
    update = current.model_dump()
    if open is not None:
        update["open"] = open
    if close is not None:
        update["close"] = close
    if closed is not None:
        update["closed"] = closed

    new_hours = dict(hours)
    new_hours[day] = DayHours.model_validate(update)
    return new_hours


# ── Step 9: Personality ──────────────────────────────────────

@dataclass(frozen=True)
class PersonalityPreset:
    value: str
    label: str
    description: str


PERSONALITY_PRESETS = [
    PersonalityPreset("sevecen", "Sevecen", "Sıcak ve anlayışlı"),
    PersonalityPreset("profesyonel", "Profesyonel", "Resmi ve ciddi"),
    PersonalityPreset("arkadas_canlisi", "Arkadaş Canlısı", "Samimi ve yakın"),
    PersonalityPreset("konuskan", "Konuşkan", "Detaylı ve açıklayıcı"),
    PersonalityPreset("ozel", "Özel", "Kendi tarzınızı oluşturun"),
]

CUSTOM_TONE = "ozel"

FORMALITY_LABELS = {
    1: "Çok Samimi",
    2: "Samimi",
    3: "Dengeli",
    4: "Resmi",
    5: "Çok Resmi",
}

RESPONSE_LENGTH_LABELS = {
    "kisa": "Kısa",
    "orta": "Orta",
    "uzun": "Uzun",
}


def default_personality() -> Personality:
    return Personality(
        tone="profesyonel",
        formality=3,
        creativity=0.7,
        response_length="orta",
        use_emojis=False,
        custom_instructions="",
    )


def formality_label(formality: int) -> str:
    return FORMALITY_LABELS.get(formality, "")


def creativity_label(creativity: float) -> str:
    if creativity < 0.3:
        return "Tutarlı"
    if creativity < 0.7:
        return "Dengeli"
    if creativity < 1.2:
        return "Yaratıcı"
    return "Çok Yaratıcı"


# ── Step 10: Tools ───────────────────────────────────────────

@dataclass(frozen=True)
class Tool:
    key: str
    name: str
    description: str
    category: str


TOOL_CATEGORIES = [
    "Randevu & Planlama",
    "İletişim",
    "Bilgi & Araştırma",
    "Satış & Pazarlama",
    "Destek & Yönlendirme",
]

TOOLS = [
    Tool("googleCalendar", "Google Takvim", "Randevu oluşturma ve takvim yönetimi", "Randevu & Planlama"),
    Tool("gmail", "Gmail", "E-posta gönderme ve okuma", "İletişim"),
    Tool("webSearch", "Web Arama", "Güncel bilgi arama ve araştırma", "Bilgi & Araştırma"),
    Tool("fileSearch", "Dosya Arama", "Yüklenen dosyalardan bilgi arama", "Bilgi & Araştırma"),
    Tool("productCatalog", "Ürün Kataloğu", "Ürün/hizmet bilgileri ve fiyatlandırma", "Satış & Pazarlama"),
    Tool("paymentLinks", "Ödeme Linkleri", "Ödemeli linkler oluşturma", "Satış & Pazarlama"),
    Tool("humanHandoff", "İnsan Devresi", "Gerektiğinde gerçek kişiye yönlendirme", "Destek & Yönlendirme"),
]

DEFAULT_ENABLED_TOOLS = {"webSearch", "fileSearch", "humanHandoff"}


def default_selected_tools() -> dict[str, bool]:
    return {tool.key: tool.key in DEFAULT_ENABLED_TOOLS for tool in TOOLS}


def tools_by_category(category: str) -> list[Tool]:
    return [tool for tool in TOOLS if tool.category == category]


def selected_tools_count(selected: dict[str, bool] | None) -> int:
    return sum(1 for enabled in (selected or {}).values() if enabled)
