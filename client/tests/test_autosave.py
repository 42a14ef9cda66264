"""Debounced auto-save and social link validation."""

import asyncio

import pytest

from nonplo.wizard.autosave import SocialLinkValidator
from nonplo.wizard.steps import WizardStep


@pytest.mark.wizard
@pytest.mark.asyncio
class TestAutoSaver:
    async def test_rapid_edits_coalesce_into_one_save(self, opened, backend):
        saver = opened.autosaver(delay=0.02)

        for name in ("K", "Ka", "Kah", "Kahve"):
            saver.change({"business_name": name, "industry": ""})
            await asyncio.sleep(0)

        assert saver.pending
        await asyncio.sleep(0.05)
        await opened.wait_for_saves()

        assert len(backend.session_patches) == 1
        assert backend.session_patches[0]["businessName"] == "Kahve"
        assert not saver.pending

    async def test_flush_saves_immediately(self, opened, backend):
        saver = opened.autosaver(step=WizardStep.FAQ, delay=10)
        saver.change({"faq_raw": "Rezervasyon alıyor musunuz?"})

        await saver.flush()

        assert not saver.pending
        assert backend.sessions[opened.session_id]["faqRaw"] == "Rezervasyon alıyor musunuz?"

    async def test_unchanged_values_are_not_saved(self, opened, backend):
        saver = opened.autosaver(step=WizardStep.EMPLOYEE, delay=0.01)
        saver.change({"employee_name": "", "employee_role": ""})

        await asyncio.sleep(0.03)
        await opened.wait_for_saves()

        assert backend.session_patches == []

    async def test_invalid_field_is_reported_and_others_still_save(self, opened, backend, notifications):
        saver = opened.autosaver(step=WizardStep.HOURS, delay=0.01)
        saver.change({
            "working_hours": {"monday": {"open": "25:00", "close": "18:00", "closed": False}},
            "holidays_config": {"national_holidays": False, "religious_holidays": True, "custom_holidays": []},
        })

        await asyncio.sleep(0.03)
        await opened.wait_for_saves()

        assert len(backend.session_patches) == 1
        patch = backend.session_patches[0]
        assert patch["holidaysConfig"]["nationalHolidays"] is False
        assert "workingHours" not in patch
        assert set(saver.errors) == {"working_hours"}
        assert [n.level for n in notifications] == ["warning"]

    async def test_only_invalid_values_send_nothing(self, opened, backend, notifications):
        saver = opened.autosaver(step=WizardStep.HOURS, delay=10)
        saver.change({"working_hours": {"friday": {"open": "09:00", "close": "24:30", "closed": False}}})

        await saver.flush()

        assert backend.session_patches == []
        assert "working_hours" in saver.errors
        assert notifications[-1].level == "warning"

        saver.change({"working_hours": {"friday": {"open": "09:00", "close": "17:30", "closed": False}}})
        await saver.flush()

        assert saver.errors == {}
        assert backend.session_patches[0]["workingHours"]["friday"]["close"] == "17:30"


@pytest.mark.wizard
@pytest.mark.asyncio
class TestSocialLinkValidator:
    async def test_only_last_value_is_checked(self):
        seen = []
        validator = SocialLinkValidator(delay=0.01, on_result=seen.append)

        validator.check("instagram", "admin")
        task = validator.check("instagram", "kahveduragi")
        result = await task

        assert result.valid
        assert [r.value for r in seen] == ["instagram.com/kahveduragi"]

    async def test_errors_per_platform(self):
        validator = SocialLinkValidator(delay=0)

        await asyncio.gather(
            validator.check("instagram", "facebook.com/kahve"),
            validator.check("twitter", "@kahve"),
        )

        assert not validator.all_valid
        assert set(validator.errors()) == {"instagram"}

        await validator.check("instagram", "")
        assert validator.all_valid

    async def test_cancel_drops_pending_checks(self):
        validator = SocialLinkValidator(delay=0.01)
        validator.check("facebook", "fb.com/kahve")

        validator.cancel()
        await asyncio.sleep(0.02)

        assert validator.results == {}
