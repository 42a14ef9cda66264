"""Validator tests: times, forbidden words, social links, training files."""

import pytest

from nonplo.exceptions import FileRejectedError
from nonplo.schemas.validators import (
    business_name_status,
    find_forbidden_words,
    format_file_size,
    format_social_url,
    validate_email,
    validate_social_link,
    validate_time,
    validate_training_file,
)

MAX_BYTES = 10 * 1024 * 1024
WORDS = ["küfür", "kötü kelime", "sik"]


@pytest.mark.unit
class TestTimeAndEmail:
    def test_time_is_zero_padded(self):
        assert validate_time("9:05") == "09:05"
        assert validate_time("23:59") == "23:59"

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", ""])
    def test_invalid_time(self, value):
        with pytest.raises(ValueError):
            validate_time(value)

    def test_email_is_lowercased(self):
        assert validate_email(" Owner@Example.COM ") == "owner@example.com"

    def test_invalid_email(self):
        with pytest.raises(ValueError):
            validate_email("not-an-email")


@pytest.mark.unit
class TestForbiddenWords:
    def test_whole_word_match(self):
        assert find_forbidden_words("Sik Cafe", WORDS) == ["sik"]

    def test_no_match_inside_other_words(self):
        """A denylisted fragment inside a longer word is not a match."""
        assert find_forbidden_words("Klasik Cafe", WORDS) == []

    def test_multi_word_entry_matches_token_sequence(self):
        assert find_forbidden_words("Çok kötü kelime burada", WORDS) == ["kötü kelime"]
        assert find_forbidden_words("kötü bir kelime", WORDS) == []

    def test_case_insensitive_with_turkish_letters(self):
        assert find_forbidden_words("KÜFÜR Evi", WORDS) == ["küfür"]
        assert find_forbidden_words("İstanbul Kahve", ["istanbul"]) == ["istanbul"]

    def test_business_name_status(self):
        assert business_name_status("", WORDS) == "idle"
        assert business_name_status("K", WORDS) == "idle"
        assert business_name_status("Kahve Durağı", WORDS) == "valid"
        assert business_name_status("Küfür Cafe", WORDS) == "invalid"


@pytest.mark.unit
class TestSocialLinks:
    @pytest.mark.parametrize(
        "value, platform, expected",
        [
            ("myhandle", "instagram", "instagram.com/myhandle"),
            ("@myhandle", "instagram", "instagram.com/myhandle"),
            ("https://instagram.com/myhandle", "instagram", "instagram.com/myhandle"),
            ("http://www.facebook.com/kahve", "facebook", "www.facebook.com/kahve"),
            ("@kahve", "twitter", "twitter.com/kahve"),
            ("@kahve", "tiktok", "tiktok.com/@kahve"),
            ("kahve", "tiktok", "tiktok.com/@kahve"),
            ("@kanal", "youtube", "youtube.com/@kanal"),
            ("kahve-duragi", "linkedin", "linkedin.com/company/kahve-duragi"),
            ("kahvesayfasi", "facebook", "facebook.com/kahvesayfasi"),
            ("", "instagram", ""),
        ],
    )
    def test_format_social_url(self, value, platform, expected):
        assert format_social_url(value, platform) == expected

    def test_empty_link_is_valid(self):
        assert validate_social_link("facebook", "").valid

    @pytest.mark.parametrize(
        "platform, value",
        [
            ("instagram", "myhandle"),
            ("instagram", "https://www.instagram.com/kahve/"),
            ("twitter", "x.com/kahve"),
            ("facebook", "fb.com/kahvesayfasi"),
            ("tiktok", "@kahveduragi"),
            ("youtube", "youtube.com/channel/UC1234567890abcdefghijkl"),
            ("linkedin", "linkedin.com/in/ayse-yilmaz"),
        ],
    )
    def test_valid_links(self, platform, value):
        result = validate_social_link(platform, value)
        assert result.valid, result.message

    def test_valid_link_reports_normalized_value(self):
        assert validate_social_link("instagram", "myhandle").value == "instagram.com/myhandle"

    def test_wrong_domain(self):
        result = validate_social_link("instagram", "facebook.com/kahve")
        assert not result.valid
        assert result.code == "domain"

    def test_bad_account_format(self):
        result = validate_social_link("twitter", "twitter.com/this_handle_is_far_too_long")
        assert result.code == "format"

    def test_denylisted_account(self):
        result = validate_social_link("instagram", "adminkahve")
        assert result.code == "denylist"

    def test_unknown_platform(self):
        assert validate_social_link("mastodon", "kahve").code == "unknown_platform"


@pytest.mark.unit
class TestTrainingFiles:
    def test_allowed_extension(self):
        assert validate_training_file("Menü.PDF", 2048, MAX_BYTES) == "application/pdf"
        assert validate_training_file("notlar.md", 10, MAX_BYTES) == "text/markdown"

    @pytest.mark.parametrize("filename", ["setup.exe", "foto.png", "arşiv.zip", "README"])
    def test_disallowed_extension(self, filename):
        with pytest.raises(FileRejectedError) as exc_info:
            validate_training_file(filename, 10, MAX_BYTES)
        assert exc_info.value.filename == filename

    def test_size_limits(self):
        assert validate_training_file("tam.pdf", MAX_BYTES, MAX_BYTES)
        with pytest.raises(FileRejectedError):
            validate_training_file("buyuk.pdf", MAX_BYTES + 1, MAX_BYTES)
        with pytest.raises(FileRejectedError):
            validate_training_file("bos.txt", 0, MAX_BYTES)

    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (10 * 1024 * 1024, "10 MB"),
        ],
    )
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected
