"""Training file upload tests (step 7)."""

import asyncio

import pytest

from nonplo.wizard.files import TrainingFiles

FAST_DELAYS = (0.01, 0.02, 0.03)


def file_requests(backend, method: str) -> list[str]:
    return [path for m, path in backend.requests if m == method and "/files" in path]


@pytest.mark.wizard
@pytest.mark.asyncio
class TestTrainingFiles:
    """Upload intent, simulated status progression and removal."""

    async def test_rejected_before_any_request(self, opened, backend, notifications):
        files = TrainingFiles(opened, delays=FAST_DELAYS)

        result = await files.upload([
            ("kurulum.exe", 1024),
            ("katalog.pdf", 11 * 1024 * 1024),
            ("bos.txt", 0),
        ])

        assert result.accepted == []
        assert [r.filename for r in result.rejected] == ["kurulum.exe", "katalog.pdf", "bos.txt"]
        assert file_requests(backend, "POST") == []
        await opened.wait_for_saves()
        assert backend.session_patches == []
        assert all(n.level == "warning" for n in notifications)

    async def test_mixed_batch_uploads_only_valid_files(self, opened, backend):
        files = TrainingFiles(opened, delays=FAST_DELAYS)

        result = await files.upload([("menu.pdf", 2048), ("fiyatlar.xlsx", 4096), ("virus.exe", 10)])

        assert [f.original_name for f in result.accepted] == ["menu.pdf", "fiyatlar.xlsx"]
        assert len(result.rejected) == 1
        assert len(file_requests(backend, "POST")) == 2
        await files.wait_until_settled()

    async def test_session_counts_accumulate(self, opened, backend):
        files = TrainingFiles(opened, delays=FAST_DELAYS)

        await files.upload([("a.pdf", 100), ("b.txt", 100)])
        await files.upload([("c.csv", 100)])
        await opened.wait_for_saves()

        row = backend.sessions[opened.session_id]
        assert row["trainingFilesCount"] == 3
        assert row["filesIndexStatus"] == "processing"
        await files.wait_until_settled()

    async def test_failed_upload_keeps_the_rest_of_the_batch(self, opened, backend, notifications):
        backend.fail_file_names = {"b.pdf"}
        files = TrainingFiles(opened, delays=FAST_DELAYS)

        result = await files.upload([("a.pdf", 100), ("b.pdf", 100)])

        assert [f.original_name for f in result.accepted] == ["a.pdf"]
        assert [r.filename for r in result.rejected] == ["b.pdf"]
        assert notifications[-1].level == "warning"

        await opened.wait_for_saves()
        row = backend.sessions[opened.session_id]
        assert row["trainingFilesCount"] == 1
        assert row["filesIndexStatus"] == "processing"
        await files.wait_until_settled()

    async def test_status_progression(self, opened, backend):
        files = TrainingFiles(opened, delays=FAST_DELAYS)

        result = await files.upload([("sss.md", 512)])
        file_id = result.accepted[0].id
        assert files.files[file_id].status == "uploading"

        await files.wait_until_settled()

        assert files.files[file_id].status == "indexed"
        assert backend.files[opened.session_id][file_id]["status"] == "indexed"
        assert len(file_requests(backend, "PATCH")) == 3

    async def test_remove_cancels_pending_updates(self, opened, backend):
        files = TrainingFiles(opened, delays=FAST_DELAYS)
        result = await files.upload([("menu.pdf", 2048)])
        file_id = result.accepted[0].id

        await files.remove(file_id)
        await asyncio.sleep(0.05)

        assert file_id not in files.files
        assert file_id not in backend.files[opened.session_id]
        assert file_requests(backend, "PATCH") == []
        assert len(file_requests(backend, "DELETE")) == 1

    async def test_labels(self, opened):
        assert TrainingFiles.status_label("processing") == "İşleniyor..."
        assert TrainingFiles.status_label("indexed") == "Hazır"
        assert TrainingFiles.size_label(1536) == "1.5 KB"
