"""
Tests for the script generation job and its failure cleanup.
"""

import pytest

from app.errors import GenerationFailure, NoContentAvailable
from app.models import DocumentStatus, Podcast, PodcastDocument, PodcastStatus
from app.services.script_service import DOCUMENT_SEPARATOR
from app.workers.podcast_generator import cleanup_failed_podcast, generate_podcast, run_podcast_generation
from tests.factories import OTHER_USER_ID, PUBLIC_URL, USER_ID, make_document
from tests.fakes import FakeLLM


def _seed_podcast(store, document_ids=(), **fields):
    podcast = Podcast(user_id=USER_ID, name="Episode", status=PodcastStatus.PROCESSING, **fields)
    store.tables["podcasts"].seed(podcast)
    store.tables["podcast_documents"].seed(
        *[PodcastDocument(podcast_id=podcast.id, document_id=d) for d in document_ids]
    )
    return podcast


async def _run(store, llm, bucket, podcast, document_ids, **kwargs):
    return await generate_podcast(
        podcast.id,
        document_ids,
        USER_ID,
        store,
        llm,
        bucket,
        model="test-model",
        **kwargs,
    )


class TestGeneratePodcast:
    @pytest.mark.asyncio
    async def test_only_processed_documents_feed_the_script(self, store, llm, podcasts_bucket):
        a = make_document(status=DocumentStatus.PROCESSED, content="hi")
        b = make_document(status=DocumentStatus.UPLOADED)
        store.tables["documents"].seed(a, b)
        podcast = _seed_podcast(store, [a.id, b.id])

        await _run(store, llm, podcasts_bucket, podcast, [a.id, b.id], name="Episode")

        user_prompt = llm.calls[0]["messages"][1]["content"]
        assert "hi" in user_prompt
        assert DOCUMENT_SEPARATOR not in user_prompt
        assert "Title: Episode" in user_prompt

    @pytest.mark.asyncio
    async def test_texts_follow_the_requested_order(self, store, llm, podcasts_bucket):
        first = make_document(status=DocumentStatus.PROCESSED, content="FIRST", age_minutes=5)
        second = make_document(status=DocumentStatus.PROCESSED, content="SECOND", age_minutes=50)
        store.tables["documents"].seed(first, second)
        podcast = _seed_podcast(store)

        await _run(store, llm, podcasts_bucket, podcast, [second.id, first.id])

        assert f"SECOND{DOCUMENT_SEPARATOR}FIRST" in llm.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_success_stores_transcript_and_duration(self, store, podcasts_bucket):
        llm = FakeLLM(transcript=" ".join(["word"] * 300))
        doc = make_document(status=DocumentStatus.PROCESSED, content="source")
        store.tables["documents"].seed(doc)
        podcast = _seed_podcast(store, [doc.id])

        script = await _run(store, llm, podcasts_bucket, podcast, [doc.id])

        assert script.estimated_duration == 120
        stored = await store.podcasts.get(podcast.id, USER_ID)
        assert stored.status == PodcastStatus.COMPLETED
        assert stored.duration == 120
        assert stored.transcript == " ".join(["word"] * 300)
        assert await store.podcast_documents.child_ids(podcast.id) == [doc.id]

    @pytest.mark.asyncio
    async def test_no_processed_documents_deletes_the_podcast(self, store, llm, podcasts_bucket):
        pending = make_document(status=DocumentStatus.UPLOADED)
        broken = make_document(status=DocumentStatus.ERROR)
        store.tables["documents"].seed(pending, broken)
        podcast = _seed_podcast(store, [pending.id, broken.id])

        with pytest.raises(NoContentAvailable) as exc_info:
            await _run(store, llm, podcasts_bucket, podcast, [pending.id, broken.id])

        assert exc_info.value.cleaned_up is True
        assert await store.podcasts.get(podcast.id) is None
        assert await store.podcast_documents.child_ids(podcast.id) == []
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_foreign_documents_are_never_read(self, store, llm, podcasts_bucket):
        foreign = make_document(user_id=OTHER_USER_ID, status=DocumentStatus.PROCESSED, content="secret")
        store.tables["documents"].seed(foreign)
        podcast = _seed_podcast(store)

        with pytest.raises(NoContentAvailable):
            await _run(store, llm, podcasts_bucket, podcast, [foreign.id])

        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_completion_error_is_wrapped_and_cleaned_up(self, store, llm, podcasts_bucket):
        doc = make_document(status=DocumentStatus.PROCESSED, content="text")
        store.tables["documents"].seed(doc)
        podcast = _seed_podcast(store, [doc.id])
        llm.error = ConnectionError("network down")

        with pytest.raises(GenerationFailure) as exc_info:
            await _run(store, llm, podcasts_bucket, podcast, [doc.id])

        assert "network down" in exc_info.value.message
        assert exc_info.value.cleaned_up is True
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert await store.podcasts.get(podcast.id) is None

    @pytest.mark.asyncio
    async def test_failed_final_write_triggers_cleanup(self, store, llm, podcasts_bucket, monkeypatch):
        doc = make_document(status=DocumentStatus.PROCESSED, content="text")
        store.tables["documents"].seed(doc)
        podcast = _seed_podcast(store, [doc.id])

        async def failing_update(podcast_id, **values):
            raise RuntimeError("write rejected")

        monkeypatch.setattr(store.podcasts, "update", failing_update)

        with pytest.raises(GenerationFailure):
            await _run(store, llm, podcasts_bucket, podcast, [doc.id])

        assert await store.podcasts.get(podcast.id) is None

    @pytest.mark.asyncio
    async def test_keep_failed_marks_error_instead_of_deleting(self, store, llm, podcasts_bucket):
        podcast = _seed_podcast(store)

        with pytest.raises(NoContentAvailable):
            await _run(store, llm, podcasts_bucket, podcast, ["nothing"], keep_failed=True)

        stored = await store.podcasts.get(podcast.id)
        assert stored.status == PodcastStatus.ERROR
        assert stored.error_message == "No processed documents found"


class TestCleanupFailedPodcast:
    @pytest.mark.asyncio
    async def test_removes_audio_links_and_row(self, store, podcasts_bucket):
        await podcasts_bucket.upload("episode.mp3", b"ID3")
        podcast = _seed_podcast(store, ["d1", "d2"], audio_url=f"{PUBLIC_URL}/podcasts/episode.mp3?v=1")

        await cleanup_failed_podcast(podcast.id, store, podcasts_bucket)

        assert store.tables["podcasts"].rows == []
        assert store.tables["podcast_documents"].rows == []
        assert not (podcasts_bucket.base_dir / "episode.mp3").exists()

    @pytest.mark.asyncio
    async def test_each_step_runs_even_when_earlier_ones_fail(self, store, podcasts_bucket, caplog):
        podcast = _seed_podcast(store, ["d1"], audio_url=f"{PUBLIC_URL}/podcasts/episode.mp3")
        store.tables["podcast_documents"].fail_on = "delete"

        async def broken_remove(paths):
            raise OSError("storage offline")

        podcasts_bucket.remove = broken_remove

        await cleanup_failed_podcast(podcast.id, store, podcasts_bucket)

        assert store.tables["podcasts"].rows == []
        assert len(store.tables["podcast_documents"].rows) == 1
        assert "storage offline" in caplog.text
        assert "Error deleting podcast_documents" in caplog.text


class TestRunPodcastGeneration:
    @pytest.mark.asyncio
    async def test_background_failure_is_logged_not_raised(self, store, llm, podcasts_bucket, caplog):
        podcast = _seed_podcast(store)

        await run_podcast_generation(
            podcast.id, ["missing"], USER_ID, store, llm, podcasts_bucket, model="m"
        )

        assert await store.podcasts.get(podcast.id) is None
        assert "Background podcast generation failed" in caplog.text
