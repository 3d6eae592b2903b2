"""Tests for gifclip.converter module."""

import threading

import pytest

from gifclip.config import ConversionConfig
from gifclip.converter import GifConverter
from gifclip.error_handling import ErrorKind, JobInProgressError
from gifclip.handles import HandleRegistry
from gifclip.job import ConversionJob, JobState


def make_job(**overrides):
    params = dict(start_time=2.0, duration=3.0, target_width=320, frame_rate=10.0)
    params.update(overrides)
    return ConversionJob(**params)


@pytest.fixture
def make_converter(registry, fast_config, pause, encoder_factory):
    def _make(source, **kwargs):
        options = dict(
            source_factory=lambda path: source,
            encoder_factory=encoder_factory,
            config=fast_config,
            registry=registry,
            pause=pause,
        )
        options.update(kwargs)
        return GifConverter(**options)

    return _make


class TestGifConverter:
    """Tests for GifConverter class."""

    def test_successful_conversion(self, make_converter, fake_source, video_file, fake_gif_bytes):
        fractions = []
        converter = make_converter(fake_source)

        outcome = converter.convert(video_file, make_job(), on_progress=fractions.append)

        assert outcome.succeeded
        assert outcome.frames_captured == 30
        assert outcome.frames_planned == 30
        assert outcome.warnings == []
        assert outcome.result.suggested_file_name == "holiday_converted.gif"
        assert outcome.result.read_bytes() == fake_gif_bytes
        assert fractions[-1] == pytest.approx(1.0)
        assert not converter.is_busy

    def test_only_artifact_handle_stays_live(self, make_converter, fake_source, video_file, registry):
        outcome = make_converter(fake_source).convert(video_file, make_job())

        assert registry.live_handles() == [outcome.result.artifact_handle]

    def test_truncated_source_adds_warning(self, make_converter, make_source, video_file):
        outcome = make_converter(make_source(duration=3.0)).convert(video_file, make_job())

        assert outcome.succeeded
        assert outcome.frames_captured == 11
        assert outcome.frames_planned == 11
        assert outcome.warnings == ["Source ended early: captured 11 of 30 requested frames"]

    def test_invalid_media_type_skips_pipeline(self, make_converter, fake_source, encoder_factory, tmp_path):
        errors = []
        notes = tmp_path / "notes.txt"
        notes.write_text("not a video")

        outcome = make_converter(fake_source).convert(notes, make_job(), on_error=errors.append)

        assert outcome.state is JobState.FAILED
        assert outcome.error_kind is ErrorKind.UNSUPPORTED_MEDIA_TYPE
        assert errors == [outcome]
        assert not fake_source.loaded
        assert encoder_factory.created == []

    def test_oversized_file_rejected(self, make_converter, fake_source, video_file):
        converter = make_converter(fake_source, config=ConversionConfig(MAX_FILE_SIZE_MB=0.0001))

        outcome = converter.convert(video_file, make_job())

        assert outcome.error_kind is ErrorKind.SIZE_LIMIT_EXCEEDED
        assert not fake_source.loaded

    def test_width_below_minimum_rejected(self, make_converter, fake_source, video_file):
        outcome = make_converter(fake_source).convert(video_file, make_job(target_width=20))

        assert outcome.error_kind is ErrorKind.INVALID_INPUT
        assert not fake_source.loaded

    def test_start_past_end_reports_invalid_input(self, make_converter, fake_source, video_file, registry):
        errors = []
        outcome = make_converter(fake_source).convert(
            video_file, make_job(start_time=12.0), on_error=errors.append
        )

        assert outcome.error_kind is ErrorKind.INVALID_INPUT
        assert outcome.frames_planned == 0
        assert len(errors) == 1
        assert registry.live_handles() == []

    def test_fit_to_source_recovers_start_past_end(self, make_converter, fake_source, video_file):
        outcome = make_converter(fake_source).convert(
            video_file, make_job(start_time=12.0, frame_rate=4.0), fit_to_source=True
        )

        assert outcome.succeeded
        # Start is pulled back to 9.9s, leaving room for one frame at 4 fps
        assert outcome.frames_captured == 1
        assert fake_source.released

    def test_capture_failure_reported_once(self, make_converter, make_source, video_file, registry):
        errors = []
        source = make_source(fail_capture_at=15)

        outcome = make_converter(source).convert(video_file, make_job(), on_error=errors.append)

        assert outcome.error_kind is ErrorKind.FRAME_CAPTURE_ERROR
        assert outcome.frames_captured == 14
        assert outcome.frames_planned == 30
        assert outcome.result is None
        assert errors == [outcome]
        assert registry.live_handles() == []

    def test_artifact_storage_failure_reported_once(self, make_converter, fake_source, video_file, tmp_path):
        errors = []
        blocked_spool = tmp_path / "blocked_spool"
        blocked_spool.write_text("not a directory")
        registry = HandleRegistry(spool_dir=blocked_spool)

        converter = make_converter(fake_source, registry=registry)

        outcome = converter.convert(video_file, make_job(), on_error=errors.append)

        assert outcome.state is JobState.FAILED
        assert outcome.error_kind is ErrorKind.ENCODING_ERROR
        assert "Could not store the encoded GIF" in outcome.message
        assert outcome.frames_captured == 30
        assert outcome.result is None
        assert errors == [outcome]
        assert registry.live_handles() == []
        assert not converter.is_busy

    def test_encoder_failure(self, make_converter, fake_source, make_encoder_factory, video_file):
        converter = make_converter(fake_source, encoder_factory=make_encoder_factory(fail=True))

        outcome = converter.convert(video_file, make_job())

        assert outcome.error_kind is ErrorKind.ENCODING_ERROR
        assert "worker crashed" in outcome.message

    def test_empty_artifact_is_encoding_error(self, make_converter, fake_source, make_encoder_factory, video_file):
        converter = make_converter(fake_source, encoder_factory=make_encoder_factory(artifact=b""))

        outcome = converter.convert(video_file, make_job())

        assert outcome.error_kind is ErrorKind.ENCODING_ERROR

    def test_source_file_check_can_be_disabled(self, make_converter, fake_source, tmp_path):
        converter = make_converter(fake_source, check_source_file=False)

        outcome = converter.convert(tmp_path / "stream", make_job())

        assert outcome.succeeded
        assert outcome.result.suggested_file_name == "stream_converted.gif"

    def test_concurrent_job_rejected(self, make_converter, make_source, video_file):
        loading = threading.Event()
        proceed = threading.Event()

        class BlockingSource(make_source):
            def load(self):
                loading.set()
                assert proceed.wait(5)
                super().load()

        converter = make_converter(BlockingSource())
        outcomes = []
        worker = threading.Thread(
            target=lambda: outcomes.append(converter.convert(video_file, make_job()))
        )
        worker.start()
        try:
            assert loading.wait(5)
            assert converter.is_busy
            with pytest.raises(JobInProgressError):
                converter.convert(video_file, make_job())
        finally:
            proceed.set()
            worker.join(5)

        assert outcomes[0].succeeded
        assert not converter.is_busy

    def test_converter_reusable_after_failure(self, make_converter, make_source, video_file):
        sources = iter([make_source(fail_load=True), make_source()])
        converter = make_converter(None, source_factory=lambda path: next(sources))

        first = converter.convert(video_file, make_job())
        second = converter.convert(video_file, make_job())

        assert first.error_kind is ErrorKind.MEDIA_LOAD_ERROR
        assert second.succeeded
