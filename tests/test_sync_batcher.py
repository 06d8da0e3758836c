"""Tests for sync/batcher.py -- batch partitioning and sequential translation."""

import math

import pytest

from i18n_nexus.errors import ConfigurationError, TranslationServiceError
from i18n_nexus.sync.batcher import BatchCoordinator, split_into_batches
from i18n_nexus.sync.models import TokenUsage, TranslationResult


class TestSplitIntoBatches:
    """Tests for split_into_batches()."""

    @pytest.mark.parametrize("size,batch_size", [(0, 3), (1, 1), (7, 3), (9, 3), (5, 100)])
    def test_partition_law(self, size, batch_size):
        """ceil(M/N) batches whose keys concatenate to the original order."""
        mapping = {f"k{i}": f"v{i}" for i in range(size)}

        batches = split_into_batches(mapping, batch_size)

        assert len(batches) == math.ceil(size / batch_size)
        assert all(len(b) <= batch_size for b in batches)
        keys = [key for batch in batches for key in batch]
        assert keys == list(mapping)

    def test_values_kept(self):
        batches = split_into_batches({"a": "A", "b": "B", "c": "C"}, 2)
        assert batches == [{"a": "A", "b": "B"}, {"c": "C"}]

    def test_invalid_batch_size(self):
        with pytest.raises(ConfigurationError, match="at least 1"):
            split_into_batches({"a": "A"}, 0)


class RecordingProvider:
    """Provider double that records batches and can fail on one of them."""

    name = "Recording"

    def __init__(self, fail_at=None, error=None, response=None):
        self.calls = []
        self.fail_at = fail_at
        self.error = error or TranslationServiceError("quota exceeded")
        self.response = response

    async def translate(self, content, target_language):
        self.calls.append(dict(content))
        if self.fail_at == len(self.calls):
            raise self.error
        translated = (
            self.response(content)
            if self.response
            else {k: v.upper() for k, v in content.items()}
        )
        return TranslationResult(
            translated_content=translated,
            tokens_used=TokenUsage(input_tokens=len(content), output_tokens=1),
        )

    async def validate_translation(self, original, translated, target_language):
        raise NotImplementedError


class TestBatchCoordinator:
    """Tests for BatchCoordinator.run()."""

    async def test_translates_in_order(self):
        provider = RecordingProvider()
        coordinator = BatchCoordinator(provider, batch_size=2)
        mapping = {"a": "x", "b": "y", "c": "z"}

        translated, usage = await coordinator.run(mapping, "fr")

        assert provider.calls == [{"a": "x", "b": "y"}, {"c": "z"}]
        assert translated == {"a": "X", "b": "Y", "c": "Z"}
        assert usage == TokenUsage(input_tokens=3, output_tokens=2)

    async def test_empty_input_makes_no_calls(self):
        provider = RecordingProvider()
        translated, usage = await BatchCoordinator(provider, 2).run({}, "fr")

        assert provider.calls == []
        assert translated == {}
        assert usage == TokenUsage()

    async def test_failure_stops_and_discards(self):
        provider = RecordingProvider(fail_at=2)
        coordinator = BatchCoordinator(provider, batch_size=1)

        with pytest.raises(TranslationServiceError, match="Batch 2 of 3"):
            await coordinator.run({"a": "x", "b": "y", "c": "z"}, "fr")

        assert len(provider.calls) == 2

    async def test_unexpected_error_wrapped(self):
        provider = RecordingProvider(fail_at=1, error=KeyError("choices"))

        with pytest.raises(TranslationServiceError, match="KeyError"):
            await BatchCoordinator(provider, 5).run({"a": "x"}, "fr")

    async def test_nested_response_flattened(self):
        provider = RecordingProvider(
            response=lambda content: {"menu": {"open": "Ouvrir"}}
        )

        translated, _ = await BatchCoordinator(provider, 5).run(
            {"menu.open": "Open"}, "fr"
        )

        assert translated == {"menu.open": "Ouvrir"}

    async def test_extra_keys_ignored(self):
        provider = RecordingProvider(
            response=lambda content: {"a": "A", "b": "B", "unasked": "?"}
        )

        translated, _ = await BatchCoordinator(provider, 5).run(
            {"a": "x", "b": "y"}, "fr"
        )

        assert translated == {"a": "A", "b": "B"}

    async def test_missing_key_fails_batch(self):
        provider = RecordingProvider(response=lambda content: {"a": "A"})

        with pytest.raises(
            TranslationServiceError,
            match=r"Batch 1 of 1 failed: .*no translation for 1 key\(s\): b",
        ):
            await BatchCoordinator(provider, 5).run({"a": "x", "b": "y"}, "fr")

    def test_invalid_batch_size(self):
        with pytest.raises(ConfigurationError):
            BatchCoordinator(RecordingProvider(), batch_size=0)
