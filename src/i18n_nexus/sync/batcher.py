"""Sequential batch translation.

Splits a flat to-translate mapping into size-bounded batches and sends
them to the translation provider one after the other.  Batches are never
submitted concurrently: most backends rate-limit, and a failure must be
attributable to a single batch.

If any batch fails the whole call fails and the results of earlier
batches are discarded, so a language is either fully translated or not
written at all.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from i18n_nexus.errors import ConfigurationError, TranslationServiceError

from .models import TokenUsage
from .paths import flatten

if TYPE_CHECKING:
    from i18n_nexus.providers import TranslationProvider

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


def split_into_batches(
    mapping: dict[str, Any], batch_size: int
) -> list[dict[str, Any]]:
    """Partition *mapping* into ordered batches of at most *batch_size*.

    Batch ``i`` holds keys ``[i * batch_size, (i + 1) * batch_size)`` of the
    mapping's iteration order.

    Raises:
        ConfigurationError: If *batch_size* is smaller than 1.
    """
    if batch_size < 1:
        raise ConfigurationError(
            f"Invalid batch size {batch_size}: must be at least 1"
        )

    items = list(mapping.items())
    return [
        dict(items[start : start + batch_size])
        for start in range(0, len(items), batch_size)
    ]


class BatchCoordinator:
    """Drive a translation provider over size-bounded batches.

    Args:
        provider: The translation backend.
        batch_size: Maximum number of entries per backend call.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ConfigurationError(
                f"Invalid batch size {batch_size}: must be at least 1"
            )
        self.provider = provider
        self.batch_size = batch_size

    async def run(
        self, to_translate: dict[str, Any], target_language: str
    ) -> tuple[dict[str, Any], TokenUsage]:
        """Translate *to_translate* into *target_language*.

        Returns:
            ``(translated, usage)`` where *translated* maps every requested
            path to its translation and *usage* is the sum over all
            batches.

        Raises:
            TranslationServiceError: If any batch fails.
        """
        if not to_translate:
            return {}, TokenUsage()

        batches = split_into_batches(to_translate, self.batch_size)
        translated: dict[str, Any] = {}
        usage = TokenUsage()

        for index, batch in enumerate(batches, start=1):
            logger.info(
                "Translating batch %d of %d (%d keys) to %s...",
                index,
                len(batches),
                len(batch),
                target_language,
            )
            try:
                result = await self.provider.translate(batch, target_language)
            except TranslationServiceError as exc:
                raise TranslationServiceError(
                    f"Batch {index} of {len(batches)} failed: {exc}"
                ) from exc
            except Exception as exc:
                raise TranslationServiceError(
                    f"Batch {index} of {len(batches)} failed: "
                    f"{type(exc).__name__}: {exc}"
                ) from exc

            try:
                accepted = self._accept(batch, result.translated_content)
            except TranslationServiceError as exc:
                raise TranslationServiceError(
                    f"Batch {index} of {len(batches)} failed: {exc}"
                ) from exc
            translated.update(accepted)
            usage = usage + result.tokens_used
            logger.info(
                "Batch %d translated. Tokens used: %s",
                index,
                result.tokens_used,
            )

        return translated, usage

    @staticmethod
    def _accept(
        batch: dict[str, Any], response: dict[str, Any]
    ) -> dict[str, Any]:
        """Keep only the requested keys of a backend response.

        Backends may answer with nested objects instead of dotted keys;
        flattening normalises both shapes.

        Raises:
            TranslationServiceError: If the response leaves out any
                requested key.
        """
        flat = flatten(response)
        missing = [path for path in batch if path not in flat]
        if missing:
            raise TranslationServiceError(
                f"Backend returned no translation for {len(missing)} "
                f"key(s): {', '.join(missing[:10])}"
            )

        accepted = {path: flat[path] for path in batch}
        extra = len(flat) - len(accepted)
        if extra:
            logger.debug("Ignoring %d unrequested key(s) in response", extra)
        return accepted
