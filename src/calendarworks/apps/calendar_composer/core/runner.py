"""Batch driver: pair every month with every image and build the composites."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .compositor import compose_pair
from .config import ComposerConfig
from .discovery import list_entries, plan_pairs
from .errors import ComposerError
from .models import BatchSummary, ColorPair, ImagePair, PairResult, PairStatus
from .overlay import Font, apply_overlay, load_font
from .palette import extract_color_pair

logger = logging.getLogger(__name__)

ResultCallback = Callable[[PairResult], None]


class ComposerRunner:
    """Coordinate discovery, palette extraction, stacking and overlay.

    Images are processed on an outer thread pool; the months of each image on
    a nested pool. A failing pair is logged and recorded, and the remaining
    pairs carry on.
    """

    def __init__(self, config: ComposerConfig) -> None:
        self.config = config
        self._on_result: Optional[ResultCallback] = None
        self._font: Optional[Font] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def plan(self) -> Dict[Path, List[ImagePair]]:
        """List both source directories and build the pair plan."""

        months = list_entries(self.config.months_dir)
        images = list_entries(self.config.images_dir)
        logger.info(
            "Found %d month entries and %d image entries", len(months), len(images)
        )
        return plan_pairs(months, images, self.config.export_dir)

    def run(
        self,
        *,
        plan: Optional[Dict[Path, List[ImagePair]]] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> BatchSummary:
        """Execute the full batch and return every pair outcome.

        *plan* defaults to a fresh :meth:`plan`; *on_result* is called from
        worker threads once per finished pair.
        """

        if plan is None:
            plan = self.plan()
        self._on_result = on_result
        total = sum(len(pairs) for pairs in plan.values())

        if self.config.dry_run:
            results = [
                self._emit(PairResult(pair=pair, status=PairStatus.PLANNED))
                for pairs in plan.values()
                for pair in pairs
            ]
            return self._summarise(results)

        # Loaded before any work so a broken font fails the whole run up front.
        self._font = load_font(self.config.font_size)

        logger.info(
            "Composing %d pairs with %d image workers x %d month workers",
            total,
            self.config.outer_workers,
            self.config.inner_workers,
        )
        with ThreadPoolExecutor(
            max_workers=self.config.outer_workers,
            thread_name_prefix="composer-image",
        ) as executor:
            futures = [
                executor.submit(self._process_image, image, pairs)
                for image, pairs in plan.items()
            ]
            results = [result for future in futures for result in future.result()]

        return self._summarise(results)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _process_image(self, image: Path, pairs: Sequence[ImagePair]) -> List[PairResult]:
        if not pairs:
            return []

        started = time.perf_counter()
        try:
            colors = extract_color_pair(
                image,
                palette_size=self.config.palette_size,
                kmeans_iterations=self.config.kmeans_iterations,
                primary_index=self.config.primary_index,
                secondary_index=self.config.secondary_index,
            )
        except ComposerError as exc:
            logger.error(
                "Palette extraction failed for %s (%s): %s; skipping %d pairs",
                image.name,
                exc.kind,
                exc,
                len(pairs),
            )
            elapsed = time.perf_counter() - started
            return [
                self._emit(self._failed(pair, exc, elapsed)) for pair in pairs
            ]
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Unexpected error extracting palette from %s; skipping %d pairs",
                image.name,
                len(pairs),
            )
            elapsed = time.perf_counter() - started
            return [
                self._emit(self._failed(pair, exc, elapsed)) for pair in pairs
            ]

        with ThreadPoolExecutor(
            max_workers=self.config.inner_workers,
            thread_name_prefix=f"composer-{image.stem}",
        ) as executor:
            futures = [
                executor.submit(self._process_pair, pair, colors) for pair in pairs
            ]
            return [future.result() for future in futures]

    def _process_pair(self, pair: ImagePair, colors: ColorPair) -> PairResult:
        started = time.perf_counter()
        try:
            # The overlay rewrites the file compose_pair just wrote; keep them
            # in this order on this thread.
            compose_pair(pair.month, pair.image, pair.output)
            apply_overlay(
                pair.output,
                colors,
                self.config.primary_label,
                self.config.secondary_label,
                self._font,
            )
        except ComposerError as exc:
            logger.warning("Pair %s failed (%s): %s", pair.label, exc.kind, exc)
            return self._emit(self._failed(pair, exc, time.perf_counter() - started))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error composing %s", pair.label)
            return self._emit(self._failed(pair, exc, time.perf_counter() - started))

        elapsed = time.perf_counter() - started
        logger.info("Wrote %s in %.2fs", pair.output, elapsed)
        return self._emit(
            PairResult(pair=pair, status=PairStatus.OK, elapsed_s=elapsed)
        )

    @staticmethod
    def _failed(pair: ImagePair, exc: Exception, elapsed: float) -> PairResult:
        return PairResult(
            pair=pair,
            status=PairStatus.FAILED,
            error_kind=getattr(exc, "kind", ComposerError.kind),
            message=str(exc),
            elapsed_s=elapsed,
        )

    def _emit(self, result: PairResult) -> PairResult:
        if self._on_result is not None:
            self._on_result(result)
        return result

    @staticmethod
    def _summarise(results: List[PairResult]) -> BatchSummary:
        ordered = sorted(results, key=lambda result: str(result.pair.output))
        summary = BatchSummary(results=ordered)
        logger.info(
            "Batch finished: %d ok, %d failed, %d planned",
            summary.count(PairStatus.OK),
            summary.count(PairStatus.FAILED),
            summary.count(PairStatus.PLANNED),
        )
        return summary
