"""Per-image background-removal pipeline and batch driver.

Each image runs through a small state machine:

    IDLE -> AWAITING_INPUT -> AI_ONLY | COLOR_ONLY | HYBRID -> DONE | FAILED

AI_ONLY hands the whole image to the segmentation model. COLOR_ONLY decodes
the image and runs the colour classifier. HYBRID takes the AI cutout, finds
text regions (OCR or text colours) and pastes them back from the original so
text survives background removal. A failure only fails the image being
processed; batches carry on with the next file.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from tqdm import tqdm

from .classifier import PassResult, classify
from .compositor import composite_mask
from .config import ProcessingOptions
from .errors import ImageIOError, SegmentationError
from .ocr import recognize_words
from .raster import Raster
from .regions import Region, detect_text_regions_by_color
from .segmentation import remove_background
from .utils import ImagePath, get_image_files, is_supported_image, load_image, save_image, setup_logger

logger = setup_logger(__name__)

Segmenter = Callable[[Path, str], Raster]
TextRecognizer = Callable[[Raster, Sequence[str]], List[Region]]


class PipelineState(Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    AI_ONLY = "ai_only"
    COLOR_ONLY = "color_only"
    HYBRID = "hybrid"
    DONE = "done"
    FAILED = "failed"


MODE_STATES = {
    "ai": PipelineState.AI_ONLY,
    "color": PipelineState.COLOR_ONLY,
    "hybrid": PipelineState.HYBRID,
}

_WORKING_STATES = {PipelineState.AI_ONLY, PipelineState.COLOR_ONLY, PipelineState.HYBRID}

TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.AWAITING_INPUT},
    PipelineState.AWAITING_INPUT: _WORKING_STATES | {PipelineState.FAILED},
    PipelineState.AI_ONLY: {PipelineState.DONE, PipelineState.FAILED},
    PipelineState.COLOR_ONLY: {PipelineState.DONE, PipelineState.FAILED},
    PipelineState.HYBRID: {PipelineState.DONE, PipelineState.FAILED},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
}


class PipelineRun:
    """State tracker for one image; rejects transitions the pipeline never makes."""

    def __init__(self, input_path: Path):
        self.input_path = input_path
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    def advance(self, new_state: PipelineState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal pipeline transition {self.state.name} -> {new_state.name}")
        logger.debug(f"{self.input_path.name}: {self.state.name} -> {new_state.name}")
        self.state = new_state
        self.history.append(new_state)


@dataclass
class ImageResult:
    """Outcome of processing one image."""
    input_path: Path
    output_path: Optional[Path]
    state: PipelineState
    history: List[PipelineState] = field(default_factory=list)
    error: Optional[str] = None
    regions: List[Region] = field(default_factory=list)
    pass_results: List[PassResult] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.state is PipelineState.DONE


@dataclass
class BatchStats:
    """Summary of a batch run."""
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    files: List[Dict[str, str]] = field(default_factory=list)
    results: List[ImageResult] = field(default_factory=list)

    def record(self, result: ImageResult) -> None:
        self.results.append(result)
        if result.success:
            self.success += 1
            self.files.append({
                'input': result.input_path.name,
                'output': result.output_path.name,
                'status': 'success',
            })
        else:
            self.failed += 1
            self.files.append({
                'input': result.input_path.name,
                'status': 'failed',
                'error': result.error or '',
            })


class BackgroundRemover:
    """Runs the configured removal mode over single images or directories.

    Args:
        options: Validated processing options
        segmenter: AI collaborator, ``(path, model_name) -> Raster``
        text_recognizer: OCR collaborator, ``(raster, languages) -> [Region]``
    """

    def __init__(
        self,
        options: ProcessingOptions,
        segmenter: Segmenter = remove_background,
        text_recognizer: TextRecognizer = recognize_words,
    ):
        self.options = options.validate()
        self.segmenter = segmenter
        self.text_recognizer = text_recognizer

        if self.options.output_format == "webp":
            logger.warning("WebP output not available. Saving as PNG instead.")

    def process_image(self, input_path: ImagePath, output_path: ImagePath) -> ImageResult:
        """Remove the background of one image and write it as PNG.

        Never raises for per-image problems; they are reported through the
        returned result's FAILED state and error message.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        run = PipelineRun(input_path)
        result = ImageResult(input_path=input_path, output_path=output_path, state=run.state)
        start_time = time.time()

        try:
            run.advance(PipelineState.AWAITING_INPUT)
            if not input_path.is_file():
                raise ImageIOError(f"Input file not found: {input_path}")
            if not is_supported_image(input_path):
                raise ImageIOError(f"Unsupported file format: {input_path.suffix.lower()}")

            run.advance(MODE_STATES[self.options.mode])
            logger.info(f"Processing ({self.options.mode} mode): {input_path.name}")

            if run.state is PipelineState.AI_ONLY:
                output = self._run_ai(input_path)
            elif run.state is PipelineState.COLOR_ONLY:
                output = self._run_color(input_path, result)
            else:
                output = self._run_hybrid(input_path, result)

            save_image(output, output_path)
            run.advance(PipelineState.DONE)
            logger.info(f"Saved: {output_path.name}")

        except Exception as e:
            logger.error(f"Error processing {input_path.name}: {e}")
            run.advance(PipelineState.FAILED)
            result.error = str(e)
            result.output_path = None

        result.state = run.state
        result.history = list(run.history)
        result.elapsed = time.time() - start_time
        return result

    def _run_ai(self, input_path: Path) -> Raster:
        return self.segmenter(input_path, self.options.ai_model)

    def _run_color(self, input_path: Path, result: ImageResult) -> Raster:
        raster = load_image(input_path)
        passes = self.options.color_passes()
        logger.debug(f"Running {len(passes)} color pass(es) on {raster!r}")
        classification = classify(raster, passes, feather=self.options.feather)
        result.pass_results = classification.passes
        return classification.raster

    def _run_hybrid(self, input_path: Path, result: ImageResult) -> Raster:
        source = load_image(input_path)

        logger.info("Step 1/3: AI-based person detection...")
        cutout = self.segmenter(input_path, self.options.ai_model)
        if not cutout.same_size(source):
            raise SegmentationError(
                f"Segmentation returned {cutout!r} for a {source!r} input")

        logger.info("Step 2/3: Text detection...")
        regions = self.detect_text_regions(source)

        logger.info("Step 3/3: Combining masks...")
        result.regions = regions
        return composite_mask(cutout, source, regions, self.options.text_padding)

    def detect_text_regions(self, source: Raster) -> List[Region]:
        """Find regions to preserve using the configured text detection mode.

        OCR failures degrade to an empty list instead of failing the image.
        """
        if self.options.text_detection == "ocr":
            try:
                return self.text_recognizer(source, self.options.ocr_languages)
            except Exception as e:
                logger.error(f"Text detection error: {e}")
                return []
        return detect_text_regions_by_color(
            source, self.options.text_colors, self.options.text_threshold)

    def process_batch(
        self,
        input_dir: ImagePath,
        output_dir: ImagePath,
        workers: int = 1,
        show_progress: bool = True,
    ) -> BatchStats:
        """Process every supported image in a directory.

        Outputs are written as ``<output_dir>/<stem>.png``. With workers > 1
        images are processed by a bounded thread pool; results keep the
        directory order either way.

        Raises:
            ImageIOError: If input_dir does not exist
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        stats = BatchStats()

        if not input_dir.is_dir():
            raise ImageIOError(f"Input directory not found: {input_dir}")

        entries = [p for p in sorted(input_dir.iterdir()) if p.is_file()]
        image_files = get_image_files(input_dir)
        stats.skipped = len(entries) - len(image_files)

        if not image_files:
            logger.warning("No supported image files found in input directory")
            return stats

        stats.total = len(image_files)
        logger.info(f"Found {len(image_files)} image(s) to process")
        output_dir.mkdir(parents=True, exist_ok=True)

        jobs = [(path, output_path_for(path, output_dir)) for path in image_files]
        progress = tqdm(total=len(jobs), desc="Removing backgrounds", disable=not show_progress)

        def run(job):
            result = self.process_image(*job)
            progress.update(1)
            return result

        try:
            if workers > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    results = list(executor.map(run, jobs))
            else:
                results = [run(job) for job in jobs]
        finally:
            progress.close()

        for result in results:
            stats.record(result)

        return stats


def output_path_for(input_path: Path, output_dir: Path, suffix: str = "") -> Path:
    """Output location for an input image; always PNG."""
    return output_dir / f"{input_path.stem}{suffix}.png"
