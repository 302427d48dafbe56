"""Command-line interface for Metre Inference.

Provides commands for:
- infer: Infer the metre of a test sequence from a training corpus
- prior: Show the prior over metres built from a corpus
- evaluate: k-fold cross-validation over a corpus
- info: Show corpus statistics
"""

import json
import time
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .core import Distribution, InferenceError, MetreCategory
from .corpus import JSONCorpusLoader

app = typer.Typer(
    name="metre-inference",
    help="Corpus-based probabilistic metre inference",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage."""
        self._current_stage = stage
        self._start_time = time.time()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.time() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        return sum(self.stages.values())

    def print_summary(self) -> None:
        """Print timing summary to console."""
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")


def _split(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _build_config(config_file: Optional[Path], **overrides: Any):
    """Load a config file (if any) and apply the options that were given."""
    from .inference import InferenceConfig

    data: Dict[str, Any] = {}
    if config_file is not None:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        with open(config_file, "r") as f:
            data = json.load(f)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return InferenceConfig.from_dict(data)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def _label(category_key: str, timebase: int) -> str:
    """Category key with its time signature, e.g. '72/3 (3/4)'."""
    try:
        signature = MetreCategory.from_key(category_key).time_signature(timebase)
    except ValueError:
        return category_key
    return f"{category_key} ({signature})"


def _show_distribution_table(title: str, distribution: Distribution, timebase: int) -> None:
    """Display a static distribution, most probable first."""
    table = Table(title=title)
    table.add_column("Metre", style="cyan")
    table.add_column("Probability", style="green")

    for key, value in sorted(distribution.items(), key=lambda kv: kv[1], reverse=True):
        table.add_row(_label(key, timebase), f"{value:.4f}")

    console.print(table)


# Shared options
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="JSON file with InferenceConfig fields")
RESOLUTION_OPTION = typer.Option(None, "--resolution", "-r", help="Phase steps per semibreve")
TEXTURE_OPTION = typer.Option(None, "--texture", help="Corpus texture: melody, harmony or grid")
PRIOR_OPTION = typer.Option(
    None, "--prior", help="Prior mode: empirical, flat or custom (counts from --config)"
)
TARGET_OPTION = typer.Option(None, "--target", help="Comma-separated target viewpoints")
SOURCE_OPTION = typer.Option(None, "--source", help="Comma-separated source viewpoints")
ORDER_OPTION = typer.Option(None, "--order", help="Longest n-gram context")
CACHE_OPTION = typer.Option(None, "--cache-dir", help="Directory for count and model caches")
DATASETS_OPTION = typer.Option(None, "--datasets", help="Comma-separated dataset ids to train on")


@app.command()
def infer(
    corpus_file: Path = typer.Argument(..., help="Training corpus (JSON)"),
    test_file: Path = typer.Argument(..., help="File holding the test sequence (JSON)"),
    index: int = typer.Option(0, "--index", "-i", help="Index of the test sequence in TEST_FILE"),
    config_file: Optional[Path] = CONFIG_OPTION,
    resolution: Optional[int] = RESOLUTION_OPTION,
    texture: Optional[str] = TEXTURE_OPTION,
    prior: Optional[str] = PRIOR_OPTION,
    target: Optional[str] = TARGET_OPTION,
    source: Optional[str] = SOURCE_OPTION,
    order: Optional[int] = ORDER_OPTION,
    cache_dir: Optional[Path] = CACHE_OPTION,
    datasets: Optional[str] = DATASETS_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-event detail and timings"),
):
    """Infer the metre of a test sequence."""
    from .inference import MetreInference

    timings = StageTimings()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            config = _build_config(
                config_file,
                resolution=resolution,
                texture=texture,
                prior_mode=prior,
                target_attrs=_split(target),
                source_attrs=_split(source),
                order=order,
                cache_dir=str(cache_dir) if cache_dir else None,
            )
            corpus = JSONCorpusLoader(corpus_file, _split(datasets))
            tests = JSONCorpusLoader(test_file).sequences()
            if not -len(tests) <= index < len(tests):
                _fail(f"Test index {index} out of range ({len(tests)} sequences)")

            timings.start("Training")
            engine = MetreInference(config).setup(corpus)
            timings.stop()

            timings.start("Inference")
            result = engine.infer(tests[index])
            timings.stop()
        except (InferenceError, ValueError, FileNotFoundError) as e:
            _fail(str(e))

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    console.print(
        f"\n[bold]Best metre:[/bold] {_label(result.best_category, config.timebase)}"
        f"  [dim](interpretation {result.best_interpretation})[/dim]"
    )
    if result.mean_information_content is not None:
        console.print(f"[bold]Mean information content:[/bold] {result.mean_information_content:.3f} bits")

    _show_distribution_table("Posterior after last event", result.category_final, config.timebase)
    _show_distribution_table("Time-averaged posterior", result.category_average, config.timebase)

    if verbose:
        table = Table(title="Per-event information content")
        table.add_column("Event", style="cyan")
        table.add_column("IC (bits)", style="yellow")
        table.add_column("Best metre", style="green")
        for t, ic in enumerate(result.information_content):
            best, probability = result.category_at(t).argmax()
            table.add_row(str(t), f"{ic:.3f}", f"{_label(best, config.timebase)} {probability:.3f}")
        console.print(table)
        if caught:
            console.print(f"[yellow]{len(caught)} warning(s) while processing[/yellow]")
        timings.print_summary()


@app.command()
def prior(
    corpus_file: Path = typer.Argument(..., help="Training corpus (JSON)"),
    config_file: Optional[Path] = CONFIG_OPTION,
    resolution: Optional[int] = RESOLUTION_OPTION,
    texture: Optional[str] = TEXTURE_OPTION,
    prior_mode: Optional[str] = PRIOR_OPTION,
    datasets: Optional[str] = DATASETS_OPTION,
    by_phase: bool = typer.Option(False, "--by-phase", help="Show every interpretation"),
):
    """Show the prior over metres built from a corpus."""
    from .inference import CategorySegmenter, PriorBuilder, marginalize_phase, resolve_categories

    try:
        config = _build_config(config_file, resolution=resolution, texture=texture, prior_mode=prior_mode)
        corpus = JSONCorpusLoader(corpus_file, _split(datasets))
        segmenter = CategorySegmenter(timebase=config.timebase)
        categories = resolve_categories(config, segmenter, corpus)
        counts = config.custom_counts
        if config.prior_mode == "empirical":
            counts = segmenter.count(corpus, config.texture, config.resolution, config.per_composition)
        distribution = PriorBuilder(config.resolution, config.timebase).build(
            config.prior_mode, categories, counts
        )
    except (InferenceError, ValueError, FileNotFoundError) as e:
        _fail(str(e))

    if by_phase:
        table = Table(title="Prior by interpretation")
        table.add_column("Interpretation", style="cyan")
        table.add_column("Probability", style="green")
        for key, value in distribution.items():
            table.add_row(key, f"{value:.4f}")
        console.print(table)
    else:
        _show_distribution_table("Prior", marginalize_phase(distribution), config.timebase)


@app.command()
def evaluate(
    corpus_file: Path = typer.Argument(..., help="Corpus with known metres (JSON)"),
    folds: int = typer.Option(10, "--folds", "-k", help="Number of cross-validation folds"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the fold partition"),
    config_file: Optional[Path] = CONFIG_OPTION,
    resolution: Optional[int] = RESOLUTION_OPTION,
    texture: Optional[str] = TEXTURE_OPTION,
    prior_mode: Optional[str] = PRIOR_OPTION,
    order: Optional[int] = ORDER_OPTION,
    datasets: Optional[str] = DATASETS_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """Cross-validate metre inference over a corpus."""
    from .inference import evaluate as run_evaluation

    timings = StageTimings()
    try:
        config = _build_config(
            config_file, resolution=resolution, texture=texture, prior_mode=prior_mode, order=order
        )
        corpus = JSONCorpusLoader(corpus_file, _split(datasets))
        timings.start("Evaluation")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            report = run_evaluation(corpus, config, k=folds, seed=seed)
        timings.stop()
    except (InferenceError, ValueError, FileNotFoundError) as e:
        _fail(str(e))

    if json_output:
        console.print_json(json.dumps(report.to_dict()))
        return

    table = Table(title=f"{folds}-fold evaluation")
    table.add_column("Sequence", style="cyan")
    table.add_column("Events", style="white")
    table.add_column("True", style="green")
    table.add_column("Predicted", style="yellow")
    table.add_column("Mean IC", style="magenta")
    for item in report.items:
        table.add_row(
            str(item.index),
            str(item.n_events),
            item.true_category or "-",
            item.predicted_category,
            f"{item.mean_information_content:.3f}" if item.mean_information_content is not None else "-",
        )
    console.print(table)

    if report.accuracy is not None:
        console.print(f"[bold]Accuracy:[/bold] {report.accuracy:.1%}")
    if report.mean_information_content is not None:
        console.print(f"[bold]Mean information content:[/bold] {report.mean_information_content:.3f} bits")
    timings.print_summary()


@app.command()
def info(
    corpus_file: Path = typer.Argument(..., help="Corpus (JSON)"),
    resolution: int = typer.Option(16, "--resolution", "-r", help="Grid steps per semibreve"),
    texture: str = typer.Option("melody", "--texture", help="Corpus texture: melody, harmony or grid"),
    timebase: int = typer.Option(96, "--timebase", help="Ticks per semibreve"),
):
    """Show information about a corpus."""
    from .inference import CategorySegmenter

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            corpus = JSONCorpusLoader(corpus_file)
            sequences = corpus.sequences()
            segmenter = CategorySegmenter(timebase=timebase)
            counts = segmenter.count(corpus, texture, resolution)
        except (ValueError, FileNotFoundError) as e:
            _fail(str(e))

    console.print(f"\n[bold]Corpus Info:[/bold] {corpus_file.name}")
    console.print(f"  Sequences: {len(sequences)}")
    console.print(f"  Events: {sum(len(s) for s in sequences):,}")
    console.print(f"  Signature: {corpus.signature}")
    if caught:
        console.print(f"  [yellow]Events skipped: {len(caught)}[/yellow]")

    table = Table(title=f"Category mass ({texture})")
    table.add_column("Metre", style="cyan")
    table.add_column("Mass", style="green")
    table.add_column("Phases", style="yellow")
    for key, mass in sorted(counts.items(), key=lambda kv: kv[1], reverse=True):
        phases = MetreCategory.from_key(key).phase_count(resolution, timebase)
        table.add_row(_label(key, timebase), f"{mass:.2f}", str(phases))
    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
