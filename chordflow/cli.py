"""ChordFlow CLI entry point."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from chordflow import __version__
from chordflow.chart_compiler import ChartInputError
from chordflow.chart_models import BeatSnapshot
from chordflow.chart_renderers import get_renderer
from chordflow.metronome import Metronome
from chordflow.midi_exporter import MidiExporter
from chordflow.session import ChordFlowSession
from chordflow.timers import AsyncioTimerHost, ManualTimerHost
from chordflow.voicing_strategy import TriadVoicer, TriadWithBassVoicer

logger = logging.getLogger(__name__)


def _load_session(chart_file: str, session: ChordFlowSession, tempo: int | None) -> None:
    """Read and compile a chart file, exiting with status 1 on bad input."""
    logger.debug("Reading chart from %s", chart_file)
    text = Path(chart_file).read_text(encoding="utf-8")
    try:
        session.load(text)
    except ChartInputError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)
    if tempo is not None:
        session.tempo_setting = tempo


def _terminal_bell() -> None:
    click.echo("\a", nl=False)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chordflow")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """ChordFlow — chord chart viewer and play-along clock."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ── show subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("chart_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "html"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Plain text on stdout, or a self-contained HTML page.",
)
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Write to this file instead of stdout.",
)
def show(chart_file: str, output_format: str, output: str | None) -> None:
    """
    Compile a chart and print its sections, bars and segments.

    CHART_FILE is a comma or semicolon separated chart, one row per section.

    \b
    Examples:
      chordflow show song.csv
      chordflow show song.csv --format html -o song.html
    """
    session = ChordFlowSession(ManualTimerHost())
    _load_session(chart_file, session, tempo=None)
    chart = session.chart
    assert chart is not None

    renderer = get_renderer(output_format)
    content = renderer.render(
        chart=chart,
        timeline=session.timeline,
        tempo=session.clock.resolve_bpm(session.tempo_setting),
    )

    if output is None:
        click.echo(content, nl=False)
        return
    try:
        Path(output).write_text(content, encoding="utf-8")
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)
    click.echo(f"Wrote '{output}'.")


# ── play subcommand ────────────────────────────────────────────────────────────

async def _run_playback(session: ChordFlowSession, section: int | None, bar: int) -> bool:
    """Play until the chart ends. Returns False when playback could not start."""
    finished: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    def _on_stop(clear_display: bool) -> None:
        if not finished.done():
            finished.set_result(None)

    session.on_event("stop", _on_stop)
    started = session.start() if section is None else session.seek_bar(section, bar)
    if not started:
        return False
    await finished
    return True


@main.command()
@click.argument("chart_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--tempo",
    type=click.IntRange(20, 400),
    default=None,
    help="Tempo in BPM. Defaults to the chart's tempo, else 120.",
)
@click.option(
    "--section",
    type=click.IntRange(min=0),
    default=None,
    help="Start at this section (0-based) without a count-in.",
)
@click.option(
    "--bar",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Bar within --section to start from.",
)
@click.option("--no-metronome", is_flag=True, help="Do not ring the terminal bell on each beat.")
def play(
    chart_file: str,
    tempo: int | None,
    section: int | None,
    bar: int,
    no_metronome: bool,
) -> None:
    """
    Play a chart in real time, printing the current chord on every beat.

    Without --section, playback starts from the top after a four-beat count-in.
    Press Ctrl+C to stop.

    \b
    Examples:
      chordflow play song.csv
      chordflow play song.csv --tempo 90 --section 2
    """
    session = ChordFlowSession(AsyncioTimerHost())
    _load_session(chart_file, session, tempo)
    chart = session.chart
    assert chart is not None
    if section is not None and section >= len(chart.sections):
        click.echo(f"  ERROR: Chart has {len(chart.sections)} section(s); no section {section}.", err=True)
        sys.exit(1)

    metronome = Metronome(sink=_terminal_bell, enabled=not no_metronome)
    session.on_event("tick", metronome.tick)

    def _on_count_in(remaining: int) -> None:
        click.echo(f"  {remaining}...")

    def _on_section_change(section_index: int, snapshot: BeatSnapshot) -> None:
        click.echo(f"== {chart.sections[section_index].name} ==")

    def _on_beat(snapshot: BeatSnapshot) -> None:
        cue = f"  [{snapshot.cue}]" if snapshot.cue and snapshot.beat_index == 0 else ""
        chord = snapshot.display_chord or "—"
        click.echo(f"  bar {snapshot.bar_index + 1:>3} beat {snapshot.beat_index + 1}  {chord}{cue}")

    session.on_event("count_in", _on_count_in)
    session.on_event("section_change", _on_section_change)
    session.on_event("beat", _on_beat)

    bpm = session.clock.resolve_bpm(session.tempo_setting)
    click.echo(f"chordflow v{__version__}")
    click.echo(f"  Chart  : {chart.title}")
    click.echo(f"  Tempo  : {bpm} BPM  |  Beats: {len(session.timeline)}")
    if not section:
        # Seeking into a later section announces it through section_change.
        click.echo(f"== {chart.sections[0].name} ==")

    try:
        started = asyncio.run(_run_playback(session, section, bar))
    except KeyboardInterrupt:
        session.stop()
        click.echo()
        click.echo("Stopped.")
        return

    if not started:
        click.echo(f"  ERROR: No bar {bar} in section {section}.", err=True)
        sys.exit(1)
    click.echo("Done!")


# ── export-midi subcommand ─────────────────────────────────────────────────────

@main.command("export-midi")
@click.argument("chart_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination MIDI file path. Defaults to the chart path with .mid.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 400),
    default=None,
    help="Tempo in BPM. Defaults to the chart's tempo, else 120.",
)
@click.option("--bass", is_flag=True, help="Add a bass note under every chord.")
def export_midi(chart_file: str, output: str | None, tempo: int | None, bass: bool) -> None:
    """
    Write a play-along MIDI file: count-in, click track and chord triads.

    \b
    Examples:
      chordflow export-midi song.csv
      chordflow export-midi song.csv -o song.mid --tempo 96 --bass
    """
    session = ChordFlowSession(ManualTimerHost())
    _load_session(chart_file, session, tempo)
    chart = session.chart
    assert chart is not None

    resolved_output = output if output is not None else str(Path(chart_file).with_suffix(".mid"))
    bpm = session.clock.resolve_bpm(session.tempo_setting)
    exporter = MidiExporter(
        tempo=bpm,
        voicer=TriadWithBassVoicer() if bass else TriadVoicer(),
        count_in_beats=session.settings.count_in_beats,
    )

    click.echo(f"[1/2] Compiled '{chart.title}': {len(session.timeline)} beats at {bpm} BPM")
    click.echo(f"[2/2] Writing MIDI file → '{resolved_output}'...")
    try:
        exporter.export(chart, session.timeline, resolved_output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
        sys.exit(1)
    click.echo("Done!")
