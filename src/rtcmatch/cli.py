"""Command-line interface for rtcmatch."""

import logging
import sys

import click


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """R&TC Tournament Matcher - draw placement and doubles handicaps for club events."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_settings(config: str) -> dict:
    from rtcmatch.config_loader import load_and_validate_config, validate_config

    if config:
        click.echo(f"[INFO] Loading config from: {config}")
        return load_and_validate_config(config)
    return validate_config({})


@cli.command()
@click.option("--csv", required=True, help="Path to entries CSV file")
@click.option("--event", required=False, help="Event name (filters CSV rows and sets class rounding)")
@click.option("--config", required=False, help="Path to config YAML file")
@click.option("--size", type=int, required=False, help="Bracket size (8, 16, 32, 64 or 128). Default: smallest that fits")
@click.option("--seed", type=int, required=False, help="Random seed for a reproducible draw")
@click.option("--out", required=False, help="Output directory for CSV exports")
@click.option("--xlsx", required=False, help="Write the draw sheet workbook to this path")
@click.option("--strict/--no-strict", default=False, help="Abort when entries fail validation")
def draw(csv: str, event: str, config: str, size: int, seed: int, out: str, xlsx: str, strict: bool):
    """Place entrants into a Round 1 draw.

    Example:
        rtcmatch draw --csv entries.csv --event "3rd Class Singles" --seed 7
    """
    from pathlib import Path

    from rtcmatch.bracket import bracket_size_for, generate_bracket, validate_bracket
    from rtcmatch.config_loader import ConfigError
    from rtcmatch.exports import generate_draw_excel, player_frame_text
    from rtcmatch.io_csv import CSVImportError, export_round1_csv, export_slots_csv, import_entries_csv
    from rtcmatch.models import Event
    from rtcmatch.placement import PlacementError, seed_participants
    from rtcmatch.validation import (
        ValidationError,
        ensure_valid,
        generate_validation_report,
        validate_entries,
    )

    try:
        cfg = _load_settings(config)
        event_name = event or cfg["event_name"]

        click.echo(f"[INFO] Reading CSV file: {csv}")
        entries = import_entries_csv(csv, event_filter=event_name or None)
        if not entries:
            click.echo("[ERROR] No entries to draw (check event filter)", err=True)
            raise click.Abort()
        for entry in entries:
            entry.event_name = entry.event_name or event_name

        report = validate_entries(
            entries,
            Event(name=event_name, sport=cfg["sport"]),
            previous_winners=cfg["previous_winners"],
            max_entries=cfg["max_entries_per_player"],
            team_handicap_limit=cfg["team_handicap_limit"],
        )
        if not report.valid:
            click.echo(f"[WARNING] {len(report.errors)} validation problem(s) found")
            if strict:
                click.echo(generate_validation_report(report), err=True)
                ensure_valid(report)

        participants = [entry.to_participant() for entry in entries]
        if size is None and cfg["bracket_size"] != "auto":
            size = cfg["bracket_size"]
        bracket_size = size or bracket_size_for(len(participants))

        random_seed = seed if seed is not None else cfg["random_seed"]
        click.echo(f"[BUILD] Placing {len(participants)} entrants in a bracket of {bracket_size}...")
        placement = seed_participants(participants, bracket_size, random_seed=random_seed)
        if not placement.success:
            click.echo(f"[ERROR] Placement failed: {placement.error}", err=True)
            raise click.Abort()

        result = generate_bracket(placement.slots, bracket_size)
        if not result.success:
            click.echo(f"[ERROR] Bracket generation failed: {result.error}", err=True)
            raise click.Abort()
        bracket = result.bracket

        _, errors = validate_bracket(bracket)
        for error in errors:
            click.echo(f"[WARNING] {error}")

        click.echo(f"\n[STATS] Round 1 ({len(bracket.round1.matches)} matches):")
        for match in bracket.round1.matches:
            left = player_frame_text(match.player1, event_name) or "BYE"
            right = player_frame_text(match.player2, event_name) or "BYE"
            line = f"  M{match.match_number:<3} {left} vs {right}"
            if match.winner is not None:
                line += f"  -> {match.winner.name}"
            click.echo(line)

        stats = placement.stats
        click.echo(
            f"\n  Play-in matches: {stats.play_in_match_count}, "
            f"byes to round 2: {stats.bye_to_round2_count}"
        )
        if not stats.random_placement:
            click.echo(f"  Day: {stats.day_players}, Night: {stats.night_players}")

        if out:
            out_dir = Path(out)
            out_dir.mkdir(parents=True, exist_ok=True)
            export_slots_csv(placement.slots, out_dir / "slots.csv", event_name)
            export_round1_csv(bracket, out_dir / "round1.csv", event_name)
            click.echo(f"[SAVE] CSV exports written to {out_dir}")

        if xlsx:
            Path(xlsx).write_bytes(generate_draw_excel(bracket, event_name, stats))
            click.echo(f"[SAVE] Draw sheet written to {xlsx}")

        click.echo("\n[DONE] Draw complete!")

    except (ConfigError, CSVImportError, PlacementError, ValidationError) as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()


@cli.command()
@click.option("--csv", required=True, help="Path to entries CSV file")
@click.option("--event", required=True, help="Event name to validate against")
@click.option("--config", required=False, help="Path to config YAML file")
def validate(csv: str, event: str, config: str):
    """Validate entries against the club's entry rules.

    Exits with status 1 when any entry is invalid.

    Example:
        rtcmatch validate --csv entries.csv --event "Court Tennis Class 3 Singles"
    """
    from rtcmatch.config_loader import ConfigError
    from rtcmatch.io_csv import CSVImportError, import_entries_csv
    from rtcmatch.models import Event
    from rtcmatch.validation import generate_validation_report, validate_entries

    try:
        cfg = _load_settings(config)
        entries = import_entries_csv(csv, event_filter=event)
    except (ConfigError, CSVImportError) as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()

    for entry in entries:
        entry.event_name = entry.event_name or event

    report = validate_entries(
        entries,
        Event(name=event, sport=cfg["sport"]),
        previous_winners=cfg["previous_winners"],
        max_entries=cfg["max_entries_per_player"],
        team_handicap_limit=cfg["team_handicap_limit"],
    )
    click.echo(generate_validation_report(report))
    if not report.valid:
        sys.exit(1)


@cli.command()
@click.argument("handicap_a")
@click.argument("handicap_b")
def team_handicap(handicap_a: str, handicap_b: str):
    """Compute the IRTPA team handicap for two partners.

    Plus players are written with a leading "+".

    Example:
        rtcmatch team-handicap 32 45
    """
    from rtcmatch.handicap_rounding import format_handicap_for_display
    from rtcmatch.io_csv import parse_handicap
    from rtcmatch.team_handicap import calculate_team_handicap

    a = parse_handicap(handicap_a)
    b = parse_handicap(handicap_b)
    if a is None or b is None:
        click.echo("[ERROR] Handicaps must be numbers (use +N for plus players)", err=True)
        raise click.Abort()

    result = calculate_team_handicap(a, b)
    click.echo(f"Difference:     {result.difference:g}")
    click.echo(f"Adjustment:     {result.adjustment:g}")
    click.echo(f"Better player:  {format_handicap_for_display(result.better_handicap)}")
    click.echo(f"Team handicap:  {format_handicap_for_display(round(result.team_handicap, 1))}")


@cli.command()
@click.argument("handicap")
@click.option("--event", required=True, help="Event name, e.g. \"3rd Class Singles\"")
def round_handicap(handicap: str, event: str):
    """Show a handicap as printed for an event class.

    Example:
        rtcmatch round-handicap 45 --event "3rd Class Singles"
    """
    from rtcmatch.handicap_rounding import process_handicap_for_display
    from rtcmatch.io_csv import parse_handicap

    value = parse_handicap(handicap)
    if value is None:
        click.echo("[ERROR] Handicap must be a number (use +N for plus players)", err=True)
        raise click.Abort()
    click.echo(process_handicap_for_display(value, event))


@cli.command()
@click.option("--size", type=click.Choice(["8", "16", "32", "64", "128"]), required=True, help="Bracket size")
def frames(size: str):
    """List the Round 1 template frames a draw template must contain."""
    from rtcmatch.exports import template_frames

    for name in template_frames(int(size)):
        click.echo(name)


if __name__ == "__main__":
    cli()
