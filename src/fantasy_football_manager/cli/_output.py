from rich.console import Console
from rich.table import Table

from fantasy_football_manager.domain.board_drift import BoardDriftReport, DriftPlayer
from fantasy_football_manager.domain.calibration import COMPONENTS, RetrospectiveReport
from fantasy_football_manager.domain.manager_dna import ManagerDna
from fantasy_football_manager.domain.prediction import PredictedTarget, PredictionReport
from fantasy_football_manager.domain.snipe import SnipeRadarReport, Urgency

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

_URGENCY_STYLE = {
    Urgency.CRITICAL: "red bold",
    Urgency.WARNING: "yellow",
    Urgency.WATCH: "dim",
}


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def _targets_cell(targets: tuple[PredictedTarget, ...]) -> str:
    if not targets:
        return "-"
    return "\n".join(f"{t.player} ({t.position}) {t.probability}%" for t in targets)


def print_prediction_report(report: PredictionReport) -> None:
    console.print(
        f"[bold]Draft forecast[/bold] for league {report.league_id} ({report.season}), "
        f"slot {report.user_slot} [bold]{report.user_manager}[/bold], {report.trials} trials"
    )
    for forecast in report.picks:
        console.print()
        console.print(f"[bold green]Pick {forecast.overall}[/bold green] (round {forecast.round}.{forecast.pick})")
        table = Table(show_edge=False, pad_edge=False)
        table.add_column("Player")
        table.add_column("Pos")
        table.add_column("Prob", justify="right")
        table.add_column("Why")
        for target in forecast.top_targets:
            table.add_row(target.player, target.position, f"{target.probability}%", target.why)
        console.print(table)
        if forecast.scenario_variants:
            variants = Table(show_edge=False, pad_edge=False)
            variants.add_column("Scenario")
            variants.add_column("Top targets")
            for variant in forecast.scenario_variants:
                variants.add_row(variant.description or variant.name, _targets_cell(variant.top_targets))
            console.print(variants)
    if report.snapshot_id is not None:
        console.print()
        console.print(f"Saved prediction snapshot #{report.snapshot_id}")


def print_snipe_report(report: SnipeRadarReport) -> None:
    console.print(
        f"[bold]Snipe radar[/bold] for league {report.league_id}, "
        f"slot {report.user_slot} [bold]{report.user_manager}[/bold], {report.trials} trials"
    )
    for entry in report.entries:
        console.print()
        console.print(
            f"[bold green]Pick {entry.overall}[/bold green] (round {entry.round}.{entry.pick}), "
            f"{entry.picks_before} picks before you"
        )
        if not entry.alerts:
            console.print("  No snipe threats above the alert floor.")
        else:
            table = Table(show_edge=False, pad_edge=False)
            table.add_column("Player")
            table.add_column("Pos")
            table.add_column("Rank", justify="right")
            table.add_column("Snipe", justify="right")
            table.add_column("Value lost", justify="right")
            table.add_column("Likely takers")
            for alert in entry.alerts:
                style = _URGENCY_STYLE[alert.urgency]
                table.add_row(
                    alert.player,
                    alert.position,
                    f"{alert.rank:g}",
                    f"[{style}]{alert.snipe_probability}%[/{style}]",
                    str(alert.expected_value_lost),
                    ", ".join(f"{s.manager} {s.probability}%" for s in alert.sniped_by),
                )
            console.print(table)
        if entry.top_available:
            available = ", ".join(f"{p.player} ({p.position}) {p.probability}%" for p in entry.top_available)
            console.print(f"  Likely available: {available}")


def _drift_table(title: str, players: list[DriftPlayer]) -> Table:
    table = Table(title=title, show_edge=False, pad_edge=False)
    table.add_column("Player")
    table.add_column("Pos")
    table.add_column("Now", justify="right")
    table.add_column("Was", justify="right")
    table.add_column("Drift", justify="right")
    table.add_column("Why")
    for p in players:
        color = "green" if p.direction == "rising" else "red"
        table.add_row(
            p.name,
            p.position,
            f"{p.current_rank:g}",
            f"{p.previous_rank:g}",
            f"[{color}]{p.drift:+g}[/{color}]",
            "; ".join(p.reasons),
        )
    return table


def print_drift_report(report: BoardDriftReport) -> None:
    console.print(f"[bold]Board drift[/bold] for league {report.league_id}, week {report.week_key}")
    console.print(report.headline)
    if report.is_baseline:
        return
    console.print(
        f"  {report.total_players_tracked} players tracked against {report.previous_week_key}, "
        f"average drift {report.average_drift:g}"
    )
    if report.top_risers:
        console.print(_drift_table("Risers", report.top_risers))
    if report.top_fallers:
        console.print(_drift_table("Fallers", report.top_fallers))
    for change in report.manager_changes:
        signals = ", ".join(f"{s.signal} {s.previous:g}→{s.current:g}" for s in change.changed_signals)
        archetype = change.archetype
        if change.previous_archetype and change.previous_archetype != change.archetype:
            archetype = f"{change.previous_archetype} → {change.archetype}"
        console.print(f"  [bold]{change.manager}[/bold]: {archetype}" + (f" ({signals})" if signals else ""))
    for window in report.pick_windows:
        console.print(
            f"  Round {window.round} (pick {window.overall}, ranks {window.window_start}-{window.window_end}): "
            f"{window.summary}"
        )


def print_retrospective_report(report: RetrospectiveReport) -> None:
    console.print(
        f"[bold]Draft retrospective[/bold] for league {report.league_id} ({report.season}), "
        f"{report.total_picks} picks evaluated"
    )
    console.print(f"  Exact hits: {report.overall_accuracy:.0%}")
    console.print(f"  Top-3 hits: {report.top3_hit_rate:.0%}")

    table = Table(title="Managers", show_edge=False, pad_edge=False)
    table.add_column("Manager")
    table.add_column("Picks", justify="right")
    table.add_column("Exact", justify="right")
    table.add_column("Top 3", justify="right")
    table.add_column("Avg prob", justify="right")
    for m in report.manager_accuracy:
        table.add_row(
            m.manager,
            str(m.total_picks),
            str(m.exact_hits),
            str(m.top3_hits),
            f"{m.avg_probability_of_actual:g}%",
        )
    console.print(table)

    if report.biggest_misses:
        misses = Table(title="Biggest misses", show_edge=False, pad_edge=False)
        misses.add_column("Pick", justify="right")
        misses.add_column("Manager")
        misses.add_column("Predicted")
        misses.add_column("Actual")
        misses.add_column("Reason")
        for miss in report.biggest_misses:
            misses.add_row(
                str(miss.overall),
                miss.manager,
                f"{miss.predicted} ({miss.predicted_probability}%)",
                f"{miss.actual} ({miss.actual_position})",
                miss.reason,
            )
        console.print(misses)

    weights = Table(title="Calibration", show_edge=False, pad_edge=False)
    weights.add_column("Component")
    weights.add_column("Delta", justify="right")
    weights.add_column("Weight", justify="right")
    for component in COMPONENTS:
        weights.add_row(component, f"{report.deltas.delta(component):+.4f}", f"{report.weights.weight(component):.3f}")
    console.print(weights)


def print_manager_dna(dna: list[ManagerDna]) -> None:
    if not dna:
        console.print("No manager history found.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Manager")
    table.add_column("Archetype")
    table.add_column("Reach", justify="right")
    table.add_column("Rookies", justify="right")
    table.add_column("Stacks", justify="right")
    table.add_column("Panic", justify="right")
    for d in dna:
        table.add_row(
            d.manager,
            d.archetype.value,
            f"{d.reach_frequency:.2f} {d.reach_label.value}",
            f"{d.rookie_appetite:.2f} {d.rookie_label.value}",
            f"{d.stack_tendency:.2f} {d.stack_label.value}",
            f"{d.panic_score:.2f} {d.panic_response.value}",
        )
    console.print(table)
