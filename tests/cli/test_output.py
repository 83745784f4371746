import pytest

from fantasy_football_manager.cli._output import (
    print_drift_report,
    print_error,
    print_manager_dna,
    print_prediction_report,
    print_snipe_report,
)
from fantasy_football_manager.domain.board_drift import BoardDriftReport
from fantasy_football_manager.domain.prediction import PickForecast, PredictedTarget, PredictionReport, ScenarioVariant
from fantasy_football_manager.domain.snipe import SnipeRadarEntry, SnipeRadarReport


def _drift_report(previous_week_key: str | None, headline: str) -> BoardDriftReport:
    return BoardDriftReport(
        league_id="L1",
        week_key="2025-W33",
        previous_week_key=previous_week_key,
        generated_at="2025-08-11T09:00:00+00:00",
        headline=headline,
        total_players_tracked=60,
        average_drift=0.0,
    )


class TestPrintError:
    def test_print_error_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_error("something went wrong")
        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "something went wrong" in captured.err
        assert captured.out == ""


class TestPrintPredictionReport:
    def test_prints_picks_variants_and_snapshot(self, capsys: pytest.CaptureFixture[str]) -> None:
        target = PredictedTarget(player="Bijan", position="RB", probability=41, why="Scarcity")
        report = PredictionReport(
            league_id="L1",
            season=2025,
            user_slot=6,
            user_manager="Team 6",
            trials=200,
            picks=(
                PickForecast(
                    overall=6,
                    round=1,
                    pick=6,
                    top_targets=(target,),
                    scenario_variants=(ScenarioVariant(name="rb-run", description="", top_targets=()),),
                ),
            ),
            snapshot_id=3,
        )
        print_prediction_report(report)
        out = capsys.readouterr().out
        assert "Pick 6" in out
        assert "41%" in out
        assert "rb-run" in out
        assert "Saved prediction snapshot #3" in out


class TestPrintSnipeReport:
    def test_pick_without_threats(self, capsys: pytest.CaptureFixture[str]) -> None:
        report = SnipeRadarReport(
            league_id="L1",
            user_slot=1,
            user_manager="Team 1",
            trials=100,
            entries=(SnipeRadarEntry(overall=1, round=1, pick=1, picks_before=0, alerts=(), top_available=()),),
        )
        print_snipe_report(report)
        out = capsys.readouterr().out
        assert "0 picks before you" in out
        assert "No snipe threats" in out


class TestPrintDriftReport:
    def test_baseline_prints_only_headline(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_drift_report(_drift_report(None, "Baseline established."))
        out = capsys.readouterr().out
        assert "Baseline established." in out
        assert "players tracked" not in out

    def test_follow_up_week_prints_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_drift_report(_drift_report("2025-W32", "Quiet week."))
        out = capsys.readouterr().out
        assert "60 players tracked against 2025-W32" in out


class TestPrintManagerDna:
    def test_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_manager_dna([])
        assert "No manager history found." in capsys.readouterr().out
