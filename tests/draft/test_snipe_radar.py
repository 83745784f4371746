import pytest

from fantasy_football_manager.domain.prediction import ScoreComponents
from fantasy_football_manager.domain.ranking import RankingPoolEntry
from fantasy_football_manager.domain.snipe import Urgency
from fantasy_football_manager.draft.simulation import simulate_trials, user_pick_overalls
from fantasy_football_manager.draft.simulation_models import (
    ManagerProfile,
    SimulationConfig,
    SimulationPick,
    SimulationTrial,
)
from fantasy_football_manager.draft.snipe_radar import SnipeRadar, urgency_for
from tests.fakes.pools import make_entries

ALPHA = RankingPoolEntry(name="Alpha", position="RB", rank=1.0, market_value=5000.0)
BRAVO = RankingPoolEntry(name="Bravo", position="WR", rank=2.0, market_value=4000.0)
CHARLIE = RankingPoolEntry(name="Charlie", position="RB", rank=3.0, market_value=3000.0)
DELTA = RankingPoolEntry(name="Delta", position="TE", rank=4.0, market_value=2000.0)
POOL = (ALPHA, BRAVO, CHARLIE, DELTA)
MANAGERS = ("Ann", "Ben", "Cat", "Dan")


def _pick(overall: int, manager_index: int, player: RankingPoolEntry) -> SimulationPick:
    return SimulationPick(
        overall=overall,
        round=1,
        pick_in_round=overall,
        manager_index=manager_index,
        player=player,
        score_components=ScoreComponents(),
    )


def _trial(
    first: RankingPoolEntry, second: RankingPoolEntry, available: tuple[RankingPoolEntry, ...]
) -> SimulationTrial:
    return SimulationTrial(picks=(_pick(1, 0, first), _pick(2, 1, second)), available={2: available})


class TestUrgency:
    @pytest.mark.parametrize(
        ("probability", "expected"),
        [
            (100, Urgency.CRITICAL),
            (65, Urgency.CRITICAL),
            (64, Urgency.WARNING),
            (35, Urgency.WARNING),
            (34, Urgency.WATCH),
        ],
    )
    def test_thresholds(self, probability: int, expected: Urgency) -> None:
        assert urgency_for(probability) is expected


class TestSnipeRadar:
    def _radar(self) -> SnipeRadar:
        radar = SnipeRadar(user_index=1, user_overalls=(2,), team_count=4, managers=MANAGERS)
        return radar.record_all(
            [
                _trial(ALPHA, BRAVO, (BRAVO, CHARLIE, DELTA)),
                _trial(CHARLIE, ALPHA, (ALPHA, BRAVO, DELTA)),
            ]
        )

    def test_alerts_rank_players_taken_before_user_pick(self) -> None:
        (entry,) = self._radar().entries(POOL)
        assert [(a.player, a.snipe_probability) for a in entry.alerts] == [("Alpha", 50), ("Charlie", 50)]
        assert entry.alerts[0].urgency is Urgency.WARNING

    def test_value_lost_uses_next_player_at_position(self) -> None:
        (entry,) = self._radar().entries(POOL)
        alpha, charlie = entry.alerts
        assert alpha.expected_value_lost == 1000
        # no lower-ranked RB left, so the replacement is 70% of the player's value
        assert charlie.expected_value_lost == 450

    def test_sniped_by_names_other_managers(self) -> None:
        (entry,) = self._radar().entries(POOL)
        assert [(s.manager, s.probability) for s in entry.alerts[0].sniped_by] == [("Ann", 50)]

    def test_top_available_counts_board_at_user_pick(self) -> None:
        (entry,) = self._radar().entries(POOL)
        assert [(p.player, p.probability) for p in entry.top_available][:2] == [("Bravo", 100), ("Delta", 100)]
        assert len(entry.top_available) <= 4

    def test_entry_position_fields(self) -> None:
        (entry,) = self._radar().entries(POOL)
        assert (entry.overall, entry.round, entry.pick, entry.picks_before) == (2, 1, 2, 1)

    def test_rare_snipes_are_not_alerts(self) -> None:
        radar = SnipeRadar(user_index=1, user_overalls=(2,), team_count=4, managers=MANAGERS)
        trials = [_trial(DELTA, BRAVO, ())] + [_trial(ALPHA, BRAVO, ()) for _ in range(19)]
        (entry,) = radar.record_all(trials).entries(POOL)
        assert [a.player for a in entry.alerts] == ["Alpha"]
        assert entry.alerts[0].urgency is Urgency.CRITICAL

    def test_no_trials_no_alerts(self) -> None:
        radar = SnipeRadar(user_index=0, user_overalls=(1, 8), team_count=4, managers=MANAGERS)
        assert all(not e.alerts and not e.top_available for e in radar.entries(POOL))

    def test_simulated_radar_is_bounded(self) -> None:
        overalls = user_pick_overalls(12, 6, 3)
        config = SimulationConfig(team_count=12, rounds=3, seed=5)
        profiles = [ManagerProfile.neutral(i) for i in range(12)]
        radar = SnipeRadar(5, overalls, 12, [p.manager for p in profiles])
        radar.record_all(simulate_trials(make_entries(60), profiles, config, 100, observe=overalls))
        entries = radar.entries(make_entries(60))
        assert [e.overall for e in entries] == [6, 19, 30]
        assert [e.picks_before for e in entries] == [5, 12, 10]
        for entry in entries:
            assert len(entry.alerts) <= 6
            for alert in entry.alerts:
                assert 10 <= alert.snipe_probability <= 100
                assert len(alert.sniped_by) <= 3
                assert all(s.manager != "Manager 6" for s in alert.sniped_by)
