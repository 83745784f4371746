import statistics

from fantasy_football_manager.domain.prediction import ScoreComponents
from fantasy_football_manager.domain.ranking import RankingPoolEntry
from fantasy_football_manager.draft.aggregation import DEFAULT_RATIONALE, POSITION_RATIONALE, OutcomeAggregator
from fantasy_football_manager.draft.simulation import simulate_trials
from fantasy_football_manager.draft.simulation_models import (
    BASELINE,
    ManagerProfile,
    Scenario,
    SimulationConfig,
    SimulationPick,
    SimulationTrial,
)
from tests.fakes.pools import make_entries


def _trial(*players: tuple[str, str], components: ScoreComponents | None = None) -> SimulationTrial:
    return SimulationTrial(
        picks=tuple(
            SimulationPick(
                overall=i + 1,
                round=1,
                pick_in_round=i + 1,
                manager_index=i,
                player=RankingPoolEntry(name=name, position=position, rank=float(i + 1)),
                score_components=components or ScoreComponents(adp=50.0, need=50.0),
            )
            for i, (name, position) in enumerate(players)
        )
    )


def _profiles(team_count: int) -> list[ManagerProfile]:
    return [ManagerProfile.neutral(i) for i in range(team_count)]


class TestOutcomeAggregator:
    def test_probability_is_share_of_trials(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all(
            [
                _trial(("Alpha", "RB")),
                _trial(("Alpha", "RB")),
                _trial(("Alpha", "RB")),
                _trial(("Bravo", "WR")),
            ]
        )
        targets = aggregator.top_targets(1)
        assert [(t.player, t.probability) for t in targets] == [("Alpha", 75), ("Bravo", 25)]

    def test_shares_never_sum_past_100(self) -> None:
        trials = [_trial(("Alpha", "RB"))] * 67 + [_trial(("Bravo", "WR"))] * 67 + [_trial(("Cole", "TE"))] * 66
        targets = OutcomeAggregator((1,)).record_all(trials).top_targets(1)
        assert [(t.player, t.probability) for t in targets] == [("Alpha", 34), ("Bravo", 33), ("Cole", 33)]
        assert sum(t.probability for t in targets) == 100

    def test_even_three_way_split_sums_to_100(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all(
            [_trial(("Zed", "TE")), _trial(("Adam", "QB")), _trial(("Mike", "WR"))]
        )
        assert [t.probability for t in aggregator.top_targets(1)] == [34, 33, 33]

    def test_ties_break_alphabetically(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all(
            [_trial(("Zed", "TE")), _trial(("Adam", "QB")), _trial(("Mike", "WR"))]
        )
        assert [t.player for t in aggregator.top_targets(1)] == ["Adam", "Mike", "Zed"]

    def test_top_k_limits_output(self) -> None:
        names = ["A", "B", "C", "D", "E"]
        aggregator = OutcomeAggregator((1,)).record_all([_trial((n, "WR")) for n in names])
        assert len(aggregator.top_targets(1, k=3)) == 3
        assert len(aggregator.top_targets(1, k=10)) == 5

    def test_rationale_is_keyed_by_position(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all([_trial(("Tight", "TE"))])
        assert aggregator.top_targets(1)[0].why == POSITION_RATIONALE["TE"]
        assert POSITION_RATIONALE["TE"] == "Positional leverage opportunity at TE."

    def test_unknown_position_uses_default_rationale(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all([_trial(("Kicker", "K"))])
        assert aggregator.top_targets(1)[0].why == DEFAULT_RATIONALE

    def test_components_are_averaged(self) -> None:
        aggregator = OutcomeAggregator((1,)).record_all(
            [
                _trial(("Alpha", "RB"), components=ScoreComponents(adp=40.0, need=60.0)),
                _trial(("Alpha", "RB"), components=ScoreComponents(adp=60.0, need=40.0)),
            ]
        )
        components = aggregator.top_targets(1)[0].score_components
        assert components.adp == 50.0
        assert components.need == 50.0

    def test_no_trials_no_targets(self) -> None:
        assert OutcomeAggregator((1, 2)).top_targets(1) == ()

    def test_slots_not_reached_are_counted_as_trials(self) -> None:
        aggregator = OutcomeAggregator((1, 3)).record_all([_trial(("Alpha", "RB"))])
        assert aggregator.trials == 1
        assert aggregator.top_targets(3) == ()

    def test_unrequested_slots_are_ignored(self) -> None:
        aggregator = OutcomeAggregator((2,)).record_all([_trial(("Alpha", "RB"), ("Bravo", "WR"))])
        assert aggregator.hits(1) == {}
        assert aggregator.hits(2) == {("Bravo", "WR"): 1}


class TestAggregatedSimulation:
    def test_hits_never_exceed_trials_and_probabilities_are_bounded(self) -> None:
        config = SimulationConfig(team_count=12, rounds=3, seed=7)
        slots = tuple(range(1, 37))
        aggregator = OutcomeAggregator(slots).record_all(simulate_trials(make_entries(60), _profiles(12), config, 120))
        assert aggregator.trials == 120
        for slot in slots:
            assert sum(aggregator.hits(slot).values()) <= aggregator.trials
            for target in aggregator.top_targets(slot):
                assert 0 <= target.probability <= 100

    def test_more_trials_shrink_probability_variance(self) -> None:
        entries = make_entries(20)
        profiles = _profiles(4)

        def share_of_top_player(trials: int, seed: int) -> float:
            config = SimulationConfig(team_count=4, rounds=1, seed=seed)
            aggregator = OutcomeAggregator((1,)).record_all(simulate_trials(entries, profiles, config, trials))
            return aggregator.hits(1).get(("Player 01", "RB"), 0) / aggregator.trials

        few = [share_of_top_player(20, seed) for seed in range(12)]
        many = [share_of_top_player(400, seed) for seed in range(100, 112)]
        assert statistics.pvariance(many) < statistics.pvariance(few)

    def test_removing_consensus_first_changes_first_pick(self) -> None:
        entries = make_entries(60)
        profiles = _profiles(12)
        config = SimulationConfig(team_count=12, rounds=1, seed=21)
        baseline = OutcomeAggregator((1,)).record_all(simulate_trials(entries, profiles, config, 200, BASELINE))
        removed = OutcomeAggregator((1,)).record_all(
            simulate_trials(entries, profiles, config, 200, Scenario(name="no-1", removed_players=("Player 01",)))
        )
        assert ("Player 01", "RB") not in removed.hits(1)
        assert baseline.hits(1) != removed.hits(1)
