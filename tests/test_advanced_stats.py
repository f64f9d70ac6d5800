import pytest

from application.analysis import AnalysisContext, compute_advanced_stats, is_isolated_death, lane_opponent
from domain.entities import AdvancedStats
from tests.factories import (
    OPPONENT_PID,
    SUBJECT_PID,
    SUBJECT_PUUID,
    building,
    elite_monster,
    kill,
    make_detail,
    make_timeline,
    puuid_for,
)

MID = {"x": 7000, "y": 7000}


def _lane_timeline():
    return make_timeline(
        20,
        stats={15: {
            SUBJECT_PID: {"minionsKilled": 120, "jungleMinionsKilled": 10, "totalGold": 6000, "xp": 7000},
            OPPONENT_PID: {"minionsKilled": 100, "jungleMinionsKilled": 0, "totalGold": 5200, "xp": 6500},
        }},
    )


class TestLanePhase:
    def test_diffs_at_fifteen(self):
        stats = compute_advanced_stats(make_detail(), _lane_timeline(), SUBJECT_PUUID)

        assert (stats.cs_diff_15, stats.gold_diff_15, stats.xp_diff_15) == (30, 800, 500)

    def test_swapping_subject_and_opponent_negates_diffs(self):
        detail, timeline = make_detail(), _lane_timeline()
        mine = compute_advanced_stats(detail, timeline, SUBJECT_PUUID)
        theirs = compute_advanced_stats(detail, timeline, puuid_for(OPPONENT_PID))

        assert theirs.cs_diff_15 == -mine.cs_diff_15
        assert theirs.gold_diff_15 == -mine.gold_diff_15
        assert theirs.xp_diff_15 == -mine.xp_diff_15

    def test_short_game_uses_last_frame(self):
        timeline = make_timeline(
            10, stats={9: {SUBJECT_PID: {"totalGold": 4000}, OPPONENT_PID: {"totalGold": 3000}}}
        )
        stats = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID)

        assert stats.gold_diff_15 == 1000

    def test_no_opponent_without_position_label(self):
        detail = make_detail(overrides={SUBJECT_PID: {"teamPosition": "", "lane": ""}})
        ctx = AnalysisContext.build(detail, _lane_timeline(), puuid=SUBJECT_PUUID)
        stats = compute_advanced_stats(detail, _lane_timeline(), SUBJECT_PUUID)

        assert lane_opponent(ctx) is None
        assert stats.cs_diff_15 is None
        assert stats.gold_diff_15 is None

    def test_lane_label_falls_back_to_lane(self):
        detail = make_detail(overrides={
            SUBJECT_PID: {"teamPosition": "", "lane": "MIDDLE"},
            OPPONENT_PID: {"teamPosition": "", "lane": "MIDDLE"},
        })
        ctx = AnalysisContext.build(detail, None, puuid=SUBJECT_PUUID)

        assert lane_opponent(ctx)["participantId"] == OPPONENT_PID


class TestTimelineFreeFields:
    def test_without_timeline_only_detail_fields_are_set(self):
        detail = make_detail(overrides={SUBJECT_PID: {"firstBloodAssist": True}})
        stats = compute_advanced_stats(detail, None, SUBJECT_PUUID)

        assert stats.first_blood == 1
        assert stats.dmg_gold_ratio == 1.5
        assert stats.cs_diff_15 is None
        assert stats.isolated_deaths is None
        assert stats.objective_rate is None

    def test_ratio_rounds_to_three_places(self):
        detail = make_detail(overrides={SUBJECT_PID: {"goldEarned": 3000, "totalDamageDealtToChampions": 1000}})
        assert compute_advanced_stats(detail, None, SUBJECT_PUUID).dmg_gold_ratio == 0.333

    def test_zero_gold_gives_no_ratio(self):
        detail = make_detail(overrides={SUBJECT_PID: {"goldEarned": 0}})
        assert compute_advanced_stats(detail, None, SUBJECT_PUUID).dmg_gold_ratio is None

    def test_subject_by_champion_and_team(self):
        stats = compute_advanced_stats(make_detail(), None, None, champion_name="Champ3", team_id=100)
        assert stats.first_blood == 0

    @pytest.mark.parametrize("detail", [None, {}, {"info": {"participants": "broken"}}, "{not json"])
    def test_never_raises(self, detail):
        assert compute_advanced_stats(detail, None, SUBJECT_PUUID) == AdvancedStats()

    def test_absent_subject_gives_empty_stats(self):
        assert compute_advanced_stats(make_detail(), _lane_timeline(), "someone-else") == AdvancedStats()


class TestIsolatedDeaths:
    def test_one_isolated_one_supported(self):
        lonely = kill(5 * 60_000 + 10_000, 7, SUBJECT_PID, MID)
        supported = kill(8 * 60_000 + 5_000, 7, SUBJECT_PID, MID)
        timeline = make_timeline(20, positions={8: {1: {"x": 8000, "y": 7000}}}, events=[lonely, supported])

        stats = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID)

        assert stats.isolated_deaths == 1

    def test_ally_exactly_at_radius_supports(self):
        death = kill(4 * 60_000, 7, SUBJECT_PID, MID)
        timeline = make_timeline(20, positions={4: {2: {"x": 8500, "y": 7000}}}, events=[death])
        ctx = AnalysisContext.build(make_detail(), timeline, puuid=SUBJECT_PUUID)

        assert not is_isolated_death(ctx, ctx.kill_events[0])

    def test_recently_killed_ally_does_not_support(self):
        ally_down = kill(4 * 60_000 + 5_000, 7, 2, MID)
        death = kill(4 * 60_000 + 10_000, 7, SUBJECT_PID, MID)
        timeline = make_timeline(
            20, positions={4: {2: {"x": 7500, "y": 7000}}}, events=[ally_down, death]
        )
        ctx = AnalysisContext.build(make_detail(), timeline, puuid=SUBJECT_PUUID)

        assert is_isolated_death(ctx, death)
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).isolated_deaths == 1

    def test_ally_respawned_long_ago_supports(self):
        ally_down = kill(3 * 60_000, 7, 2, MID)
        death = kill(4 * 60_000 + 10_000, 7, SUBJECT_PID, MID)
        timeline = make_timeline(
            20, positions={4: {2: {"x": 7500, "y": 7000}}}, events=[ally_down, death]
        )
        ctx = AnalysisContext.build(make_detail(), timeline, puuid=SUBJECT_PUUID)

        assert not is_isolated_death(ctx, death)

    def test_objective_trade_is_not_isolated(self):
        death = kill(12 * 60_000, 7, SUBJECT_PID, MID)
        timeline = make_timeline(
            20, events=[death, building(12 * 60_000 - 15_000, 2)]
        )
        stats = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID)

        assert stats.isolated_deaths == 0

    def test_death_without_position_is_isolated(self):
        timeline = make_timeline(20, events=[kill(6 * 60_000, 7, SUBJECT_PID, None)])
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).isolated_deaths == 1

    def test_never_more_than_deaths(self):
        deaths = [kill(m * 60_000 + 1_000, 6 + m % 5, SUBJECT_PID, MID) for m in range(1, 15)]
        other = [kill(3 * 60_000, SUBJECT_PID, 9, MID)]
        timeline = make_timeline(20, events=deaths + other)

        stats = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID)

        assert 0 <= stats.isolated_deaths <= len(deaths)


class TestObjectiveRate:
    def test_none_without_team_elite_monsters(self):
        timeline = make_timeline(20, events=[elite_monster(10 * 60_000, 7)])
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).objective_rate is None

    def test_alive_when_no_prior_death(self):
        timeline = make_timeline(20, events=[elite_monster(10 * 60_000, 2, assists=[1])])
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).objective_rate == 100.0

    def test_recent_death_in_fountain_counts_as_dead(self):
        timeline = make_timeline(
            25,
            positions={10: {SUBJECT_PID: {"x": 500, "y": 500}}},
            events=[
                kill(10 * 60_000 - 10_000, 7, SUBJECT_PID, MID),
                elite_monster(10 * 60_000, 2),
                elite_monster(20 * 60_000, 2, "BARON_NASHOR"),
            ],
        )
        stats = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID)

        assert stats.objective_rate == 50.0

    def test_recent_death_outside_fountain_counts_as_alive(self):
        timeline = make_timeline(
            25,
            events=[kill(10 * 60_000 - 10_000, 7, SUBJECT_PID, MID), elite_monster(10 * 60_000, 2)],
        )
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).objective_rate == 100.0

    def test_assist_credit_counts_for_team(self):
        timeline = make_timeline(20, events=[elite_monster(10 * 60_000, 0, assists=[4])])
        assert compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).objective_rate == 100.0

    def test_rate_stays_in_range(self):
        events = [elite_monster(m * 60_000, 1 + m % 5) for m in range(2, 20, 3)]
        events += [kill(m * 60_000 - 5_000, 7, SUBJECT_PID, MID) for m in range(2, 20, 6)]
        timeline = make_timeline(
            25,
            positions={m: {SUBJECT_PID: {"x": 700, "y": 700}} for m in range(25)},
            events=events,
        )
        rate = compute_advanced_stats(make_detail(), timeline, SUBJECT_PUUID).objective_rate

        assert 0.0 <= rate <= 100.0
