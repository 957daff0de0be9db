"""Tests for hydration of flat rows into nested structures."""

import itertools
import random
from operator import itemgetter

import pytest

from scenariodb.domain.errors import DataQualityError, DataQualityWarning
from scenariodb.domain.types import DuplicatePolicy
from scenariodb.mapping.hydrate import (
    demand_set_from_rows,
    fd_set_from_rows,
    hydrate_series,
    network_from_rows,
    scenario_from_row,
    sensor_set_from_rows,
    split_ratio_set_from_rows,
)

RATIO_KEYS = ("profile_id", "in_link_id", "out_link_id", "vehicle_type_id")


def _ratio_row(profile: int, link_in: int, link_out: int, vtype: int, t: int, ratio: float) -> dict:
    return {
        "profile_id": profile,
        "in_link_id": link_in,
        "out_link_id": link_out,
        "vehicle_type_id": vtype,
        "time_index": t,
        "ratio": ratio,
    }


class TestHydrateSeries:
    def test_nests_by_key_columns(self) -> None:
        rows = [
            _ratio_row(1, 10, 11, 1, 0, 0.5),
            _ratio_row(1, 10, 11, 1, 1, 0.6),
            _ratio_row(1, 10, 12, 2, 0, 0.4),
        ]
        result = hydrate_series(rows, RATIO_KEYS, "time_index", itemgetter("ratio"))
        assert result == {"1": {"10": {"11": {"1": [0.5, 0.6]}, "12": {"2": [0.4]}}}}

    def test_invariant_under_row_permutation(self) -> None:
        rows = [
            {"link_id": link, "time_index": t, "flow": float(link * 100 + t)}
            for link in (3, 1, 2)
            for t in range(4)
        ]
        expected = hydrate_series(rows, ("link_id",), "time_index", itemgetter("flow"))
        rng = random.Random(7)
        for _ in range(20):
            shuffled = rows[:]
            rng.shuffle(shuffled)
            result = hydrate_series(shuffled, ("link_id",), "time_index", itemgetter("flow"))
            assert result == expected
            assert list(result) == list(expected)
        assert expected["2"] == [200.0, 201.0, 202.0, 203.0]

    def test_all_orderings_of_small_series(self) -> None:
        rows = [{"time_index": t, "v": t * 10} for t in range(4)]
        for perm in itertools.permutations(rows):
            assert hydrate_series(perm, (), "time_index", itemgetter("v")) == [0, 10, 20, 30]

    def test_gaps_become_none(self) -> None:
        rows = [{"time_index": 3, "v": 3.0}, {"time_index": 0, "v": 0.0}]
        assert hydrate_series(rows, (), "time_index", itemgetter("v")) == [0.0, None, None, 3.0]

    def test_empty_rows(self) -> None:
        assert hydrate_series([], (), "time_index", itemgetter("v")) == []
        assert hydrate_series([], ("link_id",), "time_index", itemgetter("v")) == {}

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(DataQualityError, match="Negative time index"):
            hydrate_series([{"time_index": -1, "v": 1}], (), "time_index", itemgetter("v"))


class TestDuplicateKeys:
    ROWS = [
        {"link_id": 1, "time_index": 0, "flow": 1.0},
        {"link_id": 1, "time_index": 0, "flow": 2.0},
    ]

    def test_last_wins_warns(self) -> None:
        with pytest.warns(DataQualityWarning, match="Duplicate composite key"):
            result = hydrate_series(self.ROWS, ("link_id",), "time_index", itemgetter("flow"))
        assert result == {"1": [2.0]}

    def test_error_policy_raises(self) -> None:
        with pytest.raises(DataQualityError, match=r"\(1, 0\)"):
            hydrate_series(
                self.ROWS,
                ("link_id",),
                "time_index",
                itemgetter("flow"),
                on_duplicate=DuplicatePolicy.ERROR,
            )


class TestEntityHydration:
    def test_absent_rows_yield_none(self) -> None:
        assert network_from_rows(None) is None
        assert demand_set_from_rows(None) is None
        assert split_ratio_set_from_rows(None) is None
        assert fd_set_from_rows(None) is None
        assert sensor_set_from_rows(None) is None
        assert scenario_from_row(None) is None

    def test_network(self) -> None:
        net = network_from_rows(
            {"id": 4, "name": "n", "description": None, "project_id": None},
            [
                {
                    "id": 1,
                    "name": None,
                    "type": None,
                    "longitude": None,
                    "latitude": None,
                    "position": 0,
                }
            ],
            [
                {
                    "id": 2,
                    "begin_node_id": 1,
                    "end_node_id": 1,
                    "length": 9.0,
                    "speed_limit": None,
                    "detail_level": None,
                    "lane_count": None,
                    "lane_offset": None,
                    "name": None,
                    "type": None,
                    "position": 0,
                }
            ],
        )
        assert net is not None
        assert net.id == 4
        assert net.begin_node(net.links[0]) is net.nodes[0]

    def test_sensor_set(self) -> None:
        sensor_set = sensor_set_from_rows(
            {"id": 2, "name": "loops", "description": None, "project_id": 1},
            [
                {
                    "entity_id": "400001",
                    "type": "loop",
                    "data_feed_id": 7,
                    "link_id": 10,
                    "link_offset": 1.5,
                    "lane_num": 1.0,
                    "health_status": None,
                    "position": 0,
                }
            ],
        )
        assert sensor_set is not None
        assert sensor_set.project_id == 1
        assert sensor_set.sensors[0].measurement_feed_id == 7
        assert sensor_set.sensors[0].link_id == 10

    def test_demand_set_maps_profile_rows_to_keys(self) -> None:
        set_row = {"id": 5, "name": "d", "description": None, "project_id": 2}
        profile_rows = [
            {
                "id": 31,
                "profile_key": 1,
                "dest_network_id": None,
                "start_time": 0.0,
                "sample_rate": 60.0,
                "knob": None,
                "std_dev_add": None,
                "std_dev_mult": None,
            },
            {
                "id": 32,
                "profile_key": 2,
                "dest_network_id": 7,
                "start_time": None,
                "sample_rate": None,
                "knob": None,
                "std_dev_add": None,
                "std_dev_mult": None,
            },
        ]
        demand_rows = [
            {"profile_id": 31, "link_id": 10, "time_index": 1, "flow": 2.0},
            {"profile_id": 31, "link_id": 10, "time_index": 0, "flow": 1.0},
        ]
        demand_set = demand_set_from_rows(set_row, profile_rows, demand_rows)
        assert demand_set is not None
        assert demand_set.profile_at(1).flow == {"10": [1.0, 2.0]}
        assert demand_set.profile_at(2).flow == {}
        assert demand_set.profile_at(2).destination_network_id == 7

    def test_split_ratio_duplicates_follow_policy(self) -> None:
        set_row = {"id": 1, "name": None, "description": None, "project_id": None}
        profile_rows = [
            {"id": 1, "profile_key": 0, "dest_network_id": None, "start_time": None, "sample_rate": None}
        ]
        ratio_rows = [_ratio_row(1, 1, 2, 3, 0, 0.1), _ratio_row(1, 1, 2, 3, 0, 0.2)]
        with pytest.raises(DataQualityError):
            split_ratio_set_from_rows(
                set_row, profile_rows, ratio_rows, on_duplicate=DuplicatePolicy.ERROR
            )
        with pytest.warns(DataQualityWarning):
            result = split_ratio_set_from_rows(set_row, profile_rows, ratio_rows)
        assert result is not None
        assert result.profile_at(0).ratio == {"1": {"2": {"3": [0.2]}}}
