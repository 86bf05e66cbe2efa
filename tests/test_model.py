import pytest

from waymaps.errors import RouteIndexError
from waymaps.geometry import LatLon, path_key
from waymaps.model import (
    MarkerType,
    PersistentMap,
    Polyline,
    PolylineOptions,
    Route,
    Waypoint,
)


def _connected_route(name, *positions, options=None):
    route = Route(name)
    for pos in positions:
        wp = Waypoint.create(LatLon(*pos))
        route.add_waypoint(wp)
        if route.size() > 1:
            prev = route.get_waypoint(route.size() - 2)
            line = Polyline((options or PolylineOptions()).with_path([prev.position, wp.position]))
            wp.set_connection(line)
            route.add_line(line)
    return route


def test_waypoint_create_defaults():
    wp = Waypoint.create(LatLon(1.0, 2.0))
    assert wp.connection is None
    assert wp.marker.position == LatLon(1.0, 2.0)
    assert wp.marker.options.visible
    assert wp.marker.label.startswith("M")


def test_waypoint_requires_position():
    with pytest.raises(ValueError):
        Waypoint.create(None)


def test_set_connection_overwrites():
    wp = Waypoint.create(LatLon(1.0, 2.0))
    first = Polyline(PolylineOptions(path=[LatLon(0, 0), LatLon(1, 2)]))
    second = Polyline(PolylineOptions(path=[LatLon(3, 3), LatLon(1, 2)]))
    wp.set_connection(first)
    wp.set_connection(second)
    assert wp.connection is second


def test_marker_labels_are_sequential_per_type():
    first = MarkerType.PURPLE.next_label()
    second = MarkerType.PURPLE.next_label()
    assert int(second[1:]) == int(first[1:]) + 1


def test_note_label_skips_reloaded_numbers():
    current = int(MarkerType.BROWN.next_label()[1:])
    MarkerType.BROWN.note_label(f"M{current + 10}")
    assert MarkerType.BROWN.next_label() == f"M{current + 11}"


def test_empty_route_has_no_endpoints():
    route = Route("Trip")
    assert route.size() == 0
    assert route.origin is None
    assert route.destination is None


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_get_waypoint_out_of_range(index):
    route = _connected_route("Trip", (10, 20), (11, 21))
    with pytest.raises(RouteIndexError):
        route.get_waypoint(index)
    with pytest.raises(IndexError):
        route.get_waypoint(index)


def test_remove_waypoint_leaves_lines_alone():
    route = _connected_route("Trip", (10, 20), (11, 21), (12, 22))
    lines_before = route.lines
    origin = route.origin

    assert route.remove_waypoint(origin)

    assert route.size() == 2
    assert route.lines == lines_before
    assert len(route.lines) == 2


def test_remove_waypoint_by_identity_only():
    route = _connected_route("Trip", (10, 20))
    assert not route.remove_waypoint(Waypoint.create(LatLon(10, 20)))
    assert route.size() == 1


def test_remove_all_waypoints_clears_both_sequences():
    route = _connected_route("Trip", (10, 20), (11, 21), (12, 22))
    route.remove_all_waypoints()
    assert route.size() == 0
    assert route.lines == []


def test_rebuild_after_removing_origin():
    route = _connected_route("Trip", (10, 20), (11, 21), (12, 22))
    kept = route.get_waypoint(2).connection
    route.remove_waypoint(route.origin)

    created = route.rebuild_lines()

    assert created == []
    assert route.origin.connection is None
    assert route.lines == [kept]
    assert kept.path_key == path_key([LatLon(11, 21), LatLon(12, 22)])


def test_rebuild_after_removing_middle_bridges_the_gap():
    style = PolylineOptions(stroke_color="blue", stroke_weight=5)
    route = _connected_route("Trip", (10, 20), (11, 21), (12, 22), options=style)
    route.remove_waypoint(route.get_waypoint(1))

    created = route.rebuild_lines()

    assert len(created) == 1
    assert len(route.lines) == 1
    line = route.lines[0]
    assert line.path == [LatLon(10, 20), LatLon(12, 22)]
    assert line.options.stroke_color == "blue"
    assert route.destination.connection is line


def test_line_count_invariant_after_rebuild():
    route = _connected_route("Trip", (0, 0), (1, 1), (2, 2), (3, 3), (4, 4))
    for index in (3, 0, 1):
        route.remove_waypoint(route.get_waypoint(index))
        route.rebuild_lines()
        assert len(route.lines) == max(0, route.size() - 1)
        for prev, wp, line in zip(route.waypoints, route.waypoints[1:], route.lines):
            assert line.path_key == path_key([prev.position, wp.position])


def test_mutations_bump_revision():
    route = Route("Trip")
    start = route.revision
    route.add_waypoint(Waypoint.create(LatLon(1, 1)))
    route.remove_all_waypoints()
    assert route.revision == start + 2


def test_persistent_map_keeps_route_names_unique():
    pmap = PersistentMap("Home")
    assert pmap.add_route(Route("a"))
    assert not pmap.add_route(Route("a"))
    assert pmap.route_names == ["a"]
    assert not pmap.remove_route(Route("a"))
    assert pmap.remove_route(pmap.get_route("a"))
    assert pmap.routes == []


def test_rebuild_gives_repeated_segments_their_own_lines():
    route = _connected_route("Loop", (0, 0), (1, 1), (0, 0), (1, 1), (5, 5))
    first, second, third, _ = route.lines
    route.remove_waypoint(route.destination)

    created = route.rebuild_lines()

    assert created == []
    assert len(route.lines) == 3
    assert route.lines[0] is first
    assert route.lines[1] is second
    assert route.lines[2] is third
    connections = [wp.connection for wp in route.waypoints[1:]]
    assert len({id(line) for line in connections}) == 3
