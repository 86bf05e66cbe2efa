from waymaps.geometry import LatLon
from waymaps.lookup import RouteIndex, canonical_waypoint, line_for_waypoint, waypoint_for_line
from waymaps.model import Polyline, PolylineOptions, Route, Waypoint


def _route(name, *positions):
    route = Route(name)
    for pos in positions:
        wp = Waypoint.create(LatLon(*pos))
        route.add_waypoint(wp)
        if route.size() > 1:
            prev = route.get_waypoint(route.size() - 2)
            line = Polyline(PolylineOptions(path=[prev.position, wp.position]))
            wp.set_connection(line)
            route.add_line(line)
    return route


def test_waypoint_for_line_accepts_a_distinct_copy():
    route = _route("Trip", (10, 20), (11, 21), (12, 22))
    owner = route.get_waypoint(2)
    copy = Polyline(PolylineOptions(path=list(owner.connection.path), stroke_color="green"))

    assert copy is not owner.connection
    assert waypoint_for_line(route, copy) is owner


def test_waypoint_for_line_misses_reversed_path():
    route = _route("Trip", (10, 20), (11, 21))
    reversed_line = Polyline(PolylineOptions(path=[LatLon(11, 21), LatLon(10, 20)]))
    assert waypoint_for_line(route, reversed_line) is None


def test_line_for_waypoint_returns_the_routes_instance():
    route = _route("Trip", (10, 20), (11, 21))
    canonical = route.lines[0]
    stray = Waypoint.create(LatLon(11, 21))
    stray.set_connection(Polyline(PolylineOptions(path=list(canonical.path))))

    assert line_for_waypoint(route, stray) is canonical


def test_first_waypoint_has_no_line():
    route = _route("Trip", (10, 20), (11, 21))
    assert line_for_waypoint(route, route.origin) is None


def test_canonical_waypoint_prefers_identity_then_position():
    route = _route("Trip", (10, 20), (11, 21))
    assert canonical_waypoint(route, route.origin) is route.origin
    assert canonical_waypoint(route, Waypoint.create(LatLon(11, 21))) is route.destination
    assert canonical_waypoint(route, Waypoint.create(LatLon(0, 0))) is None


def test_owning_route_is_first_in_order():
    first = _route("first", (1, 1), (5, 5))
    second = _route("second", (5, 5), (9, 9))
    index = RouteIndex(lambda: [first, second])

    assert index.find_route_for_waypoint(Waypoint.create(LatLon(5, 5))) is first
    assert index.find_route_for_waypoint(Waypoint.create(LatLon(9, 9))) is second


def test_owning_route_for_line_by_path():
    first = _route("first", (1, 1), (2, 2))
    second = _route("second", (3, 3), (4, 4))
    index = RouteIndex(lambda: [first, second])
    probe = Polyline(PolylineOptions(path=[LatLon(3, 3), LatLon(4, 4)]))

    assert index.find_route_for_line(probe) is second


def test_misses_return_none():
    index = RouteIndex(lambda: [_route("only", (1, 1), (2, 2))])
    assert index.find_route_for_waypoint(Waypoint.create(LatLon(7, 7))) is None
    assert index.find_route_for_line(Polyline(PolylineOptions(path=[LatLon(2, 2), LatLon(1, 1)]))) is None


def test_index_follows_route_mutations():
    route = _route("Trip", (1, 1))
    routes = [route]
    index = RouteIndex(lambda: routes)
    probe = Waypoint.create(LatLon(2, 2))
    assert index.find_route_for_waypoint(probe) is None

    route.add_waypoint(Waypoint.create(LatLon(2, 2)))
    assert index.find_route_for_waypoint(probe) is route

    other = _route("other", (3, 3))
    routes.insert(0, other)
    assert index.find_route_for_waypoint(Waypoint.create(LatLon(3, 3))) is other

    route.remove_all_waypoints()
    assert index.find_route_for_waypoint(probe) is None
