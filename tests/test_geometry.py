import pytest

from waymaps.geometry import LatLon, lat_lng_to_point, path_key, position_key


def test_equal_paths_give_equal_keys():
    a, b = LatLon(10.0, 20.0), LatLon(11.0, 21.0)
    assert path_key([a, b]) == path_key([LatLon(10.0, 20.0), LatLon(11.0, 21.0)])


def test_reversed_path_is_a_different_key():
    a, b = LatLon(10.0, 20.0), LatLon(11.0, 21.0)
    assert path_key([a, b]) != path_key([b, a])


def test_position_key_ignores_identity():
    assert position_key(LatLon(5.0, 5.0)) == position_key(LatLon(5.0, 5.0))


def test_center_projects_to_middle_of_widget():
    center = LatLon(37.5, 127.0)
    p = lat_lng_to_point(center, center, 15, 800, 600)
    assert p.x == pytest.approx(400.0)
    assert p.y == pytest.approx(300.0)


def test_projection_directions():
    center = LatLon(37.5, 127.0)
    east = lat_lng_to_point(LatLon(37.5, 127.01), center, 15, 800, 600)
    north = lat_lng_to_point(LatLon(37.51, 127.0), center, 15, 800, 600)
    assert east.x > 400.0
    assert east.y == pytest.approx(300.0)
    assert north.y < 300.0


def test_one_zoom_level_doubles_offset():
    center = LatLon(0.0, 0.0)
    pos = LatLon(0.0, 1.0)
    z10 = lat_lng_to_point(pos, center, 10, 0, 0)
    z11 = lat_lng_to_point(pos, center, 11, 0, 0)
    assert z11.x == pytest.approx(2 * z10.x)
