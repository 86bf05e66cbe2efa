import json

from waymaps.geometry import LatLon
from waymaps.gui import mapkit
from waymaps.model import MapOptions, MapType, Marker, MarkerOptions, MarkerType, Polyline, PolylineOptions


def test_add_marker_command_carries_id_and_style():
    marker = Marker(MarkerOptions(position=LatLon(1.5, 2.5), label="M3", marker_type=MarkerType.RED))
    js = mapkit.add_marker(marker)
    assert js.startswith("try { window.WM.addMarker(")
    assert json.dumps(marker.id) in js
    assert '"label": "M3"' in js
    assert '"color": "red"' in js
    assert "1.5, 2.5" in js


def test_add_line_command_serialises_path():
    line = Polyline(PolylineOptions(path=[LatLon(1, 2), LatLon(3, 4)], stroke_color="blue"))
    js = mapkit.add_line(line)
    assert "window.WM.addLine(" in js
    assert json.dumps(line.id) in js
    assert "[[1, 2], [3, 4]]" in js
    assert '"color": "blue"' in js


def test_remove_and_view_commands():
    assert 'window.WM.removeMarker("abc")' in mapkit.remove_marker("abc")
    assert 'window.WM.removeLine("xyz")' in mapkit.remove_line("xyz")
    assert "window.WM.setCenter(10.0, 20.0)" in mapkit.set_center(LatLon(10.0, 20.0))
    assert "window.WM.setZoom(12)" in mapkit.set_zoom(12.0)


def test_build_map_embeds_bridge_api():
    fmap = mapkit.build_map(MapOptions(map_type=MapType.TERRAIN), center=LatLon(37.0, 127.0))
    html = fmap.get_root().render()
    assert mapkit.QWEBCHANNEL_JS in html
    assert "window.WM" in html
    assert fmap.get_name() in html


def test_build_map_prefers_stored_center():
    fmap = mapkit.build_map(MapOptions(center=LatLon(1.0, 2.0)), center=LatLon(37.0, 127.0))
    assert list(fmap.location) == [1.0, 2.0]
