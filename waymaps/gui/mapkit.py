"""Leaflet page generation and the JS commands that drive it."""
from __future__ import annotations

import json
from typing import Any, Optional

import folium

from waymaps.config import DEFAULT_CENTER_LAT, DEFAULT_CENTER_LON, TILE_LAYERS
from waymaps.geometry import LatLon
from waymaps.model import MapOptions, Marker, Polyline

QWEBCHANNEL_JS = "qrc:///qtwebchannel/qwebchannel.js"
BRIDGE_NAME = "bridge"

MARKER_CSS = (
    ".wm-marker{width:22px;height:22px;line-height:22px;border-radius:50%;"
    "border:2px solid #fff;color:#fff;font:700 10px sans-serif;text-align:center;"
    "box-shadow:1px 1px 3px rgba(0,0,0,.4);}"
)


def _call(fn: str, *args: Any) -> str:
    payload = ", ".join(json.dumps(a, ensure_ascii=False) for a in args)
    return f"try {{ window.WM.{fn}({payload}); }} catch(e) {{ console.error(e); }}"


def add_marker(marker: Marker) -> str:
    opts = marker.options
    return _call(
        "addMarker",
        marker.id,
        opts.position.lat,
        opts.position.lon,
        {
            "title": opts.title,
            "label": opts.label,
            "color": opts.marker_type.value,
            "visible": opts.visible,
        },
    )


def remove_marker(marker_id: str) -> str:
    return _call("removeMarker", marker_id)


def add_line(line: Polyline) -> str:
    opts = line.options
    return _call(
        "addLine",
        line.id,
        [p.to_list() for p in opts.path],
        {
            "color": opts.stroke_color,
            "weight": opts.stroke_weight,
            "opacity": opts.stroke_opacity,
            "visible": opts.visible,
            "clickable": opts.clickable,
        },
    )


def remove_line(line_id: str) -> str:
    return _call("removeLine", line_id)


def set_center(position: LatLon) -> str:
    return _call("setCenter", position.lat, position.lon)


def set_zoom(zoom: int) -> str:
    return _call("setZoom", int(zoom))


def build_js_api(map_name: str) -> str:
    return f"""
    (function(){{
      var m = {map_name};
      window.WM = {{ markers: {{}}, lines: {{}}, bridge: null }};
      var st = document.createElement('style'); st.innerHTML = {json.dumps(MARKER_CSS)};
      document.head.appendChild(st);

      function send(kind, id, latlng) {{
        if (window.WM.bridge) window.WM.bridge.mapEvent(kind, id || "", latlng.lat, latlng.lng);
      }}
      function sendView() {{
        if (!window.WM.bridge) return;
        var c = m.getCenter();
        window.WM.bridge.viewChanged(m.getZoom(), c.lat, c.lng);
      }}
      new QWebChannel(qt.webChannelTransport, function(ch) {{
        window.WM.bridge = ch.objects.{BRIDGE_NAME};
        sendView();
      }});

      m.on('click', function(e) {{ send('click', '', e.latlng); }});
      m.on('dblclick', function(e) {{ send('dblclick', '', e.latlng); }});
      m.on('contextmenu', function(e) {{ send('contextmenu', '', e.latlng); }});
      m.on('zoomend moveend', sendView);

      function icon(opts) {{
        var div = document.createElement('div');
        div.className = 'wm-marker';
        div.style.background = opts.color;
        div.textContent = opts.label || '';
        return L.divIcon({{ className: '', iconSize: [22, 22], iconAnchor: [11, 11], html: div.outerHTML }});
      }}

      window.WM.addMarker = function(id, lat, lon, opts) {{
        window.WM.removeMarker(id);
        var mk = L.marker([lat, lon], {{ icon: icon(opts), title: opts.title, bubblingMouseEvents: false }});
        mk.on('click', function(e) {{ send('click', id, e.latlng); }});
        mk.on('contextmenu', function(e) {{ send('contextmenu', id, e.latlng); }});
        if (opts.visible) mk.addTo(m);
        window.WM.markers[id] = mk;
      }};
      window.WM.removeMarker = function(id) {{
        var mk = window.WM.markers[id];
        if (!mk) return;
        m.removeLayer(mk);
        delete window.WM.markers[id];
      }};
      window.WM.addLine = function(id, coords, opts) {{
        window.WM.removeLine(id);
        var ln = L.polyline(coords, {{
          color: opts.color, weight: opts.weight, opacity: opts.opacity,
          interactive: opts.clickable, bubblingMouseEvents: false
        }});
        ln.on('click', function(e) {{ send('click', id, e.latlng); }});
        ln.on('contextmenu', function(e) {{ send('contextmenu', id, e.latlng); }});
        if (opts.visible) ln.addTo(m);
        window.WM.lines[id] = ln;
      }};
      window.WM.removeLine = function(id) {{
        var ln = window.WM.lines[id];
        if (!ln) return;
        m.removeLayer(ln);
        delete window.WM.lines[id];
      }};
      window.WM.setCenter = function(lat, lon) {{ m.panTo([lat, lon]); }};
      window.WM.setZoom = function(z) {{ m.setZoom(z); }};
    }})();
    """


def build_map(options: MapOptions, center: Optional[LatLon] = None) -> folium.Map:
    center = options.center or center or LatLon(DEFAULT_CENTER_LAT, DEFAULT_CENTER_LON)
    tiles, attr = TILE_LAYERS.get(options.map_type.value, TILE_LAYERS["roadmap"])
    fmap = folium.Map(
        location=[center.lat, center.lon],
        zoom_start=options.zoom,
        tiles=None,
        zoom_control=options.zoom_control,
        control_scale=options.scale_control,
        dragging=options.dragging,
        double_click_zoom=False,
    )
    folium.TileLayer(tiles, attr=attr, control=False, name="Base").add_to(fmap)

    fmap.get_root().header.add_child(folium.Element(f'<script src="{QWEBCHANNEL_JS}"></script>'))
    fmap.get_root().script.add_child(folium.Element(build_js_api(fmap.get_name())))
    return fmap
