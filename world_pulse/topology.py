"""TopoJSON 地形数据加载与解码

TopoJSON 把相邻多边形共用的边界存成共享的 arc，几何体只保存 arc 下标
（负数 ~i 表示反向使用第 i 条 arc）。这里把它转换成可直接绘制的三种几何：
- LandGeometry：所有陆地合并成一个多面体
- BorderMesh：每条 arc 只出现一次的边界线集合（相邻国家不会重复描边）
- CountryFeature：按 ISO 数字码区分的国家多边形
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Callable

import requests

from .config import COUNTRIES_OBJECT, FETCH_TIMEOUT, LAND_OBJECT

_LOGGER = logging.getLogger("world_pulse.topology")

Point = tuple[float, float]
Ring = list[Point]
Polygon = list[Ring]  # 第一个环为外环，其余为洞

_POLYGON_TYPES = ("Polygon", "MultiPolygon")


class TopologyError(Exception):
    """地形数据无法获取或格式不正确。"""


@dataclass
class CountryFeature:
    id: str | None
    polygons: list[Polygon]
    properties: dict = field(default_factory=dict)


@dataclass
class LandGeometry:
    polygons: list[Polygon] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(ring for poly in self.polygons for ring in poly)

    def bounds(self) -> tuple[float, float, float, float] | None:
        """返回 (min_lon, min_lat, max_lon, max_lat)，空几何返回 None。"""
        lons = [lon for poly in self.polygons for ring in poly for lon, _ in ring]
        lats = [lat for poly in self.polygons for ring in poly for _, lat in ring]
        if not lons:
            return None
        return min(lons), min(lats), max(lons), max(lats)


@dataclass
class BorderMesh:
    lines: list[Ring] = field(default_factory=list)


@dataclass
class GeometryBundle:
    land: LandGeometry
    borders: BorderMesh
    countries: list[CountryFeature]


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def load_topology(source: str | os.PathLike) -> dict:
    """从本地路径或 http(s) URL 读取 TopoJSON。"""
    source = os.fspath(source)
    try:
        if _is_url(source):
            resp = requests.get(source, timeout=FETCH_TIMEOUT)
            resp.raise_for_status()
            data = resp.json()
        else:
            with open(source, 'r', encoding='utf-8') as f:
                data = json.load(f)
    except (requests.RequestException, OSError, ValueError) as exc:
        raise TopologyError(f"failed to load topology from {source}: {exc}") from exc

    validate_topology(data)
    _LOGGER.debug("loaded topology %s (%d arcs)", source, len(data["arcs"]))
    return data


def validate_topology(data) -> None:
    if not isinstance(data, dict) or data.get("type") != "Topology":
        raise TopologyError("not a TopoJSON Topology document")
    if not isinstance(data.get("arcs"), list):
        raise TopologyError("topology has no arcs list")
    if not isinstance(data.get("objects"), dict):
        raise TopologyError("topology has no objects mapping")


def decode_arcs(topology: dict) -> list[Ring]:
    """解量化 arc：有 transform 时坐标是差分编码的整数。"""
    transform = topology.get("transform")
    decoded = []
    if transform is None:
        for arc in topology["arcs"]:
            decoded.append([(float(p[0]), float(p[1])) for p in arc])
        return decoded

    sx, sy = transform["scale"]
    tx, ty = transform["translate"]
    for arc in topology["arcs"]:
        x = y = 0
        points = []
        for p in arc:
            x += p[0]
            y += p[1]
            points.append((x * sx + tx, y * sy + ty))
        decoded.append(points)
    return decoded


def _get_object(topology: dict, name: str) -> dict:
    obj = topology["objects"].get(name)
    if not isinstance(obj, dict):
        raise TopologyError(f"topology has no object named {name!r}")
    return obj


def _leaf_geometries(obj: dict):
    """展开 GeometryCollection，逐个返回叶子几何。"""
    if not isinstance(obj, dict):
        raise TopologyError(f"geometry must be an object, got {type(obj).__name__}")
    if obj.get("type") == "GeometryCollection":
        for child in obj.get("geometries", []):
            yield from _leaf_geometries(child)
    else:
        yield obj


def _ring(arcs: list[Ring], indexes: list[int]) -> Ring:
    points: Ring = []
    for k, i in enumerate(indexes):
        arc = arcs[i] if i >= 0 else arcs[~i][::-1]
        # 相邻 arc 首尾共点
        points.extend(arc if k == 0 else arc[1:])
    return points


def _polygons(arcs: list[Ring], geom: dict) -> list[Polygon]:
    gtype = geom.get("type")
    try:
        if gtype == "Polygon":
            return [[_ring(arcs, r) for r in geom["arcs"]]]
        if gtype == "MultiPolygon":
            return [[_ring(arcs, r) for r in poly] for poly in geom["arcs"]]
    except (KeyError, IndexError, TypeError) as exc:
        raise TopologyError(f"malformed {gtype} geometry: {exc}") from exc
    return []


def feature(topology: dict, obj: dict | str) -> list[CountryFeature]:
    """对象 → 国家要素列表（只保留面类型几何）。"""
    if isinstance(obj, str):
        obj = _get_object(topology, obj)
    arcs = decode_arcs(topology)
    features = []
    for geom in _leaf_geometries(obj):
        if geom.get("type") not in _POLYGON_TYPES:
            continue
        raw_id = geom.get("id")
        features.append(CountryFeature(
            id=None if raw_id is None else str(raw_id),
            polygons=_polygons(arcs, geom),
            properties=dict(geom.get("properties") or {}),
        ))
    return features


def merge_land(topology: dict, obj: dict | str) -> LandGeometry:
    """把对象中的所有多边形合并成一个陆地多面体。"""
    land = LandGeometry()
    for feat in feature(topology, obj):
        land.polygons.extend(feat.polygons)
    return land


def _arc_ids(geom: dict):
    gtype = geom.get("type")
    if gtype == "Polygon":
        rings = geom.get("arcs", [])
    elif gtype == "MultiPolygon":
        rings = [r for poly in geom.get("arcs", []) for r in poly]
    else:
        return
    for ring in rings:
        for i in ring:
            yield i if i >= 0 else ~i


def mesh(topology: dict, obj: dict | str,
         keep: Callable[[dict, dict], bool] | None = None) -> BorderMesh:
    """边界网格：对象引用到的每条 arc 只输出一次。

    keep(a, b) 收到共用该 arc 的两个几何；只被一个几何使用的外边界 arc
    传入的是同一个几何两次。keep 为 None 时全部保留。
    """
    if isinstance(obj, str):
        obj = _get_object(topology, obj)
    arcs = decode_arcs(topology)

    geoms_by_arc: dict[int, list[dict]] = {}
    for geom in _leaf_geometries(obj):
        for i in _arc_ids(geom):
            geoms_by_arc.setdefault(i, []).append(geom)

    result = BorderMesh()
    for i in sorted(geoms_by_arc):
        geoms = geoms_by_arc[i]
        if keep is not None and not keep(geoms[0], geoms[-1]):
            continue
        try:
            result.lines.append(list(arcs[i]))
        except IndexError as exc:
            raise TopologyError(f"arc index {i} out of range") from exc
    return result


def build_geometry(land_topology: dict, countries_topology: dict,
                   land_object: str = LAND_OBJECT,
                   countries_object: str = COUNTRIES_OBJECT) -> GeometryBundle:
    land = merge_land(land_topology, land_object)
    borders = mesh(countries_topology, countries_object)
    countries = feature(countries_topology, countries_object)
    if land.is_empty():
        _LOGGER.warning("land object %r has no polygons", land_object)
    _LOGGER.info(
        "geometry ready: %d land polygons, %d border lines, %d countries",
        len(land.polygons), len(borders.lines), len(countries),
    )
    return GeometryBundle(land=land, borders=borders, countries=countries)


def load_world(land_source, countries_source) -> GeometryBundle:
    """读取两份 TopoJSON 并转换为几何（在工作线程中调用）。"""
    land_topo = load_topology(land_source)
    countries_topo = load_topology(countries_source)
    try:
        return build_geometry(land_topo, countries_topo)
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise TopologyError(f"malformed topology: {exc!r}") from exc
