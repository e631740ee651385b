import numpy as np
import cv2 as cv
import pytest

from config import Settings
from preprocessing import (FOREGROUND_POINTS, SOURCE_POINTS, ClickSelector, FixedSelector,
                           PointCollector, apply_lookup_table, build_lookup_table, make_selector,
                           polygon_mask, prepare_source, select_region, tonal_remap)


@pytest.mark.parametrize("i", list(range(0, 101)) + list(range(181, 256)))
def test_remap_leaves_values_outside_band(i):
    assert tonal_remap(i) == i


@pytest.mark.parametrize("i,expected", [(101, 100), (102, 101), (140, 120), (160, 130), (180, 140)])
def test_remap_compresses_mid_band(i, expected):
    assert tonal_remap(i) == expected


def test_lookup_table_matches_remap():
    table = build_lookup_table()
    assert table.shape == (256,)
    assert table.dtype == np.uint8
    assert [int(v) for v in table] == [tonal_remap(i) for i in range(256)]


def test_lookup_table_applies_per_channel():
    img = np.array([[[100, 140, 200], [180, 101, 0]]], dtype=np.uint8)
    out = apply_lookup_table(img, build_lookup_table())
    assert out.tolist() == [[[100, 120, 200], [140, 100, 0]]]


def test_polygon_mask_fills_inside_only():
    mask = polygon_mask((20, 30, 3), [(5, 5), (20, 5), (20, 15), (5, 15)])
    assert mask.shape == (20, 30, 3)
    assert mask.dtype == np.uint8
    assert set(np.unique(mask)) == {0, 255}
    assert (mask[10, 10] == 255).all()
    assert (mask[2, 2] == 0).all()
    assert (mask[10, 25] == 0).all()


def test_polygon_mask_single_channel():
    mask = polygon_mask((10, 10), [(1, 1), (8, 1), (8, 8)])
    assert mask.ndim == 2
    assert mask[2, 6] == 255


def test_polygon_mask_needs_three_points():
    with pytest.raises(ValueError):
        polygon_mask((10, 10, 3), [(1, 1), (5, 5)])


def test_foreground_polygon_clips_to_small_images():
    mask = polygon_mask((100, 100, 3), FOREGROUND_POINTS)
    assert not mask.any()


def test_select_region_zeroes_outside_mask(rng):
    img = rng.integers(1, 256, (20, 20, 3), dtype=np.uint8)
    mask = polygon_mask(img.shape, [(2, 2), (15, 2), (15, 15), (2, 15)])
    preview = select_region(img, mask)
    assert (preview[0, 0] == 0).all()
    assert (preview[8, 8] == img[8, 8]).all()


def test_prepare_source_shrinks_by_factor(rng):
    img = rng.integers(0, 256, (83, 61, 3), dtype=np.uint8)
    out = prepare_source(img, Settings(resize_factor=4))
    assert out.shape == (20, 15, 3)
    assert out.dtype == np.uint8


def test_prepare_source_darkens_water_band():
    img = np.full((16, 16, 3), 160, dtype=np.uint8)
    out = prepare_source(img, Settings(resize_factor=2))
    assert (out == 130).all()


def test_fixed_selector_returns_recorded_points():
    points = FixedSelector().select(None)
    assert points == SOURCE_POINTS
    assert len(points) == 7


def test_make_selector():
    assert isinstance(make_selector("interactive"), ClickSelector)
    assert isinstance(make_selector("fixed"), FixedSelector)
    with pytest.raises(ValueError):
        make_selector("lasso")


def test_point_collector_ignores_other_events():
    collector = PointCollector()
    collector.onMouseAction(cv.EVENT_LBUTTONDOWN, 3, 4, 0, None)
    collector.onMouseAction(cv.EVENT_MOUSEMOVE, 9, 9, 0, None)
    collector.onMouseAction(cv.EVENT_RBUTTONDOWN, 1, 1, 0, None)
    assert collector.points == [(3, 4)]


def test_click_selector_collects_until_key(monkeypatch):
    callbacks = {}

    def fake_wait(delay=0):
        on_mouse = callbacks["Kayak"]
        on_mouse(cv.EVENT_LBUTTONDOWN, 5, 6, 0, None)
        on_mouse(cv.EVENT_MOUSEMOVE, 7, 8, 0, None)
        on_mouse(cv.EVENT_LBUTTONDOWN, 10, 11, 0, None)
        return ord(" ")

    monkeypatch.setattr(cv, "namedWindow", lambda *args: None)
    monkeypatch.setattr(cv, "imshow", lambda *args: None)
    monkeypatch.setattr(cv, "setMouseCallback",
                        lambda window, on_mouse, *args: callbacks.__setitem__(window, on_mouse))
    monkeypatch.setattr(cv, "waitKey", fake_wait)

    points = ClickSelector().select(np.zeros((4, 4, 3), np.uint8))
    assert points == ((5, 6), (10, 11))

    # listener is detached once a key was pressed
    callbacks["Kayak"](cv.EVENT_LBUTTONDOWN, 1, 1, 0, None)
    assert points == ((5, 6), (10, 11))
