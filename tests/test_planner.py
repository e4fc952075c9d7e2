import pytest

from expander.canvas.planner import MAX_DIMENSION, canvas_size, plan_composition
from expander.canvas.types import ASPECT_RATIOS, Alignment, Anchor, AspectRatio


CENTER = Alignment(Anchor.CENTER, Anchor.CENTER)
TOP_LEFT = Alignment(Anchor.START, Anchor.START)
BOTTOM_RIGHT = Alignment(Anchor.END, Anchor.END)


@pytest.mark.parametrize("ratio", ASPECT_RATIOS, ids=lambda r: r.value)
def test_canvas_longer_side_is_max_dimension(ratio):
    w, h = canvas_size(ratio)
    major, minor = max(ratio.w, ratio.h), min(ratio.w, ratio.h)

    assert max(w, h) == MAX_DIMENSION
    assert min(w, h) == int(MAX_DIMENSION * minor / major + 0.5)
    assert (w >= h) == (ratio.w >= ratio.h)


def test_canvas_size_rounds_half_up():
    # 1280 * 5 / 8 = 800 exactly; 1280 * 2 / 3 = 853.33
    assert canvas_size(AspectRatio(8, 5)) == (1280, 800)
    assert canvas_size(AspectRatio(3, 2)) == (1280, 853)
    assert canvas_size(AspectRatio(9, 16)) == (720, 1280)
    # 1280 * 3 / 512 = 7.5
    assert canvas_size(AspectRatio(512, 3)) == (1280, 8)


@pytest.mark.parametrize(
    "src_w, src_h",
    [(800, 600), (600, 800), (1920, 1080), (100, 3000), (1280, 720), (33, 47)],
)
@pytest.mark.parametrize("ratio", ASPECT_RATIOS, ids=lambda r: r.value)
def test_full_scale_saturates_one_axis(ratio, src_w, src_h):
    plan = plan_composition(src_w, src_h, ratio, CENTER, 1.0)
    p = plan.placement

    assert p.width <= plan.canvas_width + 1e-6
    assert p.height <= plan.canvas_height + 1e-6
    assert p.width == pytest.approx(plan.canvas_width) or p.height == pytest.approx(plan.canvas_height)


@pytest.mark.parametrize("scale", [0.3, 0.55, 0.8, 1.0])
def test_center_alignment_centres_both_axes(scale):
    plan = plan_composition(1024, 768, AspectRatio(9, 16), CENTER, scale)
    p = plan.placement

    assert p.x == pytest.approx((plan.canvas_width - p.width) / 2)
    assert p.y == pytest.approx((plan.canvas_height - p.height) / 2)


@pytest.mark.parametrize("scale", [0.3, 0.75, 1.0])
def test_corner_alignments(scale):
    start = plan_composition(640, 480, AspectRatio(21, 9), TOP_LEFT, scale)
    end = plan_composition(640, 480, AspectRatio(21, 9), BOTTOM_RIGHT, scale)

    assert start.placement.x == 0
    assert start.placement.y == 0
    assert end.placement.x == pytest.approx(end.canvas_width - end.placement.width)
    assert end.placement.y == pytest.approx(end.canvas_height - end.placement.height)


def test_axes_are_independent():
    plan = plan_composition(400, 400, AspectRatio(16, 9), Alignment(Anchor.END, Anchor.START), 0.5)

    assert plan.placement.x == 0
    assert plan.placement.y == pytest.approx(720 - 360)


def test_scale_is_linear_and_monotonic():
    ratio = AspectRatio(4, 3)
    plans = [plan_composition(1000, 500, ratio, CENTER, s) for s in (1.0, 0.8, 0.5, 0.3)]

    for prev, nxt in zip(plans, plans[1:]):
        assert nxt.placement.width < prev.placement.width
        assert nxt.placement.height < prev.placement.height

    base = plans[0]
    for plan, s in zip(plans, (1.0, 0.8, 0.5, 0.3)):
        assert plan.base_ratio == base.base_ratio
        assert plan.final_ratio == pytest.approx(base.base_ratio * s)
        assert plan.placement.width == pytest.approx(base.placement.width * s)


def test_landscape_source_on_widescreen_canvas():
    plan = plan_composition(800, 600, AspectRatio.parse("16:9"), CENTER, 1.0)

    assert (plan.canvas_width, plan.canvas_height) == (1280, 720)
    assert plan.base_ratio == pytest.approx(1.2)
    assert plan.placement.width == pytest.approx(960)
    assert plan.placement.height == pytest.approx(720)
    assert plan.placement.x == pytest.approx(160)
    assert plan.placement.y == pytest.approx(0)


def test_portrait_source_on_square_canvas_at_half_scale():
    ratio = AspectRatio.parse("1:1")
    start = plan_composition(600, 800, ratio, TOP_LEFT, 0.5)
    end = plan_composition(600, 800, ratio, BOTTOM_RIGHT, 0.5)

    assert (start.canvas_width, start.canvas_height) == (1280, 1280)
    assert start.base_ratio == pytest.approx(1.6)
    assert start.final_ratio == pytest.approx(0.8)
    assert start.placement.width == pytest.approx(480)
    assert start.placement.height == pytest.approx(640)
    assert (start.placement.x, start.placement.y) == (0, 0)
    assert end.placement.x == pytest.approx(800)
    assert end.placement.y == pytest.approx(640)


@pytest.mark.parametrize("scale", [0.29, 1.01, 0.0, -1.0])
def test_rejects_scale_out_of_range(scale):
    with pytest.raises(ValueError):
        plan_composition(100, 100, AspectRatio(1, 1), CENTER, scale)


@pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
def test_rejects_empty_source(size):
    with pytest.raises(ValueError):
        plan_composition(size[0], size[1], AspectRatio(1, 1), CENTER, 1.0)


def test_parse_unknown_aspect_ratio():
    with pytest.raises(ValueError):
        AspectRatio.parse("5:4")


def test_plain_int_alignment_matches_anchor():
    plan = plan_composition(800, 600, AspectRatio.parse("16:9"), Alignment(row=1, col=1), 1.0)

    assert Alignment(row=1, col=1) == CENTER
    assert plan.placement.x == 160
    assert plan.placement.y == 0


def test_rejects_unknown_anchor():
    with pytest.raises(ValueError):
        Alignment(row=3, col=0)
