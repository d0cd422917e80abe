from PySide6.QtGui import QColor, QFont, QImage

from captioner.editor import renderer
from captioner.editor.elements import (
    BackgroundStyle,
    ImageFilters,
    ShadowStyle,
    StrokeStyle,
    TextAlign,
    TextElement,
)
from captioner.editor.renderer import (
    RenderSurface,
    _image_to_array,
    apply_filters,
    build_text_path,
    parse_color,
    render,
    render_to_image,
    wrap_text,
)


def solid_image(color, width=120, height=80):
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(color)
    return image


# ─── Word Wrap ───────────────────────────────────────────────────────────────

def test_wrap_packs_words_greedily():
    assert wrap_text("aaa bbb ccc", 10, len) == ["aaa bbb", "ccc"]


def test_wrap_keeps_long_word_on_its_own_line():
    word = "supercalifragilistic"
    assert wrap_text(f"hi {word} yo", 5, len) == ["hi", word, "yo"]


def test_wrap_honours_explicit_newlines():
    assert wrap_text("a\n\nb", 100, len) == ["a", "", "b"]


def test_wrap_empty_text_gives_one_empty_line():
    assert wrap_text("", 100, len) == [""]


# ─── Colours ─────────────────────────────────────────────────────────────────

def test_parse_rgba_function():
    color = parse_color("rgba(0, 0, 0, 0.5)")
    assert (color.red(), color.green(), color.blue()) == (0, 0, 0)
    assert abs(color.alphaF() - 0.5) < 0.01


def test_parse_hex_and_invalid(caplog):
    assert parse_color("#FF0000") == QColor(255, 0, 0)
    assert parse_color("rgb(10,20,30)") == QColor(10, 20, 30)
    with caplog.at_level("WARNING", logger="captioner.editor.renderer"):
        assert parse_color("not a colour") == QColor(0, 0, 0)
    assert "Invalid colour" in caplog.text


# ─── Filters ─────────────────────────────────────────────────────────────────

def test_identity_filters_return_image_unchanged():
    image = solid_image(QColor(200, 10, 10))
    assert apply_filters(image, ImageFilters()) is image


def test_full_grayscale_equalises_channels():
    image = solid_image(QColor(255, 0, 0))
    result = apply_filters(image, ImageFilters(grayscale=100))
    pixel = result.pixelColor(5, 5)
    assert pixel.red() == pixel.green() == pixel.blue()
    assert pixel.red() == 54


def test_zero_brightness_is_black_and_keeps_alpha():
    image = solid_image(QColor(90, 160, 220))
    result = apply_filters(image, ImageFilters(brightness=0))
    pixel = result.pixelColor(5, 5)
    assert (pixel.red(), pixel.green(), pixel.blue()) == (0, 0, 0)
    assert pixel.alpha() == 255


def test_filters_do_not_change_size():
    image = solid_image(QColor(90, 160, 220), 33, 17)
    result = apply_filters(image, ImageFilters(sepia=60, contrast=150))
    assert (result.width(), result.height()) == (33, 17)


# ─── Render ──────────────────────────────────────────────────────────────────

def elements():
    return (
        TextElement(id="a", text="Hello world", x=10, y=10, width=100, height=30, size=16),
        TextElement(id="b", text="", x=20, y=40, width=60, height=20,
                    bg_color=BackgroundStyle(enabled=True, color="#00FF00")),
    )


def test_surface_matches_image_resolution(base_image):
    surface = RenderSurface()
    render(surface, base_image, ImageFilters(), elements())
    assert surface.size == (800, 600)


def test_render_without_image_does_nothing():
    surface = RenderSurface()
    render(surface, None, ImageFilters(), elements(), active_id="a")
    assert surface.image.isNull()


def test_render_is_idempotent(base_image):
    surface = RenderSurface()
    render(surface, base_image, ImageFilters(sepia=40), elements(), active_id="a")
    first = surface.image.copy()
    render(surface, base_image, ImageFilters(sepia=40), elements(), active_id="a")
    assert surface.image == first


def test_background_is_drawn_behind_text(base_image):
    surface = RenderSurface()
    render(surface, base_image, ImageFilters(), elements())
    pixel = surface.image.pixelColor(40, 45)
    assert (pixel.red(), pixel.green(), pixel.blue()) == (0, 255, 0)


def test_export_never_contains_selection(base_image):
    exported = render_to_image(base_image, ImageFilters(), elements())

    plain = RenderSurface()
    render(plain, base_image, ImageFilters(), elements())
    selected = RenderSurface()
    render(selected, base_image, ImageFilters(), elements(), active_id="a")

    assert exported == plain.image
    assert exported != selected.image


def test_export_without_image_is_null():
    assert render_to_image(None, ImageFilters(), ()).isNull()


# ─── Element Drawing ─────────────────────────────────────────────────────────

NO_SHADOW = ShadowStyle(enabled=False)


def rgb(image):
    return _image_to_array(image, QImage.Format.Format_RGBA8888)[:, :, :3].astype(int)


def dark_image():
    return solid_image(QColor(60, 60, 60), 600, 300)


def test_rotation_stays_inside_its_element(base_image):
    rotated = TextElement(
        id="r", text="", x=100, y=100, width=200, height=48, size=40, rotation=90,
        shadow=NO_SHADOW, bg_color=BackgroundStyle(enabled=True, color="#FF0000"),
    )
    upright = TextElement(
        id="u", text="", x=400, y=300, width=100, height=48, size=40,
        shadow=NO_SHADOW, bg_color=BackgroundStyle(enabled=True, color="#00FF00"),
    )
    image = render_to_image(base_image, ImageFilters(), (rotated, upright))

    # Rotated 90 degrees about (200, 124): the box now spans x 176..224, y 24..224
    assert image.pixelColor(200, 40) == QColor(255, 0, 0)
    assert image.pixelColor(110, 124) == base_image.pixelColor(110, 124)
    # The next element is drawn unrotated
    assert image.pixelColor(405, 305) == QColor(0, 255, 0)
    assert image.pixelColor(495, 340) == QColor(0, 255, 0)


def test_align_anchors_line_inside_box():
    font = QFont("Roboto")
    font.setPixelSize(20)
    x, width = 50.0, 400.0

    def bounds(align):
        element = TextElement(text="MMMM", x=x, y=10, width=width, size=20, align=align)
        return build_text_path(element, ["MMMM"], font).boundingRect()

    left = bounds(TextAlign.LEFT)
    right = bounds(TextAlign.RIGHT)
    center = bounds(TextAlign.CENTER)

    assert x - 1 <= left.left() <= x + 5
    assert x + width - 5 <= right.right() <= x + width + 1
    assert abs(center.center().x() - (x + width / 2)) < 3


def test_left_and_right_text_land_at_their_edges():
    def ink(align):
        element = TextElement(
            text="MMM", x=20, y=20, width=560, height=60, size=40, align=align,
            shadow=NO_SHADOW,
        )
        pixels = rgb(render_to_image(dark_image(), ImageFilters(), (element,)))
        box = pixels[20:90, 20:580].sum(axis=2) > 400
        quarter = box.shape[1] // 4
        return box[:, :quarter].sum(), box[:, -quarter:].sum()

    left_side, right_side = ink(TextAlign.LEFT)
    assert left_side > 0 and right_side == 0

    left_side, right_side = ink(TextAlign.RIGHT)
    assert left_side == 0 and right_side > 0


def test_stroke_is_drawn_under_the_fill():
    def draw(stroke_enabled):
        element = TextElement(
            text="HOLD", x=20, y=20, width=560, height=100, size=80,
            shadow=NO_SHADOW,
            stroke=StrokeStyle(enabled=stroke_enabled, color="#FF0000", width=6),
        )
        return rgb(render_to_image(dark_image(), ImageFilters(), (element,)))

    plain = draw(False)
    stroked = draw(True)

    def red(p):
        return ((p[:, :, 0] > 200) & (p[:, :, 1] < 80)).sum()

    def white(p):
        return (p.min(axis=2) > 240).sum()

    assert red(plain) == 0
    assert red(stroked) > 0
    # The fill covers the inner half of the outline
    assert white(stroked) >= 0.9 * white(plain)


def test_shadow_only_when_enabled():
    def draw(enabled):
        element = TextElement(
            text="HOLD", x=20, y=20, width=560, height=100, size=80,
            shadow=ShadowStyle(enabled=enabled, color="#FF0000", blur=0,
                               offset_x=12, offset_y=12),
        )
        return rgb(render_to_image(dark_image(), ImageFilters(), (element,)))

    def red(p):
        return ((p[:, :, 0] > 200) & (p[:, :, 1] < 80)).sum()

    assert red(draw(False)) == 0
    assert red(draw(True)) > 0


def test_filtered_base_is_reused_between_renders(base_image, monkeypatch):
    calls = []
    real = renderer.apply_filters

    def counting(image, filters):
        calls.append(filters)
        return real(image, filters)

    monkeypatch.setattr(renderer, "apply_filters", counting)
    surface = RenderSurface()
    filters = ImageFilters(sepia=30)

    render(surface, base_image, filters, elements())
    render(surface, base_image, filters, elements(), active_id="a")
    assert len(calls) == 1

    render(surface, base_image, ImageFilters(sepia=31), elements())
    assert len(calls) == 2
