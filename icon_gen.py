"""Generate the date field's trigger icon (small PIL Image, in-memory)."""

from datetime import date

from PIL import Image, ImageDraw, ImageFont

ACCENT = "#0078D4"

_FONT_CANDIDATES = ("segoeuib.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf")


def _load_font(size: int):
    for name in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default()


def create_icon_image(day: date | None = None, size: int = 20) -> Image.Image:
    """Return a size×size RGBA calendar glyph with the day number in its body."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    if day is None:
        day = date.today()
    text = str(day.day)

    edge = size - 1
    header_h = max(3, size // 4)
    draw.rectangle((0, 1, edge, edge), fill="white", outline="#333333")
    draw.rectangle((0, 1, edge, header_h), fill=ACCENT, outline="#333333")
    # binder rings
    ring_w = max(1, size // 10)
    for x in (size // 4, size - size // 4 - ring_w):
        draw.rectangle((x, 0, x + ring_w, header_h // 2 + 1), fill="#333333")

    body_top = header_h + 1
    body_h = edge - body_top

    # Largest font whose glyphs fit the body area
    font_size = body_h
    font = _load_font(font_size)
    while font_size > 4:
        bbox = draw.textbbox((0, 0), text, font=font)
        if bbox[2] - bbox[0] <= size - 4 and bbox[3] - bbox[1] <= body_h - 2:
            break
        font_size -= 1
        font = _load_font(font_size)

    # Centre the visible pixels (compensate for font metric offsets)
    bbox = draw.textbbox((0, 0), text, font=font)
    x = (size - (bbox[2] - bbox[0])) / 2 - bbox[0]
    y = body_top + (body_h - (bbox[3] - bbox[1])) / 2 - bbox[1]
    draw.text((x, y), text, fill="black", font=font)

    return img
