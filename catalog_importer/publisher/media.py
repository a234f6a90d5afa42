"""
Image re-encoding for staged uploads.

Source images are always re-encoded to JPEG (some source formats are
not processed reliably by the destination platform) and bounded to a
maximum dimension without upscaling.
"""

import io

from PIL import Image, ImageOps

JPEG_MIME_TYPE = "image/jpeg"
UPLOAD_FILENAME = "product-image.jpg"


def reencode_image(data: bytes, max_dimension: int = 2000, quality: int = 85) -> bytes:
    """
    Re-encode image bytes as a bounded JPEG.

    Args:
        data: Source image bytes (any format Pillow can read)
        max_dimension: Longest side after resizing; smaller images are not enlarged
        quality: JPEG quality (1-95)

    Returns:
        JPEG bytes

    Raises:
        OSError: If the data is not a readable image
    """
    with Image.open(io.BytesIO(data)) as image:
        image = ImageOps.exif_transpose(image)

        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            # JPEG has no alpha channel: flatten onto white
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality, optimize=True)
        return buffer.getvalue()
