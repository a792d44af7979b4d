from __future__ import annotations

from typing import Tuple
import base64
import io

from PIL import Image, ImageOps

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff")


def is_image_filename(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


def resize_image_bytes(data: bytes, max_size: int, quality: int) -> Tuple[bytes, int, int]:
    """Re-encode image bytes as JPEG with the longest side at most ``max_size``."""
    with Image.open(io.BytesIO(data)) as im:
        im = ImageOps.exif_transpose(im)
        im = im.convert("RGB")
        w, h = im.size
        scale = min(1.0, float(max_size) / max(w, h))
        if scale < 1.0:
            new_size = (max(1, int(w * scale)), max(1, int(h * scale)))
            im = im.resize(new_size, Image.LANCZOS)
        final_w, final_h = im.size
        buf = io.BytesIO()
        try:
            im.save(buf, format="JPEG", quality=quality, optimize=True)
        except OSError:
            buf = io.BytesIO()
            im.save(buf, format="JPEG", quality=min(quality, 95), optimize=False)
        out = buf.getvalue()
        if not out:
            raise RuntimeError("resize resulted in empty bytes")
        return out, final_w, final_h


def image_bytes_to_data_url(jpeg_bytes: bytes) -> str:
    b64 = base64.b64encode(jpeg_bytes).decode("ascii")
    return f"data:image/jpeg;base64,{b64}"


def load_image_as_data_url(path: str, max_size: int, quality: int) -> str:
    """Open, shrink and inline a local image so the API can see it without hosting."""
    with open(path, "rb") as f:
        data = f.read()
    jpeg, _w, _h = resize_image_bytes(data, max_size, quality)
    return image_bytes_to_data_url(jpeg)
