import random
import hashlib
from io import BytesIO
from PIL import Image, ImageFilter


def obscure_player_photo(image_bytes: bytes, reveal: int, *, seed_key: str) -> bytes:
    """
    Devuelve la foto del jugador procesada según el porcentaje revelado (0..100).
    - reveal >= 100 => foto original (re-codificada como PNG).
    - Determinístico por seed_key + reveal: la misma foto para todos los usuarios en el mismo nivel.
    """
    img = Image.open(BytesIO(image_bytes))
    if img.mode != "RGBA":
        img = img.convert("RGBA")

    if reveal >= 100:
        out = BytesIO()
        img.save(out, format="PNG")
        return out.getvalue()

    reveal = max(0, reveal)
    seed_hash = int(hashlib.sha256(f"{seed_key}:{reveal}".encode()).hexdigest(), 16)
    rng = random.Random(seed_hash)

    # 1) Pixelado (downscale -> upscale): de 12px a ~200px de ancho
    w, h = img.size
    target_width = max(1, min(w, 12 + int(reveal * 1.9)))
    target_h = max(1, int(target_width * h / w))
    img_small = img.resize((target_width, target_h), Image.Resampling.BILINEAR)
    img_out = img_small.resize((w, h), Image.Resampling.NEAREST)

    # 2) Blur: 12px sin intentos fallidos, 0 cerca del final
    blur_radius = (100 - reveal) * 0.12
    if blur_radius > 0:
        img_out = img_out.filter(ImageFilter.GaussianBlur(blur_radius))

    # 3) Leve rotación para que no se pueda comparar píxel a píxel con la foto pública
    angle = rng.uniform(-2.0, 2.0)
    img_out = img_out.rotate(angle, resample=Image.Resampling.BILINEAR, fillcolor=(200, 200, 200, 255))

    out = BytesIO()
    img_out.save(out, format="PNG")
    return out.getvalue()
