"""
Purpose:
- Sanity-check critical library versions after upgrades.
- Import the exact modules we use and print versions so we can spot drift immediately.
- Build the gateway payload for a 1x1 PNG to confirm the request path works offline.
"""

import sys
from io import BytesIO
import fastapi
import httpx
import PIL
import pydantic
import uvicorn
from PIL import Image
from pydantic_settings import BaseSettings

from captionai.core.settings import settings
from captionai.gateway.codec import build_payload
from captionai.gateway.schema import GenerationRequest

print("python", sys.version)
print("fastapi", fastapi.__version__)
print("uvicorn", uvicorn.__version__)
print("httpx", httpx.__version__)
print("pydantic", pydantic.__version__)
print("Pillow", PIL.__version__)
print("pydantic-settings", BaseSettings.__module__.split(".")[0])  # presence check

buf = BytesIO()
Image.new("RGB", (1, 1)).save(buf, format="PNG")
payload = build_payload(GenerationRequest.from_upload(buf.getvalue(), "image/png"), settings.gemini_temperature)
print("payload_parts", len(payload["contents"][0]["parts"]))
print("gemini_key_present", bool(settings.gemini_api_key))
print("OK")
