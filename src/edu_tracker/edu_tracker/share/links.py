from __future__ import annotations

import io
from typing import Mapping, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

import qrcode

from ..sync.schema import RemoteConfig

BIN_ID_PARAM = "binId"
API_KEY_PARAM = "apiKey"


def build_share_url(base_url: str, config: Optional[RemoteConfig]) -> str:
    """App URL without query, carrying the bin credentials when configured."""
    parts = urlsplit(base_url)
    bare = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    if not config:
        return bare
    query = urlencode({BIN_ID_PARAM: config.bin_id, API_KEY_PARAM: config.api_key})
    return f"{bare}?{query}"


def credentials_from_query(args: Mapping[str, str]) -> Optional[RemoteConfig]:
    return RemoteConfig.from_dict({"binId": args.get(BIN_ID_PARAM), "apiKey": args.get(API_KEY_PARAM)})


def render_qr_png(data: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf
