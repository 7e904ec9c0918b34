"""Image reference intake.

Images are not stored anywhere: inline ``data:image/...`` payloads and remote
URLs are validated and handed back unchanged for the client to attach to a
listing.
"""

from __future__ import annotations

from typing import List, Sequence

from ..errors import InvalidInputError

_ACCEPTED_PREFIXES = ("data:image/", "http://", "https://")


def store_images(images: Sequence[str]) -> List[str]:
    if not images:
        raise InvalidInputError("No images provided")
    urls: List[str] = []
    for position, image in enumerate(images):
        if not isinstance(image, str) or not image.startswith(_ACCEPTED_PREFIXES):
            raise InvalidInputError(f"Unsupported image reference at position {position}")
        urls.append(image)
    return urls
