"""In-memory image file handle and id helpers."""

import math
import time
import uuid
from dataclasses import dataclass, field


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class ImageFile:
    """User-supplied image bytes with the metadata a browser File carries."""

    name: str
    content_type: str
    data: bytes = b""
    last_modified: int = field(default_factory=now_ms)  # epoch milliseconds

    @property
    def size(self) -> int:
        """Byte length of the file contents."""
        return len(self.data)

    @property
    def type(self) -> str:
        """MIME type, named like the browser File attribute."""
        return self.content_type


def generate_image_id() -> str:
    """Generate a unique image id such as ``img_1718000000000_3f9a1c2b7``."""
    return f"img_{now_ms()}_{uuid.uuid4().hex[:9]}"


def format_file_size(size: int) -> str:
    """Format a byte count for display."""
    if size == 0:
        return "0 Bytes"

    k = 1024
    sizes = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size, k))), len(sizes) - 1)
    value = round(size / math.pow(k, i), 2)
    # Drop trailing zeros: 1.50 -> 1.5, 2.00 -> 2
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {sizes[i]}"
