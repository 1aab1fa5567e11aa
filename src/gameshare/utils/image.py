"""Image type detection utilities."""

# Magic byte signatures: (pattern(s), offset, length, mime type)
_SIGNATURES: list[tuple[bytes | tuple[bytes, ...], int, int, str]] = [
    (b"\x89PNG\r\n\x1a\n", 0, 8, "image/png"),
    (b"\xff\xd8\xff", 0, 3, "image/jpeg"),
    ((b"GIF87a", b"GIF89a"), 0, 6, "image/gif"),
    (b"BM", 0, 2, "image/bmp"),
    ((b"II\x2a\x00", b"MM\x00\x2a"), 0, 4, "image/tiff"),
    (b"\x00\x00\x01\x00", 0, 4, "image/x-icon"),
]

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/x-icon": "ico",
}


def detect_mime_type(image_bytes: bytes) -> str:
    """Detect image MIME type from magic bytes.

    The declared content type of an upload is client-controlled, so the bytes
    themselves are checked before anything is stored.

    Args:
        image_bytes: Raw image bytes

    Returns:
        MIME type string (e.g., "image/png"), or "application/octet-stream"
        when the bytes do not match a known image format
    """
    if len(image_bytes) < 12:
        return "application/octet-stream"

    for pattern, offset, length, mime in _SIGNATURES:
        data = image_bytes[offset : offset + length]
        if isinstance(pattern, tuple):
            if data in pattern:
                return mime
        elif data == pattern:
            return mime

    # WebP requires checking two separate regions
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"

    return "application/octet-stream"


def detect_mime_type_with_extension(image_bytes: bytes) -> tuple[str, str]:
    """Detect image MIME type and file extension from magic bytes.

    Returns:
        Tuple of (mime_type, extension), e.g., ("image/png", "png").
        Unknown data maps to ("application/octet-stream", "bin").
    """
    mime_type = detect_mime_type(image_bytes)
    return mime_type, EXTENSIONS.get(mime_type, "bin")
