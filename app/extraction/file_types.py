IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "webp"})

TEXT_EXTENSIONS = frozenset({"txt", "md", "csv", "tsv", "json", "xml", "html", "htm", "log"})

OPAQUE_BINARY_EXTENSIONS = frozenset(
    {"doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "zip", "rtf"}
) | IMAGE_EXTENSIONS

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
    "htm": "text/html",
}


def file_extension(file_name: str) -> str:
    """Lowercase extension without the dot; empty string when there is none."""
    name = file_name.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def is_image(file_name: str) -> bool:
    return file_extension(file_name) in IMAGE_EXTENSIONS


def guess_mime_type(file_name: str) -> str:
    return _MIME_TYPES.get(file_extension(file_name), "application/octet-stream")
