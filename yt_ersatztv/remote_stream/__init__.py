"""Remote stream document generation for ErsatzTV."""

from yt_ersatztv.remote_stream.document import GenerationOptions, generate_document
from yt_ersatztv.remote_stream.duration import (
    ApiDuration,
    CustomDuration,
    DurationPolicy,
    NoDuration,
    PaddedApiDuration,
    pad_to_interval,
    parse_iso8601_duration,
    resolve_duration,
)
from yt_ersatztv.remote_stream.filename import document_filename, format_filename
from yt_ersatztv.remote_stream.scalars import (
    block_scalar,
    escape_quoted,
    plain_scalar,
    quoted_scalar,
)
from yt_ersatztv.remote_stream.thumbnail import select_thumbnail_url, thumbnail_extension

__all__ = [
    "ApiDuration",
    "CustomDuration",
    "DurationPolicy",
    "GenerationOptions",
    "NoDuration",
    "PaddedApiDuration",
    "block_scalar",
    "document_filename",
    "escape_quoted",
    "format_filename",
    "generate_document",
    "pad_to_interval",
    "parse_iso8601_duration",
    "plain_scalar",
    "quoted_scalar",
    "resolve_duration",
    "select_thumbnail_url",
    "thumbnail_extension",
]
