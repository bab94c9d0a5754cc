"""Request decoding, response framing and the per-request adapter."""
from areacheck.protocol.adapter import ProtocolAdapter
from areacheck.protocol.codec import (
    PointFields,
    RequestError,
    decode_point_fields,
    mint_session_id,
    normalize_decimal,
    parse_number,
    parse_query,
)
from areacheck.protocol.response import (
    encode_response,
    error_response,
    success_response,
)

__all__ = [
    "ProtocolAdapter",
    "PointFields",
    "RequestError",
    "decode_point_fields",
    "mint_session_id",
    "normalize_decimal",
    "parse_number",
    "parse_query",
    "encode_response",
    "error_response",
    "success_response",
]
