"""A chainable HTTP request client with concurrent batches."""

from .batch import BatchExecutor
from .client import Client
from .config import DEFAULT_HEADERS, DEFAULT_OPTIONS, ClientConfig, TransportOptions
from .errors import (
    ClientError,
    ConfigurationError,
    DecodeError,
    ErrorCode,
    TransportError,
    UnsupportedMethodError,
)
from .executor import Executor
from .multipart import build_multipart
from .request import RequestConfig
from .types import NO_VALUE, AcceptFormat, BatchItem, HttpMethod, ResponseResult, TransportInfo
from .urlcodec import build_query, encode_url

__all__ = [
    "DEFAULT_HEADERS",
    "DEFAULT_OPTIONS",
    "NO_VALUE",
    "AcceptFormat",
    "BatchExecutor",
    "BatchItem",
    "Client",
    "ClientConfig",
    "ClientError",
    "ConfigurationError",
    "DecodeError",
    "ErrorCode",
    "Executor",
    "HttpMethod",
    "RequestConfig",
    "ResponseResult",
    "TransportError",
    "TransportInfo",
    "TransportOptions",
    "UnsupportedMethodError",
    "build_multipart",
    "build_query",
    "encode_url",
]
__version__ = "0.1.0"
