from .backends import build_request, extract_error, new_decoder, parse_stream_chunk
from .client import ProviderClient
