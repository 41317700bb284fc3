import re

from aws_lambda_powertools import Logger

from errors import InvalidPath
from models import KeyGrammar, ParsedKey

logger = Logger()

NAMESPACE_TAG = "resize"

# example: '50x60-img123'
_PLAIN_SEGMENT = re.compile(r"([0-9]+)x([0-9]+)-(.+)")
# example: '50x60-img123.jpg'
_EXTENSION_SEGMENT = re.compile(r"([0-9]+)x([0-9]+)-(.+)\.([^.]+)")

_SEGMENT_PATTERNS = {
    KeyGrammar.PLAIN: _PLAIN_SEGMENT,
    KeyGrammar.EXTENSION: _EXTENSION_SEGMENT,
}


def parse_key(key: str, mode: KeyGrammar = KeyGrammar.PLAIN) -> ParsedKey:
    """
    Split a request key into its namespace tag, middle path, size and asset id.

    Args:
        key: e.g. 'resize/75c06d3b/private/avatar/50x60-img123'
        mode: grammar used by this deployment

    Returns:
        ParsedKey for the request

    Raises:
        InvalidPath: if the key does not match the grammar
    """
    # example: ['resize', '75c06d3b', 'private', 'avatar', '50x60-img123']
    segments = (key or "").split("/")
    if len(segments) < 2 or segments[0] != NAMESPACE_TAG:
        logger.debug("Key is missing the resize namespace", extra={"key": key})
        raise InvalidPath(key)

    match = _SEGMENT_PATTERNS[mode].fullmatch(segments[-1])
    if match is None:
        logger.debug(
            "Trailing segment did not match", extra={"key": key, "grammar": mode.value}
        )
        raise InvalidPath(key)

    width = int(match.group(1), 10)
    height = int(match.group(2), 10)
    if width == 0 or height == 0:
        raise InvalidPath(key)

    return ParsedKey(
        namespace_tag=segments[0],
        middle_path=tuple(segments[1:-1]),
        width=width,
        height=height,
        asset_id=match.group(3),
        extension=match.group(4) if mode is KeyGrammar.EXTENSION else None,
    )
