import json
import logging

from app.errors import ParseError
from app.schemas import ParsedHits

logger = logging.getLogger(__name__)

MISSING = object()

# bsearch envelopes seen across Kibana versions, tried in this order
ENVELOPES = (
    (0, 'result', 'rawResponse'),
    ('rawResponse',),
    ('result', 'rawResponse'),
)


def lookup(document, path: tuple):
    node = document
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return MISSING
        elif not isinstance(node, dict) or key not in node:
            return MISSING
        node = node[key]
    return node


def first_present(document, suffix: tuple):
    for envelope in ENVELOPES:
        node = lookup(document, envelope + suffix)
        if node is not MISSING:
            return node
    return MISSING


def read_total(node, fallback: int) -> int:
    if isinstance(node, dict):
        node = node.get('value', fallback)
    if isinstance(node, bool) or not isinstance(node, (int, float, str)):
        return fallback
    try:
        return int(node)
    except ValueError:
        return fallback


def parse_search_response(raw: str) -> ParsedHits:
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f'invalid JSON: {e}', raw)

    if first_present(document, ()) is MISSING:
        raise ParseError('unrecognized response envelope', raw)

    hits = first_present(document, ('hits', 'hits'))
    if hits is MISSING or hits is None:
        logger.debug('response envelope carries no hit array')
        return ParsedHits(hits=[], total=0)
    if not isinstance(hits, list):
        raise ParseError(
            f'hits.hits is {type(hits).__name__}, expected array', raw)
    if not hits:
        return ParsedHits(hits=[], total=0)

    documents = [hit for hit in hits if isinstance(hit, dict)]
    total = read_total(first_present(document, ('hits', 'total')), len(hits))
    return ParsedHits(hits=documents, total=total)
