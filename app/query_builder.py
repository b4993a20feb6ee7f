TIMESTAMP_FIELD = '@timestamp'
DATE_FORMAT = 'strict_date_optional_time'
NAMESPACE_FIELD = 'kubernetes.namespace_name'
CONTAINER_FIELD = 'kubernetes.container_name'
HIGHLIGHT_PRE_TAG = '@kibana-highlighted-field@'
HIGHLIGHT_POST_TAG = '@/kibana-highlighted-field@'
MAX_FRAGMENT_SIZE = 2147483647
MATCH_ALL = '*'


def keyword_filters(keyword: str | None) -> list[dict]:
    # multi_match has no wildcard support, so '*' means no keyword filter
    if not keyword or not keyword.strip() or keyword.strip() == MATCH_ALL:
        return []
    return [
        {'bool': {'filter': [{'multi_match': {
            'type': 'phrase',
            'query': token,
            'lenient': True,
        }}]}}
        for token in keyword.split()
    ]


def time_range_filter(start: str, end: str) -> dict:
    return {'range': {TIMESTAMP_FIELD: {
        'gte': start,
        'lte': end,
        'format': DATE_FORMAT,
    }}}


def match_filter(field: str, value: str | None) -> dict | None:
    if not value or not value.strip():
        return None
    return {'match': {field: value.strip()}}


def build_query(
    keyword: str | None,
    start: str,
    end: str,
    namespace: str | None = None,
    container: str | None = None,
) -> dict:
    filters = keyword_filters(keyword)
    filters.append(time_range_filter(start, end))
    for scope in (
        match_filter(NAMESPACE_FIELD, namespace),
        match_filter(CONTAINER_FIELD, container),
    ):
        if scope is not None:
            filters.append(scope)
    return {'bool': {
        'must': [],
        'filter': filters,
        'should': [],
        'must_not': [],
    }}


def build_search_body(
    keyword: str | None,
    start: str,
    end: str,
    size: int,
    namespace: str | None = None,
    container: str | None = None,
) -> dict:
    return {
        'size': size,
        'sort': [{TIMESTAMP_FIELD: {
            'order': 'desc', 'unmapped_type': 'boolean'}}],
        'version': True,
        'fields': [
            {'field': '*', 'include_unmapped': 'true'},
            {'field': TIMESTAMP_FIELD, 'format': DATE_FORMAT},
        ],
        'script_fields': {},
        'stored_fields': ['*'],
        'runtime_mappings': {},
        '_source': False,
        'query': build_query(keyword, start, end, namespace, container),
        'highlight': {
            'pre_tags': [HIGHLIGHT_PRE_TAG],
            'post_tags': [HIGHLIGHT_POST_TAG],
            'fields': {'*': {}},
            'fragment_size': MAX_FRAGMENT_SIZE,
        },
    }


def build_search_request(
    keyword: str | None,
    start: str,
    end: str,
    index: str,
    size: int,
    namespace: str | None = None,
    container: str | None = None,
) -> dict:
    """Wrap one search into the Kibana bsearch batch envelope."""
    body = build_search_body(keyword, start, end, size, namespace, container)
    return {'batch': [{
        'request': {'params': {'index': index, 'body': body}},
        'options': {
            'strategy': 'ese',
            'isRestore': False,
            'isStored': False,
        },
    }]}
