from fastapi import Request

from listquery.parser import parse_list_query
from listquery.schemas.config import ListQueryConfig
from listquery.schemas.query import ParsedListQuery


class ListQueryParams:
    """List-endpoint query parameters parsed against a ListQueryConfig.

    Usage:
        features_query = ListQueryParams(feature_list_config)

        @router.get("")
        async def list_features(query: ParsedListQuery = Depends(features_query)):
            ...
    """

    def __init__(self, config: ListQueryConfig):
        self.config = config

    def __call__(self, request: Request) -> ParsedListQuery:
        return parse_list_query(request, self.config)
