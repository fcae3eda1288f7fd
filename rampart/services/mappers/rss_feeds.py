"""RSS feed subscription lists (Category, RSS URL and an optional Name)."""

import re

from rampart.models.rss_feed import RssFeed
from rampart.schemas.records import RssFeedRecord
from rampart.services.errors import RowMappingError
from rampart.services.headers import BoundRow, FieldSpec
from rampart.services.mappers.base import MapContext, MappedRow, RowMapper

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def feed_name_from_url(url: str) -> str:
    """Host part of the URL ('https://example.com/feed.xml' -> 'example.com')."""
    return _SCHEME.sub("", url).split("/")[0]


class RssFeedMapper(RowMapper):
    """
    One feed per URL. A URL already on file is reconciled like any other
    record: unchanged when name and category match, updated otherwise.
    """

    profile = "rss-feed-csv"
    model = RssFeed
    key_column = "url"

    FIELDS = (
        FieldSpec("category", ("category",)),
        FieldSpec("url", ("rss url", "url", "feed url")),
        FieldSpec("name", ("name", "feed name")),
    )

    MEANINGFUL_FIELDS = ("name", "category")

    def map_row(self, row: BoundRow, context: MapContext) -> MappedRow:
        category = row.get("category")
        url = row.get("url")
        if not category or not url:
            raise RowMappingError("Missing category or URL")
        record = RssFeedRecord(
            name=row.get("name") or feed_name_from_url(url),
            category=category,
            report_date=context.report_date,
        )
        return MappedRow(key=url, record=record)
