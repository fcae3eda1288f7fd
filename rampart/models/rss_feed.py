"""ORM model for RSS feed subscriptions imported from CSV."""

from sqlalchemy import Boolean, Column, String

from rampart.models.base import Base, SourceRecordMixin


class RssFeed(SourceRecordMixin, Base):
    """A feed is identified by its URL; re-importing the same URL never adds a second feed."""

    __tablename__ = "rss_feeds"

    url = Column(String(2048), primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    active = Column(Boolean, nullable=False, default=True)
