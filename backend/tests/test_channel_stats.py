"""
Unit tests for channel dashboard rollups.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from videohub.analytics.channel_stats import ChannelStatsReducer
from videohub.exceptions import NotFound
from videohub.services.relationship_store import RelationshipStore, EdgeKind


@pytest.mark.unit
class TestChannelStats:
    """Subscriber, video, view and like totals."""

    def test_empty_channel_is_all_zero(self, test_db: Session, test_user):
        stats = ChannelStatsReducer(test_db).channel_stats(test_user.id)

        assert stats.subscribers_count == 0
        assert stats.videos_count == 0
        assert stats.views_count == 0
        assert stats.likes_count == 0

    def test_totals(self, test_db: Session, make_user, make_video, make_comment):
        owner = make_user("owner")
        fans = [make_user(f"fan{i}") for i in range(3)]
        v1 = make_video(owner, "one", views=100)
        v2 = make_video(owner, "two", views=25)
        elsewhere = make_video(fans[0], "not counted", views=999)
        comment = make_comment(v1, fans[0])

        store = RelationshipStore(test_db)
        for fan in fans:
            store.create(EdgeKind.SUBSCRIPTION, owner.id, fan.id)
            store.create(EdgeKind.VIDEO_LIKE, v1.id, fan.id)
        store.create(EdgeKind.VIDEO_LIKE, v2.id, fans[0].id)
        store.create(EdgeKind.VIDEO_LIKE, elsewhere.id, owner.id)
        # Comment likes are not video likes
        store.create(EdgeKind.COMMENT_LIKE, comment.id, fans[1].id)

        stats = ChannelStatsReducer(test_db).channel_stats(owner.id)

        assert stats.subscribers_count == 3
        assert stats.videos_count == 2
        assert stats.views_count == 125
        assert stats.likes_count == 4

    def test_unpublished_videos_are_included(self, test_db: Session, test_user, make_video):
        make_video(test_user, "public", views=5)
        make_video(test_user, "draft", views=7, is_published=False)

        stats = ChannelStatsReducer(test_db).channel_stats(test_user.id)

        assert stats.videos_count == 2
        assert stats.views_count == 12

    def test_missing_channel_raises_not_found(self, test_db: Session):
        with pytest.raises(NotFound):
            ChannelStatsReducer(test_db).channel_stats(uuid.uuid4())
