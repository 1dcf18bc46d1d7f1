"""
Unit tests for idempotent like / subscription toggles.
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from videohub.exceptions import InvalidArgument, NotFound
from videohub.models import Like, Subscription
from videohub.models.schemas import ToggleState
from videohub.services.entity_store import EntityKind
from videohub.services.logging_service import app_metrics
from videohub.services.relationship_store import RelationshipStore, EdgeKind
from videohub.services.toggle_service import ToggleEngine


@pytest.mark.unit
class TestToggleLike:
    """Like / unlike flips."""

    def test_toggle_twice_returns_to_original_state(self, test_db: Session, test_video, test_user2):
        engine = ToggleEngine(test_db)

        first = engine.toggle_like(EntityKind.VIDEO, test_video.id, test_user2.id)
        second = engine.toggle_like(EntityKind.VIDEO, test_video.id, test_user2.id)

        assert first == ToggleState.CREATED
        assert second == ToggleState.REMOVED
        assert test_db.query(Like).count() == 0

    def test_toggle_like_on_comment_and_tweet(self, test_db: Session, test_video, make_comment,
                                              make_tweet, test_user, test_user2):
        engine = ToggleEngine(test_db)
        comment = make_comment(test_video, test_user2)
        tweet = make_tweet(test_user2)

        assert engine.toggle_like(EntityKind.COMMENT, comment.id, test_user.id) == ToggleState.CREATED
        assert engine.toggle_like(EntityKind.TWEET, tweet.id, test_user.id) == ToggleState.CREATED

        store = RelationshipStore(test_db)
        assert store.exists(EdgeKind.COMMENT_LIKE, comment.id, test_user.id)
        assert store.exists(EdgeKind.TWEET_LIKE, tweet.id, test_user.id)

    def test_self_like_is_allowed(self, test_db: Session, test_video, test_user):
        engine = ToggleEngine(test_db)

        assert engine.toggle_like(EntityKind.VIDEO, test_video.id, test_user.id) == ToggleState.CREATED

    def test_missing_subject_raises_not_found(self, test_db: Session, test_user):
        engine = ToggleEngine(test_db)

        with pytest.raises(NotFound):
            engine.toggle_like(EntityKind.VIDEO, uuid.uuid4(), test_user.id)

        assert test_db.query(Like).count() == 0

    def test_subject_of_wrong_kind_raises_not_found(self, test_db: Session, test_video, test_user2):
        engine = ToggleEngine(test_db)

        # A video id is not a comment id
        with pytest.raises(NotFound):
            engine.toggle_like(EntityKind.COMMENT, test_video.id, test_user2.id)

    def test_channel_is_not_likeable(self, test_db: Session, test_user, test_user2):
        engine = ToggleEngine(test_db)

        with pytest.raises(InvalidArgument):
            engine.toggle_like(EntityKind.CHANNEL, test_user.id, test_user2.id)

    def test_toggles_are_counted(self, test_db: Session, test_video, test_user2):
        engine = ToggleEngine(test_db)
        engine.toggle_like(EntityKind.VIDEO, test_video.id, test_user2.id)
        engine.toggle_like(EntityKind.VIDEO, test_video.id, test_user2.id)

        toggles = app_metrics.get_metrics()["toggles"]
        assert toggles["created"] == 1
        assert toggles["removed"] == 1
        assert toggles["by_edge_kind"]["video_like"] == {"created": 1, "removed": 1}


@pytest.mark.unit
class TestToggleSubscription:
    """Subscribe / unsubscribe flips."""

    def test_subscribe_then_unsubscribe(self, test_db: Session, test_user, test_user2):
        engine = ToggleEngine(test_db)

        assert engine.toggle_subscription(test_user.id, test_user2.id) == ToggleState.CREATED
        assert test_db.query(Subscription).count() == 1
        assert engine.toggle_subscription(test_user.id, test_user2.id) == ToggleState.REMOVED
        assert test_db.query(Subscription).count() == 0

    def test_self_subscription_is_allowed(self, test_db: Session, test_user):
        engine = ToggleEngine(test_db)

        assert engine.toggle_subscription(test_user.id, test_user.id) == ToggleState.CREATED

    def test_unknown_channel_raises_not_found(self, test_db: Session, test_user):
        with pytest.raises(NotFound):
            ToggleEngine(test_db).toggle_subscription(uuid.uuid4(), test_user.id)


@pytest.mark.unit
class TestToggleRace:
    """A create that loses a race converges on a single consistent state."""

    def test_conflicting_create_becomes_delete(self, test_db: Session, test_video, test_user2):
        # Another request created the edge after our existence check
        RelationshipStore(test_db).create(EdgeKind.VIDEO_LIKE, test_video.id, test_user2.id)

        with patch.object(RelationshipStore, "exists", return_value=False):
            state = ToggleEngine(test_db).toggle_like(EntityKind.VIDEO, test_video.id, test_user2.id)

        assert state == ToggleState.REMOVED
        assert test_db.query(Like).count() == 0
        assert app_metrics.get_metrics()["toggles"]["conflicts_absorbed"] == 1

    def test_never_more_than_one_edge(self, test_db: Session, test_user, test_user2):
        engine = ToggleEngine(test_db)

        with patch.object(RelationshipStore, "exists", return_value=False):
            states = [engine.toggle_subscription(test_user.id, test_user2.id) for _ in range(3)]

        assert states == [ToggleState.CREATED, ToggleState.REMOVED, ToggleState.CREATED]
        assert test_db.query(Subscription).count() == 1
