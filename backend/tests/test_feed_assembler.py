"""
Tests for feed filtering, sorting, pagination and projection.
"""

import uuid
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.exceptions import Forbidden, InvalidArgument, NotFound
from videohub.services.entity_store import EntityKind
from videohub.services.relationship_store import RelationshipStore, EdgeKind
from videohub.services.search_service import SearchCollaborator, SqlTextSearch


@pytest.fixture
def five_videos(test_user, make_video):
    """Five published videos, v0 oldest to v4 newest."""
    return [make_video(test_user, f"v{i}", minutes=i, views=i * 10) for i in range(5)]


def ids(result):
    return [item.id for item in result.items]


@pytest.mark.integration
class TestPagination:
    """1-based pages with correct totals."""

    def test_pages_split_newest_first(self, test_db: Session, five_videos):
        assembler = FeedAssembler(test_db)
        v = five_videos

        pages = [assembler.assemble(page=n, page_size=2) for n in (1, 2, 3)]

        assert [len(p.items) for p in pages] == [2, 2, 1]
        assert ids(pages[0]) == [v[4].id, v[3].id]
        assert ids(pages[1]) == [v[2].id, v[1].id]
        assert ids(pages[2]) == [v[0].id]
        for page in pages:
            assert page.total_items == 5
            assert page.total_pages == 3

    def test_page_past_end_is_empty_with_totals(self, test_db: Session, five_videos):
        result = FeedAssembler(test_db).assemble(page=4, page_size=2)

        assert result.items == []
        assert result.total_items == 5
        assert result.total_pages == 3

    def test_empty_feed(self, test_db: Session):
        result = FeedAssembler(test_db).assemble()

        assert result.items == []
        assert result.total_items == 0
        assert result.total_pages == 0

    def test_string_page_values_are_parsed(self, test_db: Session, five_videos):
        result = FeedAssembler(test_db).assemble(page="2", page_size="2")

        assert result.page == 2
        assert result.page_size == 2
        assert len(result.items) == 2

    @pytest.mark.parametrize("page", [0, -1, "0", "abc", "1.5", "²", True])
    def test_invalid_page_raises(self, test_db: Session, page):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(page=page)

    @pytest.mark.parametrize("page_size", [0, "-3", "ten", "²"])
    def test_invalid_page_size_raises(self, test_db: Session, page_size):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(page_size=page_size)

    def test_page_size_is_clamped(self, test_db: Session, five_videos):
        result = FeedAssembler(test_db, max_page_size=3).assemble(page_size=50)

        assert result.page_size == 3
        assert len(result.items) == 3
        assert result.total_pages == 2

    def test_ties_broken_by_id(self, test_db: Session, test_user, make_video):
        # Identical created_at everywhere
        videos = [make_video(test_user, f"same{i}", minutes=0) for i in range(5)]
        assembler = FeedAssembler(test_db)

        seen = []
        for page in (1, 2, 3):
            seen.extend(ids(assembler.assemble(page=page, page_size=2)))

        assert seen == sorted(video.id for video in videos)
        assert ids(assembler.assemble(page=1, page_size=2)) == seen[:2]


@pytest.mark.integration
class TestSorting:
    """Single-field sorts."""

    def test_sort_by_views_ascending(self, test_db: Session, five_videos):
        result = FeedAssembler(test_db).assemble(sort=SortSpec(field="views", direction="asc"))

        assert [item.views for item in result.items] == [0, 10, 20, 30, 40]

    def test_camel_case_alias(self, test_db: Session, five_videos):
        result = FeedAssembler(test_db).assemble(sort=SortSpec(field="createdAt", direction="asc"))

        assert ids(result)[0] == five_videos[0].id

    def test_unknown_field_raises(self, test_db: Session):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(sort=SortSpec(field="likes"))

    def test_unknown_direction_raises(self, test_db: Session):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(sort=SortSpec(direction="sideways"))

    def test_relevance_without_query_raises(self, test_db: Session):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(sort=SortSpec(field="relevance"))


@pytest.mark.integration
class TestFilters:
    """Owner, publication and video filters."""

    def test_owner_sees_own_unpublished(self, test_db: Session, test_user, test_user2, make_video):
        published = make_video(test_user, "public", minutes=1)
        draft = make_video(test_user, "draft", minutes=2, is_published=False)
        assembler = FeedAssembler(test_db)
        mine = FeedFilter(owner_id=test_user.id)

        assert ids(assembler.assemble(mine, viewer_id=test_user.id)) == [draft.id, published.id]
        assert ids(assembler.assemble(mine, viewer_id=test_user2.id)) == [published.id]
        assert ids(assembler.assemble(mine)) == [published.id]
        assert ids(assembler.assemble(viewer_id=test_user.id)) == [published.id]

    def test_owner_can_filter_by_publication(self, test_db: Session, test_user, make_video):
        make_video(test_user, "public")
        draft = make_video(test_user, "draft", is_published=False)

        result = FeedAssembler(test_db).assemble(
            FeedFilter(owner_id=test_user.id, is_published=False), viewer_id=test_user.id
        )

        assert ids(result) == [draft.id]

    def test_non_owner_cannot_list_unpublished(self, test_db: Session, test_user, test_user2):
        with pytest.raises(Forbidden):
            FeedAssembler(test_db).assemble(
                FeedFilter(owner_id=test_user.id, is_published=False), viewer_id=test_user2.id
            )

    def test_unknown_owner_raises_not_found(self, test_db: Session):
        with pytest.raises(NotFound):
            FeedAssembler(test_db).assemble(FeedFilter(owner_id=uuid.uuid4()))

    def test_comments_of_one_video(self, test_db: Session, test_video, make_video, make_comment,
                                   test_user, test_user2):
        other = make_video(test_user, "other")
        c1 = make_comment(test_video, test_user2, "one", minutes=1)
        c2 = make_comment(test_video, test_user, "two", minutes=2)
        make_comment(other, test_user2, "elsewhere")
        RelationshipStore(test_db).create(EdgeKind.COMMENT_LIKE, c1.id, test_user.id)

        result = FeedAssembler(test_db).assemble(
            FeedFilter(kind=EntityKind.COMMENT, video_id=test_video.id), viewer_id=test_user.id
        )

        assert ids(result) == [c2.id, c1.id]
        assert [item.likes_count for item in result.items] == [0, 1]
        assert [item.is_liked for item in result.items] == [False, True]

    def test_comments_of_missing_video(self, test_db: Session):
        with pytest.raises(NotFound):
            FeedAssembler(test_db).assemble(FeedFilter(kind=EntityKind.COMMENT, video_id=uuid.uuid4()))

    def test_comments_of_unpublished_video_hidden_from_others(self, test_db: Session, test_user, test_user2,
                                                               make_video, make_comment):
        draft = make_video(test_user, "draft", is_published=False)
        make_comment(draft, test_user, "note to self")
        feed_filter = FeedFilter(kind=EntityKind.COMMENT, video_id=draft.id)

        with pytest.raises(NotFound):
            FeedAssembler(test_db).assemble(feed_filter, viewer_id=test_user2.id)
        with pytest.raises(NotFound):
            FeedAssembler(test_db).assemble(feed_filter)

        own = FeedAssembler(test_db).assemble(feed_filter, viewer_id=test_user.id)
        assert own.total_items == 1

    def test_tweets_of_one_user(self, test_db: Session, make_tweet, test_user, test_user2):
        t1 = make_tweet(test_user, "first", minutes=1)
        t2 = make_tweet(test_user, "second", minutes=2)
        make_tweet(test_user2, "not mine")

        result = FeedAssembler(test_db).assemble(FeedFilter(kind=EntityKind.TWEET, owner_id=test_user.id))

        assert ids(result) == [t2.id, t1.id]

    def test_channel_kind_is_not_a_feed(self, test_db: Session):
        with pytest.raises(InvalidArgument):
            FeedAssembler(test_db).assemble(FeedFilter(kind=EntityKind.CHANNEL))


@pytest.mark.integration
class TestSearch:
    """Search collaborator candidates intersected with filters."""

    def test_collaborator_ids_are_intersected(self, test_db: Session, five_videos):
        v = five_videos
        search = Mock(spec=SearchCollaborator)
        search.search.return_value = [v[1].id, v[3].id]

        result = FeedAssembler(test_db, search=search).assemble(FeedFilter(query="anything"))

        assert ids(result) == [v[3].id, v[1].id]
        search.search.assert_called_once()

    def test_relevance_keeps_collaborator_order(self, test_db: Session, five_videos):
        v = five_videos
        search = Mock(spec=SearchCollaborator)
        search.search.return_value = [v[0].id, v[4].id, v[2].id]

        result = FeedAssembler(test_db, search=search).assemble(
            FeedFilter(query="anything"), SortSpec(field="relevance")
        )

        assert ids(result) == [v[0].id, v[4].id, v[2].id]

    def test_no_candidates_means_empty_page(self, test_db: Session, five_videos):
        search = Mock(spec=SearchCollaborator)
        search.search.return_value = []

        result = FeedAssembler(test_db, search=search).assemble(FeedFilter(query="nothing"))

        assert result.items == []
        assert result.total_items == 0

    def test_search_respects_publication(self, test_db: Session, test_user, make_video):
        draft = make_video(test_user, "hidden", is_published=False)
        search = Mock(spec=SearchCollaborator)
        search.search.return_value = [draft.id]

        result = FeedAssembler(test_db, search=search).assemble(FeedFilter(query="hidden"))

        assert result.items == []

    def test_sql_text_search(self, test_db: Session, test_user, make_video):
        both = make_video(test_user, "Python cooking", description="Snake recipes", minutes=0)
        cooking = make_video(test_user, "Cooking", description="Pasta night", minutes=1)
        python = make_video(test_user, "Python tips", description="Learn Python fast", minutes=2)
        make_video(test_user, "Gardening", description="Tomatoes", minutes=3)

        result = FeedAssembler(test_db).assemble(FeedFilter(query="python cooking"), SortSpec(field="relevance"))

        # Two matched terms first, then single matches newest first
        assert ids(result) == [both.id, python.id, cooking.id]

    def test_sql_text_search_matches_wildcards_literally(self, test_db: Session, test_user, make_video):
        make_video(test_user, "plain", description="nothing special")
        discount = make_video(test_user, "50% off", description="sale")
        snake = make_video(test_user, "snake_case names", description="style")
        search = SqlTextSearch(test_db)

        assert search.search(EntityKind.VIDEO, "%", ["title", "description"]) == [discount.id]
        assert search.search(EntityKind.VIDEO, "_", ["title", "description"]) == [snake.id]

    def test_sql_text_search_rejects_unknown_fields(self, test_db: Session):
        with pytest.raises(InvalidArgument):
            SqlTextSearch(test_db).search(EntityKind.VIDEO, "python", ["tags"])


@pytest.mark.integration
class TestEdgeListings:
    """Subscriber, subscription and liked-video listings."""

    def test_channel_subscribers(self, test_db: Session, make_user):
        channel = make_user("channel")
        fans = [make_user(f"fan{i}") for i in range(3)]
        for fan in fans:
            RelationshipStore(test_db).create(EdgeKind.SUBSCRIPTION, channel.id, fan.id)

        result = FeedAssembler(test_db).channel_subscribers(channel.id, page=1, page_size=2)

        assert result.total_items == 3
        assert result.total_pages == 2
        assert len(result.items) == 2
        assert {item.id for item in result.items} <= {fan.id for fan in fans}

    def test_subscribed_channels(self, test_db: Session, make_user):
        fan = make_user("fan")
        channels = [make_user(f"ch{i}") for i in range(2)]
        for channel in channels:
            RelationshipStore(test_db).create(EdgeKind.SUBSCRIPTION, channel.id, fan.id)

        result = FeedAssembler(test_db).subscribed_channels(fan.id)

        assert {item.username for item in result.items} == {"ch0", "ch1"}

    def test_subscriber_listing_for_missing_channel(self, test_db: Session):
        with pytest.raises(NotFound):
            FeedAssembler(test_db).channel_subscribers(uuid.uuid4())

    def test_liked_videos_visibility(self, test_db: Session, test_user, test_user2, make_video):
        public = make_video(test_user2, "public")
        others_draft = make_video(test_user2, "their draft", is_published=False)
        own_draft = make_video(test_user, "my draft", is_published=False)
        store = RelationshipStore(test_db)
        for video in (public, others_draft, own_draft):
            store.create(EdgeKind.VIDEO_LIKE, video.id, test_user.id)

        result = FeedAssembler(test_db).liked_videos(test_user.id)

        assert {item.id for item in result.items} == {public.id, own_draft.id}
        assert all(item.is_liked for item in result.items)
        assert result.total_items == 2
