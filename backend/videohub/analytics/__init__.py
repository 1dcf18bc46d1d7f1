"""Engagement aggregation: projections, feeds and channel rollups."""

from videohub.analytics.projection_builder import ProjectionBuilder
from videohub.analytics.feed_assembler import FeedAssembler, FeedFilter, SortSpec
from videohub.analytics.channel_stats import ChannelStatsReducer

__all__ = ["ProjectionBuilder", "FeedAssembler", "FeedFilter", "SortSpec", "ChannelStatsReducer"]
