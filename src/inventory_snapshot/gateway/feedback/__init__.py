"""User-facing diagnostic output with mode awareness."""

from inventory_snapshot.gateway.feedback.abc import UserFeedback as UserFeedback
from inventory_snapshot.gateway.feedback.fake import FakeUserFeedback as FakeUserFeedback
from inventory_snapshot.gateway.feedback.real import InteractiveFeedback as InteractiveFeedback
from inventory_snapshot.gateway.feedback.real import SuppressedFeedback as SuppressedFeedback
