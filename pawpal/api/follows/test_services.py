# pawpal/api/follows/test_services.py
"""
팔로우 상태 전이 / 공개 범위 게이트 테스트

사용법: python -m pytest pawpal/api/follows/test_services.py -v
"""
import pytest

from pawpal.api.follows.services import FOLLOWS
from pawpal.core.errors import DocumentNotFound, SelfActionError
from pawpal.models.follow import FollowAction, FollowStatus
from pawpal.models.notification import NotificationType


@pytest.fixture
def follows(services):
    return services['follows']


def _request_notification(store, edge_id):
    docs = store.query('notifications', filters=[('relatedId', '==', edge_id)])
    assert len(docs) == 1
    return docs[0]


def test_status_with_self_is_never_persisted(follows, store):
    assert follows.get_status('alice', 'alice') is FollowStatus.IS_SELF
    assert store.all(FOLLOWS) == []


def test_self_follow_is_rejected(follows, store):
    with pytest.raises(SelfActionError):
        follows.request_follow('alice', 'Alice', 'alice')
    assert store.all(FOLLOWS) == []


def test_request_creates_pending_edge_and_one_notification(follows, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')

    assert follows.get_status('alice', 'bob') is FollowStatus.PENDING
    assert follows.get_status('bob', 'alice') is FollowStatus.NOT_FOLLOWING
    notifications = store.query('notifications', filters=[('userId', '==', 'bob')])
    assert len(notifications) == 1
    assert notifications[0]['type'] == NotificationType.FOLLOW_REQUEST.value
    assert notifications[0]['relatedId'] == edge_id
    assert notifications[0]['message'] == "Alice wants to follow you."
    assert notifications[0]['read'] is False


def test_accept_flips_to_following_and_marks_read(follows, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')
    notification = _request_notification(store, edge_id)

    result = follows.resolve_request(notification['id'], edge_id, FollowAction.ACCEPT, actor_id='bob')

    assert result is FollowStatus.FOLLOWING
    assert follows.get_status('alice', 'bob') is FollowStatus.FOLLOWING
    assert store.get('notifications', notification['id'])['read'] is True
    assert follows.list_followers('bob') == ['alice']
    assert follows.list_following('alice') == ['bob']


def test_decline_deletes_edge(follows, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')
    notification = _request_notification(store, edge_id)

    result = follows.resolve_request(notification['id'], edge_id, FollowAction.DECLINE, actor_id='bob')

    assert result is FollowStatus.NOT_FOLLOWING
    assert store.get(FOLLOWS, edge_id) is None
    assert follows.get_status('alice', 'bob') is FollowStatus.NOT_FOLLOWING
    assert store.get('notifications', notification['id'])['read'] is True


def test_request_decline_request_creates_second_pending_edge(follows, store):
    first_edge = follows.request_follow('alice', 'Alice', 'bob')
    follows.resolve_request(_request_notification(store, first_edge)['id'], first_edge, FollowAction.DECLINE)

    second_edge = follows.request_follow('alice', 'Alice', 'bob')

    assert second_edge != first_edge
    assert follows.get_status('alice', 'bob') is FollowStatus.PENDING
    assert [doc['id'] for doc in store.all(FOLLOWS)] == [second_edge]


def test_duplicate_requests_are_not_deduplicated(follows, store):
    follows.request_follow('alice', 'Alice', 'bob')
    follows.request_follow('alice', 'Alice', 'bob')
    assert len(store.all(FOLLOWS)) == 2
    assert len(store.query('notifications', filters=[('userId', '==', 'bob')])) == 2


def test_only_target_can_resolve(follows, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')
    notification = _request_notification(store, edge_id)

    with pytest.raises(PermissionError):
        follows.resolve_request(notification['id'], edge_id, FollowAction.ACCEPT, actor_id='alice')
    assert follows.get_status('alice', 'bob') is FollowStatus.PENDING


def test_resolve_missing_edge_returns_none(follows):
    assert follows.resolve_request('n-1', 'missing-edge', FollowAction.ACCEPT) is None


def test_resolve_is_atomic_when_notification_is_missing(follows, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')

    with pytest.raises(DocumentNotFound):
        follows.resolve_request('no-such-notification', edge_id, FollowAction.ACCEPT)

    assert follows.get_status('alice', 'bob') is FollowStatus.PENDING


def test_resolve_requires_the_request_notification(follows, services, store):
    edge_id = follows.request_follow('alice', 'Alice', 'bob')
    bob_request = _request_notification(store, edge_id)
    other_edge = follows.request_follow('dave', 'Dave', 'carol')
    carol_request = _request_notification(store, other_edge)
    unrelated_id = services['notifications'].create_notification('bob', 'Hi', 'Unrelated')

    for notification_id in (carol_request['id'], unrelated_id):
        with pytest.raises(PermissionError):
            follows.resolve_request(notification_id, edge_id, FollowAction.ACCEPT, actor_id='bob')

    assert store.get('notifications', carol_request['id'])['read'] is False
    assert follows.get_status('alice', 'bob') is FollowStatus.PENDING

    follows.resolve_request(bob_request['id'], edge_id, FollowAction.ACCEPT, actor_id='bob')
    assert store.get('notifications', bob_request['id'])['read'] is True


@pytest.mark.parametrize('setup, viewer, owner, expected', [
    (None, 'alice', 'alice', True),
    (None, 'alice', 'bob', False),
    (None, None, 'bob', False),
    ('pending', 'alice', 'bob', False),
    ('accepted', 'alice', 'bob', True),
    ('accepted', 'bob', 'alice', False),
])
def test_can_see_private_truth_table(follows, store, setup, viewer, owner, expected):
    if setup:
        edge_id = follows.request_follow('alice', 'Alice', 'bob')
        if setup == 'accepted':
            notification = _request_notification(store, edge_id)
            follows.resolve_request(notification['id'], edge_id, FollowAction.ACCEPT)

    assert follows.can_see_private(viewer, owner) is expected
