# pawpal/api/users/test_services.py
import pytest

from pawpal.core.errors import UsernameTaken


@pytest.fixture
def users(services):
    return services['users']


def test_profile_hides_phone_number_from_strangers(users, make_user):
    make_user('alice')
    make_user('bob', phone_number='010-1111-2222')

    stranger_view = users.get_profile('bob', 'alice')
    own_view = users.get_profile('bob', 'bob')

    assert 'phone_number' not in stranger_view
    assert stranger_view['follow_status'] == 'not_following'
    assert own_view['phone_number'] == '010-1111-2222'
    assert own_view['follow_status'] == 'is_self'


def test_profile_by_username_is_case_insensitive(users, make_user):
    make_user('bob', username='bobby')
    assert users.get_profile_by_username('BOBBY', 'alice')['uid'] == 'bob'
    assert users.get_profile_by_username('nobody', 'alice') is None


def test_list_users_pages_by_document_id(users, make_user):
    for uid in ('carol', 'alice', 'bob'):
        make_user(uid)

    first_page, cursor = users.list_users('alice', limit=2)
    second_page, last_cursor = users.list_users('alice', limit=2, cursor=cursor)

    assert [u['uid'] for u in first_page] == ['alice', 'bob']
    assert cursor == 'bob'
    assert [u['uid'] for u in second_page] == ['carol']
    assert last_cursor is None


def test_search_by_email_excludes_viewer(users, make_user):
    make_user('alice', email='alice@pawpal.test')
    make_user('bob', email='bob@pawpal.test')

    assert [u['uid'] for u in users.search_by_email(' BOB@pawpal.test ', 'alice')] == ['bob']
    assert users.search_by_email('alice@pawpal.test', 'alice') == []


def test_update_profile_checks_username_excluding_self(users, make_user, store, identity):
    make_user('alice', username='alice')
    make_user('bob', username='bob')

    updated = users.update_profile('alice', display_name='Alice Kim', username='ALICE')
    assert updated.username == 'alice'
    assert store.get('users', 'alice')['lowercaseDisplayName'] == 'alice kim'
    assert identity.display_names['alice'] == 'Alice Kim'

    with pytest.raises(UsernameTaken):
        users.update_profile('alice', username='Bob')


def test_update_profile_image_makes_upload_public(users, make_user, bucket):
    make_user('alice')
    bucket.files['user_profiles/alice/me.png'] = b'img'

    updated = users.update_profile_image('alice', 'user_profiles/alice/me.png')

    assert updated.photo_url == 'https://storage.test/user_profiles/alice/me.png'
    assert 'user_profiles/alice/me.png' in bucket.public


def test_update_profile_image_missing_upload(users, make_user):
    make_user('alice')
    with pytest.raises(FileNotFoundError):
        users.update_profile_image('alice', 'user_profiles/alice/missing.png')
