# pawpal/api/users/test_routes.py


def test_phone_number_follows_visibility(client, make_user, auth_headers):
    make_user('alice', phone_number='010-1234-5678')
    make_user('bob')

    own = client.get('/api/users/alice', headers=auth_headers('alice')).get_json()
    assert own["phone_number"] == '010-1234-5678'
    assert own["follow_status"] == "is_self"

    other = client.get('/api/users/alice', headers=auth_headers('bob')).get_json()
    assert "phone_number" not in other
    assert other["follow_status"] == "not_following"


def test_lookup_by_username_is_case_insensitive(client, make_user, auth_headers):
    make_user('alice', username='alice_paws')

    response = client.get('/api/users/by-username/Alice_Paws', headers=auth_headers('alice'))
    assert response.get_json()["uid"] == 'alice'

    missing = client.get('/api/users/by-username/nobody', headers=auth_headers('alice'))
    assert missing.status_code == 404


def test_update_profile_rejects_taken_username(client, make_user, auth_headers):
    make_user('alice')
    make_user('bob', username='bobby')

    response = client.patch('/api/users/me', json={"username": "BOBBY"}, headers=auth_headers('alice'))
    assert response.status_code == 409

    response = client.patch('/api/users/me', json={"display_name": "Alice Kim"}, headers=auth_headers('alice'))
    assert response.status_code == 200
    assert response.get_json()["display_name"] == "Alice Kim"


def test_search_requires_valid_email(client, make_user, auth_headers):
    make_user('alice')
    make_user('bob')

    assert client.get('/api/users/search?email=nope', headers=auth_headers('alice')).status_code == 400
    found = client.get('/api/users/search?email=BOB@pawpal.test', headers=auth_headers('alice')).get_json()
    assert [u["uid"] for u in found["users"]] == ['bob']


def test_list_users_paginates(client, make_user, auth_headers):
    for uid in ('a-user', 'b-user', 'c-user'):
        make_user(uid)
    headers = auth_headers('a-user')

    first = client.get('/api/users/?limit=2', headers=headers).get_json()
    assert [u["uid"] for u in first["users"]] == ['a-user', 'b-user']
    assert first["next_cursor"] == 'b-user'

    second = client.get(f'/api/users/?limit=2&cursor={first["next_cursor"]}', headers=headers).get_json()
    assert [u["uid"] for u in second["users"]] == ['c-user']
    assert second["next_cursor"] is None
