# pawpal/api/posts/test_routes.py


def test_post_and_comment_flow(client, make_user, auth_headers):
    make_user('alice', display_name='Alice')
    make_user('bob', display_name='Bob')

    created = client.post('/api/posts/', json={"content": "First walk in the park!"}, headers=auth_headers('alice'))
    assert created.status_code == 201
    post = created.get_json()
    assert post["user"] == "Alice"
    assert post["comments"] == 0

    comment = client.post(f'/api/posts/{post["id"]}/comments', json={"text": "So cute"}, headers=auth_headers('bob'))
    assert comment.status_code == 201
    assert comment.get_json()["user_name"] == "Bob"

    fetched = client.get(f'/api/posts/{post["id"]}', headers=auth_headers('bob')).get_json()
    assert fetched["comments"] == 1
    comments = client.get(f'/api/posts/{post["id"]}/comments', headers=auth_headers('bob')).get_json()["comments"]
    assert [c["text"] for c in comments] == ["So cute"]


def test_feed_is_newest_first(client, make_user, auth_headers):
    make_user('alice')
    headers = auth_headers('alice')
    for text in ("one", "two", "three"):
        client.post('/api/posts/', json={"content": text}, headers=headers)

    page = client.get('/api/posts/?limit=2', headers=headers).get_json()
    assert [p["content"] for p in page["posts"]] == ["three", "two"]

    rest = client.get(f'/api/posts/?limit=2&cursor={page["next_cursor"]}', headers=headers).get_json()
    assert [p["content"] for p in rest["posts"]] == ["one"]


def test_post_errors(client, make_user, auth_headers):
    make_user('alice')
    headers = auth_headers('alice')

    assert client.post('/api/posts/', json={}, headers=headers).status_code == 400
    assert client.post('/api/posts/', json={"content": "  "}, headers=headers).get_json()["error_code"] == "MISSING_FIELD"
    assert client.get('/api/posts/missing', headers=headers).status_code == 404
    assert client.post('/api/posts/missing/comments', json={"text": "hi"}, headers=headers).status_code == 404
