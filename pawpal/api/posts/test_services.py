# pawpal/api/posts/test_services.py
import pytest

from pawpal.core.errors import MissingFieldError


@pytest.fixture
def posts(services):
    return services['posts']


@pytest.fixture
def owner_with_pet(services, make_user):
    make_user('owner', display_name='Owner')
    return services['pets'].register_pet('owner', 'Owner', {
        'name': 'Mochi', 'species': 'Dog', 'breed': 'Shiba', 'birthday': '2020-01-01'
    })


def test_post_snapshots_author_and_pet(posts, owner_with_pet, store):
    post = posts.create_post('owner', 'First walk!')

    assert post.user == 'Owner'
    assert (post.pet_name, post.pet_type, post.pet_species) == ('Mochi', 'Shiba', 'Dog')

    store.update('users', 'owner', {'displayName': 'Renamed'})
    assert posts.get_post(post.id).user == 'Owner'

    titles = [n['title'] for n in store.query('notifications', filters=[('relatedId', '==', post.id)])]
    assert titles == ["Post Published"]


def test_post_cannot_reference_someone_elses_pet(posts, owner_with_pet, make_user):
    make_user('stranger')
    with pytest.raises(PermissionError):
        posts.create_post('stranger', 'not mine', pet_id=owner_with_pet.id)


def test_post_requires_content(posts, owner_with_pet):
    with pytest.raises(MissingFieldError):
        posts.create_post('owner', '   ')
    assert posts.create_post('ghost', 'who am i') is None


def test_feed_is_newest_first_with_cursor(posts, owner_with_pet):
    created = [posts.create_post('owner', f"post {i}") for i in range(3)]

    page, cursor = posts.list_feed(limit=2)
    rest, last_cursor = posts.list_feed(limit=2, cursor=cursor)

    assert [p.id for p in page] == [created[2].id, created[1].id]
    assert [p.id for p in rest] == [created[0].id]
    assert last_cursor is None


def test_comment_increments_counter(posts, owner_with_pet, make_user):
    make_user('friend', display_name='Friend')
    post = posts.create_post('owner', 'Look at Mochi')

    comment = posts.add_comment(post.id, 'friend', 'so cute')
    posts.add_comment(post.id, 'owner', 'thanks!')

    assert comment.user_name == 'Friend'
    assert posts.get_post(post.id).comments == 2
    assert [c.text for c in posts.list_comments(post.id)] == ['so cute', 'thanks!']
    assert posts.add_comment('missing-post', 'friend', 'hello?') is None


def test_watch_feed_delivers_new_posts(posts, owner_with_pet):
    snapshots = []
    unsubscribe = posts.watch_feed(lambda feed: snapshots.append([p.content for p in feed]), limit=2)

    posts.create_post('owner', 'one')
    posts.create_post('owner', 'two')
    posts.create_post('owner', 'three')
    unsubscribe()
    posts.create_post('owner', 'four')

    assert snapshots[0] == []
    assert snapshots[-1] == ['three', 'two']
