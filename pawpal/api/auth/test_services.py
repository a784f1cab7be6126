# pawpal/api/auth/test_services.py
"""
가입 / 로그인 / 사용자 동기화 테스트

사용법: python -m pytest pawpal/api/auth/test_services.py -v
"""
import pytest

from pawpal.api.auth.services import USERS
from pawpal.core.errors import AccountNotFound, EmailInUse, InvalidCredential, MissingFieldError, UsernameTaken, WeakPassword
from pawpal.models.user import ProviderAccount


@pytest.fixture
def auth(services):
    return services['auth']


def test_register_stores_normalized_username(auth, store, identity):
    user, account = auth.register_with_credentials('new@pawpal.test', 'secret1', ' Coco ', '  CocoMom ')

    doc = store.get(USERS, user.uid)
    assert doc['username'] == 'cocomom'
    assert doc['displayName'] == 'Coco'
    assert doc['lowercaseDisplayName'] == 'coco'
    assert doc['lastLogin'].endswith('Z')
    assert account.email_verified is False
    assert identity.verification_emails == [account.id_token]


def test_register_rejects_taken_username_case_insensitively(auth, make_user, identity):
    make_user('existing', username='cocomom')
    with pytest.raises(UsernameTaken):
        auth.register_with_credentials('new@pawpal.test', 'secret1', 'Coco', 'CocoMom')
    assert 'new@pawpal.test' not in identity.accounts


def test_register_propagates_provider_rejections(auth, identity):
    with pytest.raises(WeakPassword):
        auth.register_with_credentials('new@pawpal.test', '123', 'Coco', 'coco')

    identity.add_account('taken@pawpal.test', 'secret1')
    with pytest.raises(EmailInUse):
        auth.register_with_credentials('taken@pawpal.test', 'secret1', 'Coco', 'coco')


def test_register_requires_every_field(auth):
    with pytest.raises(MissingFieldError) as exc_info:
        auth.register_with_credentials('new@pawpal.test', 'secret1', 'Coco', '   ')
    assert exc_info.value.field_name == 'username'


def test_login_with_username_resolves_email(auth, identity, make_user):
    uid = identity.add_account('coco@pawpal.test', 'secret1')
    make_user(uid, username='cocomom', email='coco@pawpal.test')

    user, _ = auth.login_with_identifier('CocoMom', 'secret1')

    assert user.uid == uid


def test_login_with_unknown_username_passes_literal_through(auth, identity, monkeypatch):
    seen = []

    def sign_in(email, password):
        seen.append(email)
        raise AccountNotFound()

    monkeypatch.setattr(identity, 'sign_in_with_password', sign_in)

    with pytest.raises(AccountNotFound):
        auth.login_with_identifier('nobody', 'secret1')
    assert seen == ['nobody']


def test_login_with_wrong_password(auth, identity):
    identity.add_account('coco@pawpal.test', 'secret1')
    with pytest.raises(InvalidCredential):
        auth.login_with_identifier('coco@pawpal.test', 'wrong-password')


def test_login_updates_last_login_without_destroying_fields(auth, identity, store, make_user):
    uid = identity.add_account('coco@pawpal.test', 'secret1')
    make_user(uid, display_name='Coco Mom', username='cocomom', email='coco@pawpal.test',
              phone_number='010-0000-0000')

    user, _ = auth.login_with_identifier('coco@pawpal.test', 'secret1')

    doc = store.get(USERS, uid)
    assert user.display_name == 'Coco Mom'
    assert doc['username'] == 'cocomom'
    assert doc['phoneNumber'] == '010-0000-0000'
    assert doc['lowercaseDisplayName'] == 'coco mom'
    assert 'lastLogin' in doc


def test_provider_login_creates_user_once(auth, identity, store):
    identity.provider_tokens['google-token'] = ProviderAccount(
        external_id='g-123456789', email='Dog.Lover@gmail.com', display_name='Dog Lover',
        photo_url='https://photos.test/me.png', email_verified=True
    )

    user, account, is_new = auth.login_with_provider('google', 'google-token')
    assert is_new is True
    assert user.username == 'dog.lover'
    assert user.photo_url == 'https://photos.test/me.png'

    store.update(USERS, user.uid, {'displayName': 'Renamed'})
    user, _, is_new = auth.login_with_provider('google', 'google-token')
    assert is_new is False
    assert user.display_name == 'Renamed'


def test_provider_login_derives_fallback_username(auth, identity, make_user):
    make_user('someone-else', username='dog.lover')
    identity.provider_tokens['apple-token'] = ProviderAccount(
        external_id='A1B2C3D4E5', email='dog.lover@icloud.com', email_verified=True
    )

    user, _, _ = auth.login_with_provider('apple', 'apple-token')

    assert user.username == 'a1b2c3d4'
    assert user.display_name == 'dog.lover'


def test_resend_verification_without_session_is_silent(auth, identity):
    assert auth.resend_verification(None) is False
    assert identity.verification_emails == []
    assert auth.resend_verification('id-token-uid-1') is True


def test_logout_revokes_both_tokens(auth):
    auth.logout_user('access-jti', 1893456000, 'refresh-jti', 1894456000)
    assert auth.is_token_revoked({'jti': 'access-jti'}) is True
    assert auth.is_token_revoked({'jti': 'refresh-jti'}) is True
    assert auth.is_token_revoked({'jti': 'other'}) is False
