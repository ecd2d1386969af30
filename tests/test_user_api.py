"""Регистрация, подтверждение почты и вход."""

import pytest

from table_booking.core.auth import (
    create_access_token,
    create_verification_token,
)
from table_booking.utils.enums import UserRole
from tests.factories import PASSWORD, auth_headers, make_user

SIGNUP_BODY = {
    'email': 'New.Guest@Example.com',
    'name': 'Новый гость',
    'password': PASSWORD,
}


def token_from_email(message: dict) -> str:
    return message['text'].split('/verify/')[1].split()[0]


class TestSignup:
    async def test_signup_sends_verification_link(self, client, sent_emails):
        response = await client.post('/users/signup', json=SIGNUP_BODY)
        assert response.status_code == 201
        body = response.json()
        assert body['email'] == 'new.guest@example.com'
        assert body['role'] == 'USER'
        assert body['isVerified'] is False
        assert 'password' not in body
        assert 'hashedPassword' not in body

        assert sent_emails[-1]['emails'] == ['new.guest@example.com']
        assert sent_emails[-1]['subject'] == 'Подтверждение регистрации'

    async def test_duplicate_email(self, client, session):
        await make_user(session, 'new.guest@example.com')
        response = await client.post('/users/signup', json=SIGNUP_BODY)
        assert response.status_code == 400
        assert response.json()['field'] == 'email'

    @pytest.mark.parametrize(
        'password',
        ['short1!', 'nouppercase1!', 'NoDigits!!', 'NoSpecial123', 'Пароль1!'],
    )
    async def test_weak_password(self, client, password):
        response = await client.post(
            '/users/signup',
            json={**SIGNUP_BODY, 'password': password},
        )
        assert response.status_code == 422
        assert 'password' in response.json()['detail']


class TestLogin:
    async def test_unverified_user_cannot_login(self, client, session):
        await make_user(session, 'late@example.com', is_verified=False)
        response = await client.post(
            '/auth/login',
            json={'email': 'late@example.com', 'password': PASSWORD},
        )
        assert response.status_code == 403

    async def test_wrong_password(self, client, owner):
        response = await client.post(
            '/auth/login',
            json={'email': owner.email, 'password': 'Wr0ng!pass'},
        )
        assert response.status_code == 401

    async def test_unknown_user(self, client):
        response = await client.post(
            '/auth/login',
            json={'email': 'ghost@example.com', 'password': PASSWORD},
        )
        assert response.status_code == 401

    async def test_signup_verify_login(self, client, sent_emails):
        await client.post('/users/signup', json=SIGNUP_BODY)
        token = token_from_email(sent_emails[-1])

        response = await client.get(f'/users/verify/{token}')
        assert response.status_code == 200
        assert response.json() == {
            'verified': True,
            'email': 'new.guest@example.com',
        }

        response = await client.post(
            '/auth/login',
            json={'email': 'New.Guest@example.com', 'password': PASSWORD},
        )
        assert response.status_code == 200
        access_token = response.json()['accessToken']
        assert response.json()['tokenType'] == 'bearer'

        response = await client.get(
            '/users/me',
            headers={'Authorization': f'Bearer {access_token}'},
        )
        assert response.status_code == 200
        assert response.json()['isVerified'] is True


class TestVerification:
    async def test_access_token_is_not_a_verification_link(
        self,
        client,
        owner,
    ):
        token = create_access_token(owner.id, owner.email)
        response = await client.get(f'/users/verify/{token}')
        assert response.status_code == 400
        assert response.json()['field'] == 'token'

    async def test_garbage_token(self, client):
        response = await client.get('/users/verify/garbage')
        assert response.status_code == 400

    async def test_unknown_email(self, client):
        token = create_verification_token('ghost@example.com')
        response = await client.get(f'/users/verify/{token}')
        assert response.status_code == 404


class TestUserList:
    async def test_admin_lists_users(self, client, session, owner):
        admin = await make_user(
            session,
            'boss@example.com',
            role=UserRole.ADMIN,
        )
        response = await client.get('/users/', headers=auth_headers(admin))
        assert response.status_code == 200
        emails = {item['email'] for item in response.json()}
        assert emails == {owner.email, admin.email}

    async def test_regular_user_is_forbidden(self, client, owner):
        response = await client.get('/users/', headers=auth_headers(owner))
        assert response.status_code == 403

    async def test_me_requires_token(self, client):
        response = await client.get('/users/me')
        assert response.status_code == 401
