"""HTTP-интерфейс ресторанов."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from table_booking.core.dependencies import get_cache_service
from table_booking.main import app
from table_booking.utils.enums import BookingStatus, UserRole
from tests.factories import (
    at,
    auth_headers,
    make_booking,
    make_restaurant,
    make_user,
)

RESTAURANT_BODY = {
    'name': 'У Тимура',
    'description': '  Узбекская кухня  ',
    'contact': '+79991234567',
    'email': 'timur@example.com',
    'totalSeats': 12,
    'workingHours': {'monday': '10:00-22:00', 'sunday': '12:00-20:00'},
}


class FakeCache:
    """Кеш в памяти вместо Redis."""

    def __init__(self):
        self.restaurants = None
        self.cleared = 0

    async def get_restaurants(self):
        return self.restaurants

    async def set_restaurants(self, restaurants):
        self.restaurants = restaurants
        return True

    async def clear_restaurants_cache(self):
        self.restaurants = None
        self.cleared += 1


@pytest.fixture
def cache(client):
    fake = FakeCache()
    app.dependency_overrides[get_cache_service] = lambda: fake
    return fake


class TestRegisterRestaurant:
    async def test_owner_is_current_user(self, client, owner, cache):
        response = await client.post(
            '/restaurants/register',
            json=RESTAURANT_BODY,
            headers=auth_headers(owner),
        )
        assert response.status_code == 201
        body = response.json()
        assert body['ownerId'] == str(owner.id)
        assert body['totalSeats'] == 12
        assert body['description'] == 'Узбекская кухня'
        assert body['workingHours']['sunday'] == '12:00-20:00'
        assert cache.cleared == 1

    async def test_requires_token(self, client):
        response = await client.post(
            '/restaurants/register',
            json=RESTAURANT_BODY,
        )
        assert response.status_code == 401
        assert response.json()['code'] == 401

    async def test_invalid_token(self, client):
        response = await client.post(
            '/restaurants/register',
            json=RESTAURANT_BODY,
            headers={'Authorization': 'Bearer not-a-token'},
        )
        assert response.status_code == 401

    @pytest.mark.parametrize(
        ('field', 'value'),
        [
            ('totalSeats', 0),
            ('contact', '12-34'),
            ('description', '   '),
            ('workingHours', {'someday': '10:00-22:00'}),
        ],
    )
    async def test_invalid_profile(self, client, owner, field, value):
        response = await client.post(
            '/restaurants/register',
            json={**RESTAURANT_BODY, field: value},
            headers=auth_headers(owner),
        )
        assert response.status_code == 422


class TestReadRestaurants:
    async def test_list_skips_deleted_and_is_cached(
        self,
        client,
        session,
        owner,
        cache,
    ):
        await make_restaurant(session, owner, name='Б')
        await make_restaurant(session, owner, name='А')
        await make_restaurant(session, owner, name='В', is_active=False)

        response = await client.get('/restaurants/')
        assert response.status_code == 200
        names = [item['name'] for item in response.json()]
        assert names == ['А', 'Б']
        assert [item['name'] for item in cache.restaurants] == names

        cache.restaurants = [cache.restaurants[0]]
        response = await client.get('/restaurants/')
        assert len(response.json()) == 1

    async def test_list_without_redis(self, client, session, owner):
        await make_restaurant(session, owner)
        response = await client.get('/restaurants/')
        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_get_by_id(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        response = await client.get(f'/restaurants/{restaurant.id}')
        assert response.status_code == 200
        assert response.json()['name'] == restaurant.name

    async def test_get_unknown(self, client):
        response = await client.get(f'/restaurants/{uuid.uuid4()}')
        assert response.status_code == 404

    async def test_my_restaurants(self, client, session, owner):
        other = await make_user(session, 'other@example.com')
        await make_restaurant(session, owner, name='Мой')
        await make_restaurant(session, other, name='Чужой')
        response = await client.get(
            '/restaurants/my-restaurants',
            headers=auth_headers(owner),
        )
        assert [item['name'] for item in response.json()] == ['Мой']


class TestUpdateRestaurant:
    async def test_owner_updates_profile(self, client, session, owner, cache):
        restaurant = await make_restaurant(session, owner)
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'name': 'Новое имя', 'totalSeats': 20},
            headers=auth_headers(owner),
        )
        assert response.status_code == 200
        assert response.json()['name'] == 'Новое имя'
        assert response.json()['totalSeats'] == 20
        assert cache.cleared == 1

    @pytest.mark.parametrize('field', ['totalSeats', 'name', 'contact'])
    async def test_null_field_is_rejected(
        self,
        client,
        session,
        owner,
        field,
    ):
        restaurant = await make_restaurant(session, owner, total_seats=10)
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={field: None},
            headers=auth_headers(owner),
        )
        assert response.status_code == 422
        assert field in response.json()['detail']

        response = await client.get(f'/restaurants/{restaurant.id}')
        assert response.json()['totalSeats'] == 10

    async def test_stranger_is_forbidden(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        stranger = await make_user(session, 'stranger@example.com')
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'name': 'Захват'},
            headers=auth_headers(stranger),
        )
        assert response.status_code == 403

    async def test_admin_may_update(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        admin = await make_user(
            session,
            'boss@example.com',
            role=UserRole.ADMIN,
        )
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'description': 'Обновлено администратором'},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    async def test_shrink_below_future_peak_is_rejected(
        self,
        client,
        session,
        owner,
    ):
        restaurant = await make_restaurant(session, owner, total_seats=10)
        await make_booking(session, restaurant, at(0), guests=4)
        await make_booking(session, restaurant, at(30), guests=3)
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'totalSeats': 6},
            headers=auth_headers(owner),
        )
        assert response.status_code == 409

        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'totalSeats': 7},
            headers=auth_headers(owner),
        )
        assert response.status_code == 200
        assert response.json()['totalSeats'] == 7

    async def test_past_bookings_do_not_block_shrink(
        self,
        client,
        session,
        owner,
    ):
        restaurant = await make_restaurant(session, owner, total_seats=10)
        past = datetime.now(timezone.utc) - timedelta(days=1)
        await make_booking(session, restaurant, past, guests=8)
        response = await client.patch(
            f'/restaurants/{restaurant.id}',
            json={'totalSeats': 2},
            headers=auth_headers(owner),
        )
        assert response.status_code == 200


class TestDeleteRestaurant:
    async def test_blocked_by_pending_bookings(
        self,
        client,
        session,
        owner,
    ):
        restaurant = await make_restaurant(session, owner)
        await make_booking(session, restaurant, at(0))
        response = await client.delete(
            f'/restaurants/{restaurant.id}',
            headers=auth_headers(owner),
        )
        assert response.status_code == 409

    async def test_soft_delete(self, client, session, owner, cache):
        restaurant = await make_restaurant(session, owner)
        await make_booking(
            session,
            restaurant,
            at(0),
            status=BookingStatus.CANCELED,
        )
        response = await client.delete(
            f'/restaurants/{restaurant.id}',
            headers=auth_headers(owner),
        )
        assert response.status_code == 200
        assert response.json()['isActive'] is False
        assert cache.cleared == 1

        response = await client.get(f'/restaurants/{restaurant.id}')
        assert response.status_code == 404

        response = await client.get(
            '/bookings/availability',
            params={
                'restaurantId': str(restaurant.id),
                'time': at(0).isoformat(),
                'duration': '1h',
            },
        )
        assert response.status_code == 404

    async def test_stranger_is_forbidden(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        stranger = await make_user(session, 'stranger@example.com')
        response = await client.delete(
            f'/restaurants/{restaurant.id}',
            headers=auth_headers(stranger),
        )
        assert response.status_code == 403


class TestRestaurantBookings:
    async def test_owner_sees_active_bookings(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        await make_booking(session, restaurant, at(60))
        await make_booking(session, restaurant, at(0))
        await make_booking(
            session,
            restaurant,
            at(0),
            status=BookingStatus.CANCELED,
        )
        response = await client.get(
            f'/restaurants/{restaurant.id}/bookings',
            headers=auth_headers(owner),
        )
        assert response.status_code == 200
        assert len(response.json()) == 2

    async def test_stranger_is_forbidden(self, client, session, owner):
        restaurant = await make_restaurant(session, owner)
        stranger = await make_user(session, 'stranger@example.com')
        response = await client.get(
            f'/restaurants/{restaurant.id}/bookings',
            headers=auth_headers(stranger),
        )
        assert response.status_code == 403
