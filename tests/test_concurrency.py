"""Одновременные заявки на одно окно не приводят к овербукингу."""

import asyncio

from table_booking.core.exceptions import CapacityExceededError
from table_booking.repositories.booking import booking_repository
from table_booking.schemas.booking import BookingCreate
from table_booking.services.availability_service import AvailabilityService
from tests.factories import at, make_booking, make_restaurant


def payload(restaurant_id, start, guests, email='guest@example.com'):
    return BookingCreate(
        restaurant_id=restaurant_id,
        reservation_time=start,
        duration='1h',
        guests=guests,
        user_name='Guest',
        user_email=email,
    )


async def admit_in_own_session(session_factory, obj_in):
    async with session_factory() as session:
        return await booking_repository.create_with_admission(
            session,
            obj_in,
        )


class TestConcurrentAdmission:
    async def test_only_one_request_gets_the_last_seat(
        self,
        session,
        session_factory,
        owner,
    ):
        restaurant = await make_restaurant(session, owner, total_seats=4)
        await make_booking(session, restaurant, at(0), guests=3)

        results = await asyncio.gather(
            admit_in_own_session(
                session_factory,
                payload(restaurant.id, at(0), 1, 'first@example.com'),
            ),
            admit_in_own_session(
                session_factory,
                payload(restaurant.id, at(15), 1, 'second@example.com'),
            ),
            return_exceptions=True,
        )

        admitted = [
            item for item in results if not isinstance(item, Exception)
        ]
        rejected = [item for item in results if isinstance(item, Exception)]
        assert len(admitted) == 1
        assert len(rejected) == 1
        assert isinstance(rejected[0], CapacityExceededError)
        assert rejected[0].available_seats == 0

    async def test_many_requests_never_exceed_capacity(
        self,
        session,
        session_factory,
        owner,
    ):
        restaurant = await make_restaurant(session, owner, total_seats=5)

        results = await asyncio.gather(
            *(
                admit_in_own_session(
                    session_factory,
                    payload(
                        restaurant.id,
                        at(0),
                        2,
                        f'guest{number}@example.com',
                    ),
                )
                for number in range(6)
            ),
            return_exceptions=True,
        )

        admitted = [
            item for item in results if not isinstance(item, Exception)
        ]
        assert len(admitted) == 2
        assert all(
            isinstance(item, CapacityExceededError)
            for item in results
            if isinstance(item, Exception)
        )

        async with session_factory() as check_session:
            seats = await AvailabilityService.compute_available_seats(
                check_session,
                restaurant.id,
                at(0),
                '1h',
            )
        assert seats == 1

    async def test_concurrent_http_requests(self, client, session, owner):
        restaurant = await make_restaurant(session, owner, total_seats=2)
        body = {
            'restaurantId': str(restaurant.id),
            'reservationTime': at(0).isoformat(),
            'duration': '30min',
            'guests': 2,
            'userName': 'Guest',
            'userEmail': 'guest@example.com',
        }

        responses = await asyncio.gather(
            *(client.post('/bookings/', json=body) for _ in range(3)),
        )

        codes = sorted(response.status_code for response in responses)
        assert codes == [201, 409, 409]
