class TestHealthcheck:
    async def test_db(self, client):
        response = await client.get('/healthcheck/db')
        assert response.json() == {'status': 'ok'}

    async def test_redis_not_connected(self, client):
        response = await client.get('/healthcheck/redis')
        assert response.status_code == 200
        assert response.json()['status'] == 'error'
