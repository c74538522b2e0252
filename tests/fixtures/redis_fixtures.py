from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.redis import RedisClient


class FakePipeline:
    """Queues commands and applies them together on execute, like MULTI/EXEC."""

    def __init__(self, redis, transaction):
        self.redis = redis
        self.transaction = transaction
        self.commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.commands = []

    def set(self, *args, **kwargs):
        self.commands.append(("set", args, kwargs))
        return self

    def incr(self, *args, **kwargs):
        self.commands.append(("incr", args, kwargs))
        return self

    async def execute(self):
        if self.redis.fail_pipelines:
            self.commands = []
            raise RedisConnectionError("connection lost during EXEC")
        self.redis.transactions.append(self.transaction)
        results = []
        for name, args, kwargs in self.commands:
            results.append(await getattr(self.redis, name)(*args, **kwargs))
        self.commands = []
        return results


class FakeRedis:
    """In-memory subset of the redis.asyncio client API."""

    def __init__(self, fail_pipelines=False):
        self.values = {}
        self.ttls = {}
        self.transactions = []
        self.fail_pipelines = fail_pipelines

    async def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def get(self, key):
        return self.values.get(key)

    async def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.values.pop(key, None) is not None else 0

    async def eval(self, script, numkeys, key, token):
        # Only the lock release script is used: compare-and-delete
        if self.values.get(key) == token:
            return await self.delete(key)
        return 0

    def pipeline(self, transaction=True):
        return FakePipeline(self, transaction)

    async def ping(self):
        return True


class BrokenRedis:
    async def set(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")

    async def eval(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")

    def pipeline(self, transaction=True):
        return FakePipeline(FakeRedis(fail_pipelines=True), transaction)


class StubRedisClient(RedisClient):
    """RedisClient wired to an in-process fake instead of a server."""

    def __init__(self, client):
        super().__init__("redis://unused")
        self.client = client

    async def get_redis(self):
        return self.client
