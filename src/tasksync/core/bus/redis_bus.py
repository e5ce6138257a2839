"""RedisEventBus -- 基于 Redis pub/sub 的 Event Bus

发布与订阅使用两个独立的 Redis 连接（订阅模式下连接不能再执行普通命令）。
启动时任一连接失败抛出 BusConnectionError；
运行期订阅连接断开时记录日志并按固定间隔重新订阅，期间实时广播停滞。
"""

import asyncio
from collections.abc import AsyncIterator

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from ..exceptions import BusConnectionError
from ..models.event import ChangeEvent
from .config import BusConfig

log = structlog.get_logger()


class RedisEventBus:
    """Redis pub/sub Event Bus"""

    def __init__(
        self,
        config: BusConfig,
        publisher: Redis | None = None,
        subscriber: Redis | None = None,
    ) -> None:
        """
        Args:
            config: Event Bus 配置
            publisher: 发布连接（测试注入用，缺省按配置创建）
            subscriber: 订阅连接（测试注入用，缺省按配置创建）
        """
        self._config = config
        self._publisher = publisher
        self._subscriber = subscriber
        self._pubsub: PubSub | None = None
        self._closed = False

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def channel(self) -> str:
        return self._config.channel

    def _new_client(self) -> Redis:
        return Redis.from_url(
            self._config.url,
            decode_responses=True,
            socket_connect_timeout=self._config.socket_timeout_s,
        )

    async def connect(self) -> None:
        if self._publisher is None:
            self._publisher = self._new_client()
        if self._subscriber is None:
            self._subscriber = self._new_client()

        try:
            await self._publisher.ping()
            await self._subscriber.ping()
            await self._subscribe()
        except (RedisError, OSError) as e:
            raise BusConnectionError(self.url, e) from e

        self._closed = False
        log.info("bus_connected", url=self.url, channel=self.channel)

    async def _subscribe(self) -> None:
        pubsub = self._subscriber.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self.channel)
        self._pubsub = pubsub

    async def _reset_pubsub(self) -> None:
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.aclose()
        except (RedisError, OSError) as e:
            log.debug("bus_pubsub_close_failed", error=str(e))

    async def publish(self, event: ChangeEvent) -> None:
        if self._publisher is None:
            raise BusConnectionError(self.url, RuntimeError("bus not connected"))
        try:
            await self._publisher.publish(self.channel, event.to_json())
        except (RedisError, OSError) as e:
            raise BusConnectionError(self.url, e) from e

    async def listen(self) -> AsyncIterator[ChangeEvent]:
        """订阅循环 -- 只应由唯一的订阅者调用一次

        订阅连接断开时不抛出：记录 bus_subscriber_disconnected 并重连。
        """
        delay = self._config.reconnect_delay_s
        while not self._closed:
            if self._pubsub is None:
                try:
                    await self._subscribe()
                except (RedisError, OSError) as e:
                    log.error("bus_resubscribe_failed", url=self.url, error=str(e))
                    await asyncio.sleep(delay)
                    continue
                log.info("bus_resubscribed", url=self.url, channel=self.channel)

            try:
                message = await self._pubsub.get_message(timeout=1.0)
            except (RedisError, OSError) as e:
                log.error("bus_subscriber_disconnected", url=self.url, error=str(e))
                await self._reset_pubsub()
                await asyncio.sleep(delay)
                continue

            if message is None or message.get("type") != "message":
                continue

            event = self._decode(message.get("data"))
            if event is not None:
                yield event

    def _decode(self, raw) -> ChangeEvent | None:
        try:
            return ChangeEvent.from_json(raw)
        except (ValidationError, TypeError) as e:
            log.warning("bus_message_malformed", channel=self.channel, error=str(e))
            return None

    async def ping(self) -> bool:
        if self._publisher is None:
            return False
        try:
            return bool(await self._publisher.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        self._closed = True
        await self._reset_pubsub()
        for client in (self._publisher, self._subscriber):
            if client is not None:
                await client.aclose()
        self._publisher = None
        self._subscriber = None
        log.info("bus_closed", url=self.url)
