"""
NATS one-shot publishing

Fire-and-forget delivery over a fresh connection per message. A single
attempt walks a small state machine:

    IDLE -> CONNECTING -> PUBLISHING      -> DONE
                       -> FAILED_CONNECT  -> DONE
                       -> TIMED_OUT       -> DONE

The whole attempt, teardown included, runs under one deadline. Part of it
is set aside for closing the connection and connect plus publish get the
rest. Whichever edge reaches DONE first tears the connection down; the
teardown guard makes later edges no-ops, so the connection is released
exactly once.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from nats.aio.client import Client as NATS

logger = logging.getLogger(__name__)


class PublishState(str, Enum):
    """States of a single publish attempt"""
    IDLE = "idle"
    CONNECTING = "connecting"
    PUBLISHING = "publishing"
    FAILED_CONNECT = "failed_connect"
    TIMED_OUT = "timed_out"
    DONE = "done"


class PublishAttempt:
    """
    One best-effort publish of one payload to one subject.

    run() never raises for broker or network problems; inspect ``outcome``
    (the state that led to DONE) and ``error`` afterwards.
    """

    def __init__(
        self,
        url: str,
        subject: str,
        payload: bytes,
        timeout: float = 1.5,
        connect_timeout: float = 1.0,
    ):
        self.url = url
        self.subject = subject
        self.payload = payload
        self.timeout = timeout
        self.connect_timeout = connect_timeout

        self.state = PublishState.IDLE
        self.outcome: Optional[PublishState] = None
        self.error: Optional[BaseException] = None
        self.teardowns = 0

        self._client: Optional[NATS] = None
        self._finished = False

    @property
    def teardown_budget(self) -> float:
        """Share of the deadline reserved for closing the connection"""
        return min(self.connect_timeout, self.timeout / 3)

    async def run(self) -> PublishState:
        """Drive the attempt to DONE and return the terminating edge."""
        try:
            await asyncio.wait_for(self._connect_and_publish(), timeout=self.timeout - self.teardown_budget)
        except asyncio.TimeoutError:
            self.outcome = PublishState.TIMED_OUT
            self.state = PublishState.TIMED_OUT
            logger.warning(
                f"Publish to {self.subject} abandoned after {self.timeout}s ({self.url})"
            )
        finally:
            await self._finish()
        return self.outcome

    async def _connect_and_publish(self) -> None:
        self.state = PublishState.CONNECTING
        self._client = NATS()
        try:
            await self._client.connect(
                servers=[self.url],
                connect_timeout=self.connect_timeout,
                allow_reconnect=False,
                max_reconnect_attempts=0,
                error_cb=self._on_error,
            )
        except Exception as e:
            self.error = e
            self.outcome = PublishState.FAILED_CONNECT
            self.state = PublishState.FAILED_CONNECT
            logger.error(f"Failed to connect to NATS broker ({self.url}): {e}")
            return

        self.state = PublishState.PUBLISHING
        try:
            await self._client.publish(self.subject, self.payload)
            # flush round-trips a PING, which is the broker's receipt
            await self._client.flush(timeout=self.timeout)
        except Exception as e:
            self.error = e
            logger.error(f"Failed to publish on {self.subject}: {e}")
        self.outcome = PublishState.PUBLISHING

    async def _on_error(self, e: Exception) -> None:
        logger.debug(f"NATS client error ({self.url}): {e}")

    async def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self.state = PublishState.DONE

        client, self._client = self._client, None
        if client is None or client.is_closed:
            return

        self.teardowns += 1
        try:
            await asyncio.wait_for(client.close(), timeout=self.teardown_budget)
        except Exception as e:
            logger.debug(f"NATS teardown for {self.url} did not complete cleanly: {e}")


async def publish_once(
    url: str,
    subject: str,
    payload: bytes,
    timeout: float = 1.5,
    connect_timeout: float = 1.0,
) -> PublishAttempt:
    """Run a single PublishAttempt and return it for inspection."""
    attempt = PublishAttempt(url, subject, payload, timeout=timeout, connect_timeout=connect_timeout)
    await attempt.run()
    return attempt
