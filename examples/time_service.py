#!/usr/bin/env python3
"""Time service subscribed by naming convention.

Run a NATS server locally, then::

    python examples/time_service.py

``TimeService.NowMessageQueue`` answers requests on ``timeservice.now`` in the
``timeservice_now`` queue group and ``TimeService.TickMessage`` logs every
message published on ``timeservice.tick``.
"""

import asyncio
import time

from pydantic import BaseModel

from subly import NATSTransport, Subscriber
from subly.infrastructure.config import NATSConnectionConfig
from subly.infrastructure.simple_logger import SimpleLogger


class TimeRequest(BaseModel):
    zone: str = "UTC"


class TimeService:
    def __init__(self, transport: NATSTransport, logger: SimpleLogger):
        self.transport = transport
        self.logger = logger

    async def NowMessageQueue(self, subject: str, reply: str, req: TimeRequest) -> None:  # noqa: N802
        await self.transport.publish(reply, {"zone": req.zone, "now": time.time()})

    def TickMessage(self, tick: int) -> None:  # noqa: N802
        self.logger.info("Tick received", tick=tick)


async def main() -> None:
    logger = SimpleLogger(name="time-service")
    transport = NATSTransport(NATSConnectionConfig(name="time-service"), logger=logger)
    await transport.connect()

    cancel = asyncio.Event()
    subscriber = Subscriber(cancel, transport, logger)
    report = await subscriber.subscribe(TimeService(transport, logger))
    for outcome in report.outcomes:
        logger.info("Registered", subject=outcome.subject, queue=outcome.queue, ok=outcome.success)

    await transport.publish("timeservice.tick", 1)
    answer = await transport.request("timeservice.now", TimeRequest(zone="UTC"))
    logger.info("Time answered", answer=answer)

    cancel.set()
    await subscriber.drain(timeout=2.0)
    await transport.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
