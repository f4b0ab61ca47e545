from typing import Annotated, cast

from fastapi import Depends, Request

from topic_hub.core.push.gateway import PushGateway
from topic_hub.dal.push_store import RedisPushStore


def get_push_store(request: Request) -> RedisPushStore:
    return cast(RedisPushStore, request.app.state.push_store)


def get_push_gateway(request: Request) -> PushGateway:
    return cast(PushGateway, request.app.state.push_gateway)


PushStoreDep = Annotated[RedisPushStore, Depends(get_push_store)]
PushGatewayDep = Annotated[PushGateway, Depends(get_push_gateway)]
