from fastapi import APIRouter, HTTPException

from topic_hub.core.exceptions import HandlerNotFound, PushUnsupported
from topic_hub.dal.datamodel.push_message import PushMessage
from topic_hub.dependencies.push_dep import PushGatewayDep, PushStoreDep

router = APIRouter(prefix="/push", tags=["Push"])


@router.post("")
async def queue_push(message: PushMessage, store: PushStoreDep):
    if not message.topic or not message.handler:
        raise HTTPException(status_code=400, detail="topic and handler are required")

    await store.publish(message)
    return {"queued": True, "topic": message.topic, "handler": message.handler}


@router.post("/sync")
async def push_now(message: PushMessage, gateway: PushGatewayDep):
    try:
        await gateway.push_message(message)
    except HandlerNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PushUnsupported as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"delivered": True, "topic": message.topic, "handler": message.handler}
