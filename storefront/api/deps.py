# storefront/api/deps.py
from fastapi import BackgroundTasks, Depends, Header, HTTPException, Request

from storefront.domain.schemas import Principal
from storefront.services.broadcast import Broadcaster
from storefront.services.notification_service import EventNotifier, enqueue_order_messages


def get_principal(
    x_user_id: int = Header(..., gt=0),
    x_user_role: str = Header("user"),
) -> Principal:
    """Identity comes from the auth gateway in front of us, trusted as is."""
    if x_user_role not in ("user", "admin"):
        raise HTTPException(status_code=401, detail="Unknown role")
    return Principal(user_id=x_user_id, role=x_user_role)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin only.")
    return principal


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_message_dispatcher():
    return enqueue_order_messages


def get_notifier(
    background_tasks: BackgroundTasks,
    broadcaster: Broadcaster = Depends(get_broadcaster),
    dispatch_messages=Depends(get_message_dispatcher),
) -> EventNotifier:
    # publications run after the response has been sent
    return EventNotifier(broadcaster, background_tasks.add_task, dispatch_messages)
