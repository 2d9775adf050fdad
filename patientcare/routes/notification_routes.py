from fastapi import APIRouter, Depends, HTTPException, Query, status

from patientcare.core.errors import PersistenceError
from patientcare.models.notification import Notification
from patientcare.routes.dependencies import get_notifier, storage_unavailable
from patientcare.services.notifier import DOCTOR_ROLE, PATIENT_ROLE, StatusTransitionNotifier

router = APIRouter(tags=['notifications'])


@router.get('', response_model=list[Notification])
def list_notifications(
    user_id: str = Query(...),
    role: str = Query(default=PATIENT_ROLE),
    notifier: StatusTransitionNotifier = Depends(get_notifier),
):
    normalized_role = role.strip().lower()
    if normalized_role not in {PATIENT_ROLE, DOCTOR_ROLE}:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Role must be patient or doctor.',
        )

    try:
        return notifier.list_for(user_id.strip(), normalized_role)
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.post('/{notification_id}/read', status_code=status.HTTP_204_NO_CONTENT)
def mark_notification_read(
    notification_id: str,
    notifier: StatusTransitionNotifier = Depends(get_notifier),
):
    try:
        marked = notifier.mark_read(notification_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    if not marked:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Notification not found.',
        )
