from .bus import Event, EventBus, Subscription
from .photo_events import CropCommittedEvent, PetPhotoUpdatedEvent

__all__ = [
    "CropCommittedEvent",
    "Event",
    "EventBus",
    "PetPhotoUpdatedEvent",
    "Subscription",
]
