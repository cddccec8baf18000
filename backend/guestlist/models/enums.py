"""Shared tagged variants used by models, schemas, services and import/export.

Every component validates against these definitions; nothing re-declares the
allowed values locally.
"""
import enum


class RSVPStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    declined = "declined"


# Values a guest may submit through the public RSVP flow
RSVP_ANSWERS = (RSVPStatus.confirmed, RSVPStatus.declined)


class DietaryPreference(str, enum.Enum):
    none = "none"
    vegetarian = "vegetarian"
    vegan = "vegan"
    kosher_regular = "kosher_regular"
    kosher_mehadrin = "kosher_mehadrin"


class RelationshipGroup(str, enum.Enum):
    family_bride = "family_bride"
    family_groom = "family_groom"
    friends = "friends"
    work = "work"
    community = "community"
    other = "other"


class EventStatus(str, enum.Enum):
    draft = "draft"
    published = "published"
    cancelled = "cancelled"
    completed = "completed"


EVENT_STATUS_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.draft: frozenset({EventStatus.published, EventStatus.cancelled}),
    EventStatus.published: frozenset({EventStatus.cancelled, EventStatus.completed}),
    EventStatus.completed: frozenset(),
    EventStatus.cancelled: frozenset(),
}


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    return target in EVENT_STATUS_TRANSITIONS[current]


class KashrutLevel(str, enum.Enum):
    none = "none"
    regular = "regular"
    mehadrin = "mehadrin"
    chalav_yisrael = "chalav_yisrael"


class EventLanguage(str, enum.Enum):
    hebrew = "hebrew"
    arabic = "arabic"
    english = "english"


class InvitationChannel(str, enum.Enum):
    whatsapp = "whatsapp"


class GuestSource(str, enum.Enum):
    registered = "registered"
    imported = "imported"


def parse_enum(enum_cls, value):
    """Return the enum member for value, or None when it is not a member."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return None
